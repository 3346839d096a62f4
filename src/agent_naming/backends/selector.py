"""Backend selector: which naming backends answer a given chain.

Selection is decided once per chain from its :class:`~agent_naming.config.ChainConfig`:

1. A configured naming registry yields a :class:`DirectBackend`, which
   is always the primary.
2. A custom registrar (configured, or known for the chain) yields a
   :class:`RegistrarBackend` as the secondary.
3. Otherwise a minting service URL yields a :class:`MintingBackend` as
   the secondary.

A chain without a registry is served by its secondary alone.  The
backend that builds create batches is the secondary when there is one,
since L2 names are created through the registrar or minting service.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from agent_naming.backends.base import NamingBackend
from agent_naming.backends.direct import DirectBackend
from agent_naming.backends.minting import MintingBackend
from agent_naming.backends.registrar import RegistrarBackend
from agent_naming.config import ChainConfig, NamingConfig
from agent_naming.errors import ConfigurationError, UnknownChainError
from agent_naming.transport.minting import HttpMintingClient, MintingClient
from agent_naming.transport.rpc import ContractReader, Web3ContractReader

logger = logging.getLogger(__name__)

ReaderFactory = Callable[[ChainConfig], ContractReader]
MintingClientFactory = Callable[[ChainConfig], MintingClient]


def default_reader_factory(chain: ChainConfig) -> ContractReader:
    return Web3ContractReader(chain.rpc_url)


def default_minting_client_factory(chain: ChainConfig) -> MintingClient:
    if not chain.minting_api_url:
        raise ConfigurationError(f"chain {chain.chain_id} has no minting_api_url")
    return HttpMintingClient(chain.minting_api_url)


@dataclass(frozen=True)
class ChainBackends:
    """The backends serving one chain, in priority order.

    Parameters
    ----------
    chain:
        The chain's configuration.
    primary:
        First backend asked for every lookup.
    secondary:
        Fallback backend, or ``None``.
    """

    chain: ChainConfig
    primary: NamingBackend
    secondary: Optional[NamingBackend] = None

    @property
    def ordered(self) -> list[NamingBackend]:
        """Backends in lookup order."""
        return [b for b in (self.primary, self.secondary) if b is not None]

    @property
    def writer(self) -> NamingBackend:
        """Backend used to build create batches."""
        return self.secondary if self.secondary is not None else self.primary


def select_backends(
    chain: ChainConfig,
    reader_factory: ReaderFactory = default_reader_factory,
    minting_client_factory: MintingClientFactory = default_minting_client_factory,
    include_registrar_records: bool = False,
) -> ChainBackends:
    """Build the :class:`ChainBackends` for *chain*.

    Parameters
    ----------
    chain:
        Validated chain configuration.
    reader_factory:
        Builds the chain's :class:`ContractReader`; called once and shared
        by the on-chain backends.
    minting_client_factory:
        Builds the minting client.  Invoked lazily by the minting backend
        on first use, never here.
    include_registrar_records:
        Passed to :class:`RegistrarBackend` as ``include_records``.

    Raises
    ------
    ConfigurationError
        If the chain configures no usable naming system.
    """
    reader: Optional[ContractReader] = None

    def shared_reader() -> ContractReader:
        nonlocal reader
        if reader is None:
            reader = reader_factory(chain)
        return reader

    direct: Optional[NamingBackend] = None
    if chain.ens_registry is not None:
        direct = DirectBackend(
            chain_id=chain.chain_id,
            reader=shared_reader(),
            registry=chain.ens_registry,
            default_resolver=chain.ens_resolver,
            reverse_registrar=chain.reverse_registrar,
        )

    secondary: Optional[NamingBackend] = None
    if chain.registrar is not None and chain.registrar_registry is not None:
        secondary = RegistrarBackend(
            chain_id=chain.chain_id,
            reader=shared_reader(),
            registrar=chain.registrar,
            registry=chain.registrar_registry,
            include_records=include_registrar_records,
        )
    elif chain.minting_api_url:
        secondary = MintingBackend(
            chain_id=chain.chain_id,
            client_factory=lambda: minting_client_factory(chain),
            chain_name=chain.chain_slug,
            resolver=chain.ens_resolver,
        )

    if direct is not None:
        backends = ChainBackends(chain=chain, primary=direct, secondary=secondary)
    elif secondary is not None:
        backends = ChainBackends(chain=chain, primary=secondary)
    else:
        raise ConfigurationError(f"chain {chain.chain_id} configures no naming backend")
    logger.debug(
        "chain %d: backends %s",
        chain.chain_id,
        [backend.name for backend in backends.ordered],
    )
    return backends


@dataclass
class BackendRegistry:
    """Per-chain backends, constructed once and reused for the process lifetime.

    Build with :meth:`from_config`; lookups never mutate the registry, so
    concurrent readers may share it.
    """

    chains: Mapping[int, ChainBackends] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        config: NamingConfig,
        reader_factory: ReaderFactory = default_reader_factory,
        minting_client_factory: MintingClientFactory = default_minting_client_factory,
        include_registrar_records: bool = False,
    ) -> "BackendRegistry":
        return cls(
            chains={
                chain.chain_id: select_backends(
                    chain, reader_factory, minting_client_factory, include_registrar_records
                )
                for chain in config.chains
            }
        )

    def get(self, chain_id: int) -> ChainBackends:
        """Return the backends of *chain_id*.

        Raises
        ------
        UnknownChainError
            If the chain has no backends.
        """
        try:
            return self.chains[chain_id]
        except KeyError:
            raise UnknownChainError(chain_id) from None

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self.chains

    def __len__(self) -> int:
        return len(self.chains)
