"""Multi-chain naming client.

:class:`AgentNamingClient` is the inbound surface used by callers such as
the CLI: every lookup and batch-preparation operation, keyed by chain id.
Backends and resolvers are built once from a :class:`NamingConfig` and
reused for the lifetime of the client.

Example
-------
::

    config = load_config("chains.json")
    async with AgentNamingClient(config) as client:
        result = await client.resolve_account(11155111, "atl-test-1.acme.eth")
        if result:
            print(result.value)
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from agent_naming.backends.selector import (
    BackendRegistry,
    ChainBackends,
    MintingClientFactory,
    ReaderFactory,
    default_minting_client_factory,
    default_reader_factory,
)
from agent_naming.batch.builder import build_identity_batch, build_text_batch
from agent_naming.batch.calls import CallBatch
from agent_naming.codec.identity import AgentIdentityRecord
from agent_naming.config import NamingConfig
from agent_naming.errors import BatchConstructionError
from agent_naming.naming.convention import normalize_name
from agent_naming.naming.namehash import namehash
from agent_naming.resolution.chain import ChainResolver
from agent_naming.resolution.engine import AccountIdentity
from agent_naming.resolution.result import ResolutionResult

logger = logging.getLogger(__name__)


class AgentNamingClient:
    """Resolve and prepare agent naming updates across configured chains.

    Parameters
    ----------
    config:
        Validated per-chain configuration.
    reader_factory:
        Builds each chain's contract reader (defaults to web3 over the
        chain's ``rpc_url``).
    minting_client_factory:
        Builds a chain's minting client on first use.
    include_registrar_records:
        When ``True``, registrar create batches also carry address and text
        record calls.
    logger:
        Observability hook passed to every chain resolver.

    Raises
    ------
    ConfigurationError
        If a chain configures no usable naming backend.
    """

    def __init__(
        self,
        config: NamingConfig,
        reader_factory: ReaderFactory = default_reader_factory,
        minting_client_factory: MintingClientFactory = default_minting_client_factory,
        include_registrar_records: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._registry = BackendRegistry.from_config(
            config,
            reader_factory=reader_factory,
            minting_client_factory=minting_client_factory,
            include_registrar_records=include_registrar_records,
        )
        self._resolvers: Mapping[int, ChainResolver] = {
            chain_id: ChainResolver(backends.ordered, logger)
            for chain_id, backends in self._registry.chains.items()
        }

    async def __aenter__(self) -> "AgentNamingClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Release lazily created third-party client handles."""
        for backends in self._registry.chains.values():
            for backend in backends.ordered:
                close = getattr(backend, "close", None)
                if close is not None:
                    await close()

    @property
    def config(self) -> NamingConfig:
        return self._config

    @property
    def chain_ids(self) -> list[int]:
        return sorted(self._resolvers)

    def backends(self, chain_id: int) -> ChainBackends:
        """Return the backends serving *chain_id* (raises ``UnknownChainError``)."""
        return self._registry.get(chain_id)

    def resolver(self, chain_id: int) -> ChainResolver:
        """Return the fallback resolver of *chain_id* (raises ``UnknownChainError``)."""
        self._registry.get(chain_id)
        return self._resolvers[chain_id]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def resolve_account(self, chain_id: int, name: str) -> ResolutionResult[str]:
        return await self.resolver(chain_id).resolve_account(name)

    async def resolve_identity(
        self, chain_id: int, name: str
    ) -> ResolutionResult[AgentIdentityRecord]:
        return await self.resolver(chain_id).resolve_identity(name)

    async def resolve_text(self, chain_id: int, name: str, key: str) -> ResolutionResult[str]:
        return await self.resolver(chain_id).resolve_text(name, key)

    async def resolve_name(self, chain_id: int, account: str) -> ResolutionResult[str]:
        return await self.resolver(chain_id).resolve_name(account)

    async def resolve_identity_by_account(
        self, chain_id: int, account: str
    ) -> ResolutionResult[AccountIdentity]:
        return await self.resolver(chain_id).resolve_identity_by_account(account)

    async def has_owner(self, chain_id: int, org: str, agent: str) -> bool:
        return await self.resolver(chain_id).has_owner(org, agent)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def prepare_create_calls(
        self,
        chain_id: int,
        org: str,
        agent: str,
        owner: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CallBatch:
        """Build the create/update batch with the chain's writing backend."""
        writer = self.backends(chain_id).writer
        logger.debug("chain %d: create batch via %s", chain_id, writer.name)
        return await writer.prepare_create_calls(org, agent, owner, url, description)

    async def _record_resolver(self, chain_id: int, name: str) -> tuple[str, str]:
        normalized = normalize_name(name)
        if normalized is None:
            raise BatchConstructionError(f"{name!r} is not a valid name")
        backends = self.backends(chain_id)
        candidates = [backends.writer] + [b for b in backends.ordered if b is not backends.writer]
        failure = BatchConstructionError(f"no backend on chain {chain_id} can write {normalized}")
        for backend in candidates:
            try:
                return normalized, await backend.write_resolver(namehash(normalized))
            except BatchConstructionError as exc:
                failure = exc
        raise failure

    async def prepare_set_identity_calls(
        self,
        chain_id: int,
        name: str,
        agent_id: int,
        registry: Optional[str] = None,
        identity_chain_id: Optional[int] = None,
    ) -> CallBatch:
        """Build the ``setText(node, "agent-identity", ...)`` batch for *name*.

        Parameters
        ----------
        chain_id:
            Chain whose naming records are written.
        name:
            Full agent name.
        agent_id:
            Identity id inside the registry.
        registry:
            Identity registry address; defaults to the chain's
            ``identity_registry``.
        identity_chain_id:
            Chain the identity registry lives on; defaults to *chain_id*.

        Raises
        ------
        BatchConstructionError
            If no registry is known, the record is out of range, or no
            backend can write records for the name.
        """
        registry = registry or self._config.chain(chain_id).identity_registry
        if registry is None:
            raise BatchConstructionError(
                f"chain {chain_id} has no identity_registry and none was given"
            )
        try:
            record = AgentIdentityRecord(
                chain_id=chain_id if identity_chain_id is None else identity_chain_id,
                registry=registry,
                agent_id=agent_id,
            )
        except ValueError as exc:
            raise BatchConstructionError(str(exc)) from exc
        normalized, resolver = await self._record_resolver(chain_id, name)
        return build_identity_batch(resolver, normalized, record)

    async def prepare_text_calls(
        self, chain_id: int, name: str, records: Mapping[str, Optional[str]]
    ) -> CallBatch:
        """Build one ``setText`` per non-empty entry of *records*."""
        normalized, resolver = await self._record_resolver(chain_id, name)
        return build_text_batch(resolver, normalized, records)
