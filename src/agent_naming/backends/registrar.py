"""Custom-registrar backend: a purpose-built per-chain registrar contract.

Subdomains are created through a registrar exposing ``available(label)``
and ``register(label, owner)``.  Address and text records live on an L2
registry that also implements the standard resolver functions, so reads
go straight to that contract.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from agent_naming import abi
from agent_naming.backends.base import guarded_read, read_account, read_string, validate_create_input
from agent_naming.batch.builder import build_registrar_create_batch, evm_coin_type
from agent_naming.batch.calls import CallBatch
from agent_naming.errors import ConfigurationError
from agent_naming.naming.convention import is_valid_label, to_label
from agent_naming.transport.rpc import ContractReader

logger = logging.getLogger(__name__)


class RegistrarBackend:
    """Backend for chains served by a dedicated registrar contract.

    Parameters
    ----------
    chain_id:
        Chain the registrar lives on.
    reader:
        Read-only contract access for the chain.
    registrar:
        Registrar contract exposing ``available`` and ``register``.
    registry:
        L2 registry/resolver holding the records of registered names.
    include_records:
        When ``True`` the create batch also writes the chain's address
        record and the url/description text records after ``register``.
    name:
        Backend name used in logs and results.

    Raises
    ------
    ConfigurationError
        If *registrar* or *registry* is empty.
    """

    def __init__(
        self,
        chain_id: int,
        reader: ContractReader,
        registrar: str,
        registry: str,
        include_records: bool = False,
        name: str = "registrar",
    ) -> None:
        if not registrar or not registry:
            raise ConfigurationError("RegistrarBackend requires registrar and registry addresses")
        self.chain_id = chain_id
        self.name = name
        self._reader = reader
        self._registrar = registrar
        self._registry = registry
        self._include_records = include_records

    @property
    def registrar(self) -> str:
        return self._registrar

    @property
    def registry(self) -> str:
        return self._registry

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def resolver_for(self, node: bytes) -> Optional[str]:
        # The L2 registry is its own resolver for every name it holds.
        return self._registry

    async def get_text(self, resolver: str, node: bytes, key: str) -> Optional[str]:
        return await read_string(self._reader, self.name, resolver, abi.RESOLVER_TEXT, [node, key])

    async def get_address(self, resolver: str, node: bytes) -> Optional[str]:
        return await read_account(self._reader, self.name, resolver, abi.RESOLVER_ADDR, [node])

    async def name_of(self, resolver: str, reverse_node: bytes) -> Optional[str]:
        return await read_string(
            self._reader, self.name, resolver, abi.RESOLVER_NAME, [reverse_node]
        )

    async def write_resolver(self, node: bytes) -> str:
        return self._registry

    async def is_available(self, label: str) -> bool:
        """Return the registrar's ``available(label)`` answer.

        A reverted call is reported as available: the registrar has no
        record that claims the label.
        """
        available = await guarded_read(
            self.name,
            "available",
            self._reader.call(self._registrar, abi.REGISTRAR_AVAILABLE, "available", [label]),
        )
        return available is None or bool(available)

    async def has_owner(self, org: str, agent: str) -> bool:
        label = to_label(agent)
        if not is_valid_label(label):
            return False
        available = await self.is_available(label)
        logger.debug("%s: label %r available=%s", self.name, label, available)
        return not available

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def prepare_create_calls(
        self,
        org: str,
        agent: str,
        owner: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CallBatch:
        """Build ``[register, setAddr(coin)?, setText(url)?, setText(description)?]``.

        Records after ``register`` are only emitted when the backend was
        constructed with ``include_records=True``.
        """
        target = validate_create_input(org, agent, owner)
        coin_types: Iterable[int] = ()
        texts: dict[str, Optional[str]] = {}
        if self._include_records:
            coin_types = (evm_coin_type(self.chain_id),)
            texts = {"url": url, "description": description}
        return build_registrar_create_batch(
            registrar=self._registrar,
            label=target.label,
            owner=target.owner,
            resolver=self._registry,
            full_name=target.full_name,
            coin_types=coin_types,
            texts=texts,
        )

