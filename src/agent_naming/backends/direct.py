"""Direct backend: a naming registry plus standard resolvers, read over RPC.

This is the default backend for the root (L1) chain.  Every read first
asks the registry for the node's resolver and then calls the standard
resolver functions (``addr``, ``text``, ``name``) on it.
"""
from __future__ import annotations

import logging
from typing import Optional

from agent_naming import abi
from agent_naming.backends.base import read_account, read_string, validate_create_input
from agent_naming.batch.builder import build_direct_create_batch
from agent_naming.batch.calls import CallBatch
from agent_naming.errors import BatchConstructionError, ConfigurationError
from agent_naming.naming.convention import agent_full_name
from agent_naming.naming.namehash import BASE_REVERSE_NODE, namehash
from agent_naming.transport.rpc import ContractReader

logger = logging.getLogger(__name__)


class DirectBackend:
    """Backend that reads a naming registry and its resolvers directly.

    Parameters
    ----------
    chain_id:
        Chain the registry lives on.
    reader:
        Read-only contract access for the chain.
    registry:
        Naming registry address.
    default_resolver:
        Resolver used as the write target for a name whose resolver is not
        registered yet.  Optional for read-only use.
    reverse_registrar:
        Reverse registrar address.  When omitted it is read from the
        registry as the owner of ``addr.reverse``.
    name:
        Backend name used in logs and results.

    Raises
    ------
    ConfigurationError
        If *registry* is empty.
    """

    def __init__(
        self,
        chain_id: int,
        reader: ContractReader,
        registry: str,
        default_resolver: Optional[str] = None,
        reverse_registrar: Optional[str] = None,
        name: str = "direct",
    ) -> None:
        if not registry:
            raise ConfigurationError("DirectBackend requires a registry address")
        self.chain_id = chain_id
        self.name = name
        self._reader = reader
        self._registry = registry
        self._default_resolver = default_resolver
        self._reverse_registrar = reverse_registrar

    @property
    def registry(self) -> str:
        return self._registry

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def resolver_for(self, node: bytes) -> Optional[str]:
        return await read_account(
            self._reader, self.name, self._registry, abi.REGISTRY_RESOLVER, [node]
        )

    async def owner_of(self, node: bytes) -> Optional[str]:
        """Return the registry owner of *node*, or ``None``."""
        return await read_account(
            self._reader, self.name, self._registry, abi.REGISTRY_OWNER, [node]
        )

    async def get_text(self, resolver: str, node: bytes, key: str) -> Optional[str]:
        return await read_string(self._reader, self.name, resolver, abi.RESOLVER_TEXT, [node, key])

    async def get_address(self, resolver: str, node: bytes) -> Optional[str]:
        return await read_account(self._reader, self.name, resolver, abi.RESOLVER_ADDR, [node])

    async def name_of(self, resolver: str, reverse_node: bytes) -> Optional[str]:
        return await read_string(
            self._reader, self.name, resolver, abi.RESOLVER_NAME, [reverse_node]
        )

    async def has_owner(self, org: str, agent: str) -> bool:
        full_name = agent_full_name(org, agent)
        if full_name is None:
            return False
        owner = await self.owner_of(namehash(full_name))
        logger.debug("%s: %s %s", self.name, full_name, "has owner" if owner else "has no owner")
        return owner is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def write_resolver(self, node: bytes) -> str:
        """Return the resolver write calls for *node* should target.

        Raises
        ------
        BatchConstructionError
            If the node has no resolver and no default resolver is configured.
        """
        resolver = await self.resolver_for(node) or self._default_resolver
        if resolver is None:
            raise BatchConstructionError(
                f"No resolver is registered for node 0x{node.hex()} and "
                "no default resolver is configured"
            )
        return resolver

    async def reverse_registrar(self) -> str:
        """Return the reverse registrar, reading it from the registry if not configured.

        Raises
        ------
        BatchConstructionError
            If the registry has no owner for ``addr.reverse``.
        """
        if self._reverse_registrar is not None:
            return self._reverse_registrar
        registrar = await self.owner_of(BASE_REVERSE_NODE)
        if registrar is None:
            raise BatchConstructionError("The registry has no reverse registrar for addr.reverse")
        return registrar

    async def prepare_create_calls(
        self,
        org: str,
        agent: str,
        owner: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CallBatch:
        """Build ``[setAddr, setText(url)?, setText(description)?, setName]``.

        Input is validated before any read is issued.

        Raises
        ------
        BatchConstructionError
            If the names are invalid or a write target cannot be determined.
        """
        target = validate_create_input(org, agent, owner)
        node = namehash(target.full_name)
        resolver = await self.write_resolver(node)
        reverse_registrar = await self.reverse_registrar()
        return build_direct_create_batch(
            resolver=resolver,
            reverse_registrar=reverse_registrar,
            full_name=target.full_name,
            owner=target.owner,
            url=url,
            description=description,
        )

