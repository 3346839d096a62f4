"""Third-party-minting backend: names minted and indexed by a hosted service.

Existence, ownership and minting are delegated to a
:class:`~agent_naming.transport.minting.MintingClient`.  Text and address
reads are answered from the service's index rather than an on-chain
resolver call.

The client handle is created lazily by a factory on first use and shared
by every later call.  Initialisation is guarded by an
:class:`asyncio.Lock`, so concurrent first lookups build it exactly once.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from agent_naming.abi import find_fragment
from agent_naming.accounts import normalize_account
from agent_naming.backends.base import validate_create_input
from agent_naming.batch.builder import ETH_COIN_TYPE, encoded_call
from agent_naming.batch.calls import CallBatch
from agent_naming.errors import BatchConstructionError, ConfigurationError
from agent_naming.naming.convention import ROOT_SUFFIX, agent_full_name
from agent_naming.naming.namehash import node_hex
from agent_naming.transport.minting import (
    AddressRecord,
    MintingClient,
    MintRecords,
    MintRequest,
    SubnameRecord,
    TextRecord,
)

logger = logging.getLogger(__name__)

# Resolver handle for indexed names whose resolver the service does not report.
INDEX_RESOLVER = "index"


class MintingBackend:
    """Backend for chains whose subnames are minted by a third-party service.

    Parameters
    ----------
    chain_id:
        Chain the subnames are minted on.
    client_factory:
        Zero-argument callable returning the :class:`MintingClient`.  Called
        at most once, on first use.
    chain_name:
        Value written to the ``chain`` text record of minted names.
    resolver:
        Resolver reported for indexed names that carry none.
    name:
        Backend name used in logs and results.
    """

    def __init__(
        self,
        chain_id: int,
        client_factory: Callable[[], MintingClient],
        chain_name: str = "",
        resolver: Optional[str] = None,
        name: str = "minting",
    ) -> None:
        if client_factory is None:
            raise ConfigurationError("MintingBackend requires a client factory")
        self.chain_id = chain_id
        self.name = name
        self._client_factory = client_factory
        self._client: Optional[MintingClient] = None
        self._client_lock = asyncio.Lock()
        self._chain_name = chain_name
        self._resolver = resolver

    async def client(self) -> MintingClient:
        """Return the minting client, creating it on first call."""
        if self._client is not None:
            return self._client
        async with self._client_lock:
            if self._client is None:
                self._client = self._client_factory()
                logger.info("%s: minting client initialised for chain %d", self.name, self.chain_id)
        return self._client

    async def close(self) -> None:
        """Close the minting client if it was created and can be closed."""
        client, self._client = self._client, None
        close = getattr(client, "close", None)
        if close is not None:
            await close()

    async def _subname(self, node: bytes) -> Optional[SubnameRecord]:
        client = await self.client()
        return await client.get_subname(self.chain_id, node_hex(node))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def resolver_for(self, node: bytes) -> Optional[str]:
        subname = await self._subname(node)
        if subname is None:
            return None
        return normalize_account(subname.resolver) or self._resolver or INDEX_RESOLVER

    async def get_text(self, resolver: str, node: bytes, key: str) -> Optional[str]:
        subname = await self._subname(node)
        if subname is None:
            return None
        value = subname.texts.get(key, "").strip()
        return value or None

    async def get_address(self, resolver: str, node: bytes) -> Optional[str]:
        subname = await self._subname(node)
        if subname is None:
            return None
        return normalize_account(subname.addresses.get(str(ETH_COIN_TYPE))) or normalize_account(
            subname.owner
        )

    async def name_of(self, resolver: str, reverse_node: bytes) -> Optional[str]:
        # The service indexes forward subnames only.
        logger.debug("%s: no reverse records in the minting index", self.name)
        return None

    async def write_resolver(self, node: bytes) -> str:
        raise BatchConstructionError(
            "Records of minted names are written through the minting service"
        )

    async def is_available(self, full_name: str) -> bool:
        """Return the service's availability answer for *full_name*."""
        client = await self.client()
        return await client.is_label_available(full_name, self.chain_id)

    async def has_owner(self, org: str, agent: str) -> bool:
        full_name = agent_full_name(org, agent)
        if full_name is None:
            return False
        available = await self.is_available(full_name)
        logger.debug("%s: %s available=%s", self.name, full_name, available)
        return not available

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def mint_request(
        self,
        org: str,
        agent: str,
        owner: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> MintRequest:
        """Build the service's mint request; empty text values are omitted."""
        target = validate_create_input(org, agent, owner)
        texts = [
            TextRecord(key=key, value=value.strip())
            for key, value in (
                ("name", target.label),
                ("url", url),
                ("description", description),
                ("chain", self._chain_name),
                ("agent-account", target.owner),
            )
            if value and value.strip()
        ]
        return MintRequest(
            parent_name=f"{target.org}.{ROOT_SUFFIX}",
            label=target.label,
            owner=target.owner,
            minter_address=target.owner,
            records=MintRecords(
                texts=texts,
                addresses=[AddressRecord(chain=ETH_COIN_TYPE, value=target.owner)],
            ),
        )

    async def prepare_create_calls(
        self,
        org: str,
        agent: str,
        owner: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CallBatch:
        """Ask the service for mint parameters and encode them as one call.

        Raises
        ------
        BatchConstructionError
            If the input is invalid or the returned parameters cannot be encoded.
        TransportError
            If the service cannot be reached.
        """
        request = self.mint_request(org, agent, owner, url, description)
        client = await self.client()
        params = await client.get_mint_parameters(request)
        try:
            fragment = find_fragment(params.abi, params.function_name)
        except ValueError as exc:
            raise BatchConstructionError(str(exc)) from exc
        return CallBatch.of(
            [encoded_call(params.contract_address, fragment, params.args, params.value)]
        )
