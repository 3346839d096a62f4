"""The naming backend capability set.

A backend performs raw reads against one naming system and knows how to
build that system's registration batch.  Variants are independent classes
that satisfy :class:`NamingBackend`; none inherits from another.  Which
variant serves a chain is decided once by
:mod:`agent_naming.backends.selector`.

All reads return ``None`` for "not set" (including the zero address and
empty strings) and raise :class:`~agent_naming.errors.TransportError`
when the naming system cannot be reached.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, Optional, Protocol, Sequence, runtime_checkable

from agent_naming.accounts import normalize_account, require_account
from agent_naming.batch.calls import CallBatch
from agent_naming.errors import BatchConstructionError, CallRevertedError, TransportError
from agent_naming.naming.convention import agent_full_name, org_label, require_label
from agent_naming.transport.rpc import ContractReader

logger = logging.getLogger(__name__)


@runtime_checkable
class NamingBackend(Protocol):
    """Capability set implemented by every backend variant.

    ``resolver`` arguments are the value returned by :meth:`resolver_for`
    for the same node; variants that are not resolver-based ignore them.
    """

    name: str
    chain_id: int

    async def resolver_for(self, node: bytes) -> Optional[str]:
        """Return the resolver registered for *node*, or ``None``."""
        ...

    async def get_text(self, resolver: str, node: bytes, key: str) -> Optional[str]:
        """Return text record *key* of *node*, or ``None`` when unset."""
        ...

    async def get_address(self, resolver: str, node: bytes) -> Optional[str]:
        """Return the forward address of *node*, or ``None`` (never the zero address)."""
        ...

    async def name_of(self, resolver: str, reverse_node: bytes) -> Optional[str]:
        """Return the name recorded for a reverse node, or ``None``."""
        ...

    async def has_owner(self, org: str, agent: str) -> bool:
        """Return ``True`` when the agent subdomain of *org* is already claimed."""
        ...

    async def write_resolver(self, node: bytes) -> str:
        """Return the resolver that record writes for *node* should target.

        Raises :class:`~agent_naming.errors.BatchConstructionError` when the
        backend cannot write records for the node.
        """
        ...

    async def prepare_create_calls(
        self,
        org: str,
        agent: str,
        owner: str,
        url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CallBatch:
        """Build the batch that creates or updates the agent's naming records."""
        ...


async def guarded_read(backend: str, operation: str, read: Awaitable[Any]) -> Optional[Any]:
    """Await *read*, mapping a reverted call to ``None``.

    :class:`~agent_naming.errors.TransportError` from the reader is
    re-raised with *backend* filled in so callers can see which naming
    system failed.
    """
    try:
        return await read
    except CallRevertedError as exc:
        logger.debug("%s: %s reverted (%s), treating as unset", backend, operation, exc)
        return None
    except TransportError as exc:
        if exc.backend == backend:
            raise
        raise TransportError(backend, operation, exc.detail) from exc


async def read_account(
    reader: ContractReader,
    backend: str,
    address: str,
    fragment: Mapping[str, Any],
    args: Sequence[Any],
) -> Optional[str]:
    """Read an ``address``-typed function, mapping the zero sentinel to ``None``."""
    value = await guarded_read(
        backend, fragment["name"], reader.call(address, fragment, fragment["name"], args)
    )
    return normalize_account(value)


async def read_string(
    reader: ContractReader,
    backend: str,
    address: str,
    fragment: Mapping[str, Any],
    args: Sequence[Any],
) -> Optional[str]:
    """Read a ``string``-typed function, mapping empty/blank values to ``None``."""
    value = await guarded_read(
        backend, fragment["name"], reader.call(address, fragment, fragment["name"], args)
    )
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


@dataclass(frozen=True)
class CreateTarget:
    """Validated input of a create/update batch."""

    org: str
    label: str
    full_name: str
    owner: str


def validate_create_input(org: str, agent: str, owner: str) -> CreateTarget:
    """Validate the caller-supplied names and owner of a create batch.

    Runs before any read so that bad input fails without touching the
    network.

    Raises
    ------
    BatchConstructionError
        If the agent label, organisation or owner account is invalid.
    """
    try:
        label = require_label(agent, "agent name")
        owner_account = require_account(owner, "owner")
    except ValueError as exc:
        raise BatchConstructionError(str(exc)) from exc
    parent = org_label(org)
    full_name = agent_full_name(org, agent)
    if not parent or full_name is None:
        raise BatchConstructionError(f"Organisation {org!r} does not yield a valid parent name")
    return CreateTarget(org=parent, label=label, full_name=full_name, owner=owner_account)
