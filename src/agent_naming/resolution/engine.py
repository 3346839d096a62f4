"""Resolution engine: forward and reverse lookups over one naming backend.

Forward (``resolve_account``, ``resolve_identity``, ``resolve_text``)::

    name -> normalize -> node -> resolver_for(node) -> addr / text

Reverse (``resolve_name``)::

    account -> <hex>.addr.reverse -> node -> resolver_for(node) -> name

Each step that yields nothing ends the lookup with a not-found result
whose ``reason`` names the step.  Transport failures propagate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from agent_naming.accounts import normalize_account
from agent_naming.backends.base import NamingBackend
from agent_naming.codec.identity import (
    IDENTITY_TEXT_KEY,
    AgentIdentityRecord,
    decode_agent_identity,
)
from agent_naming.naming.convention import normalize_name
from agent_naming.naming.namehash import namehash, reverse_node
from agent_naming.resolution.result import ResolutionResult, found, not_found

_logger = logging.getLogger(__name__)

# Text keys readable through resolve_text.
TEXT_KEYS = ("url", "description", "avatar")


@dataclass(frozen=True)
class AccountIdentity:
    """Name and identity record recovered for an account."""

    name: str
    identity: AgentIdentityRecord


class ResolutionEngine:
    """Forward and reverse lookups on top of a single :class:`NamingBackend`.

    Parameters
    ----------
    backend:
        The naming backend to query.
    logger:
        Where not-found reasons are reported at DEBUG level.  Defaults to
        this module's logger.
    """

    def __init__(self, backend: NamingBackend, logger: Optional[logging.Logger] = None) -> None:
        self._backend = backend
        self._logger = logger or _logger

    @property
    def backend(self) -> NamingBackend:
        return self._backend

    def _miss(self, reason: str) -> ResolutionResult:
        self._logger.debug("%s: not found: %s", self._backend.name, reason)
        return not_found(reason, self._backend.name)

    # ------------------------------------------------------------------
    # Forward
    # ------------------------------------------------------------------

    async def resolve_account(self, name: str) -> ResolutionResult[str]:
        """Resolve *name* to the account its resolver's ``addr`` record holds."""
        normalized = normalize_name(name)
        if normalized is None:
            return self._miss(f"{name!r} is not a valid name")
        node = namehash(normalized)
        resolver = await self._backend.resolver_for(node)
        if resolver is None:
            return self._miss(f"no resolver for {normalized}")
        account = await self._backend.get_address(resolver, node)
        if account is None:
            return self._miss(f"no address record for {normalized}")
        return found(account, self._backend.name)

    async def resolve_text(self, name: str, key: str) -> ResolutionResult[str]:
        """Resolve text record *key* of *name*; blank values are not found."""
        normalized = normalize_name(name)
        if normalized is None:
            return self._miss(f"{name!r} is not a valid name")
        node = namehash(normalized)
        resolver = await self._backend.resolver_for(node)
        if resolver is None:
            return self._miss(f"no resolver for {normalized}")
        value = await self._backend.get_text(resolver, node, key)
        if value is None:
            return self._miss(f"no {key!r} text record for {normalized}")
        return found(value, self._backend.name)

    async def resolve_identity(self, name: str) -> ResolutionResult[AgentIdentityRecord]:
        """Resolve and decode the ``agent-identity`` text record of *name*.

        A value that does not decode is not found, not an error.
        """
        text = await self.resolve_text(name, IDENTITY_TEXT_KEY)
        if not text.found:
            return text  # type: ignore[return-value]
        record = decode_agent_identity(text.value)
        if record is None:
            return self._miss(f"undecodable {IDENTITY_TEXT_KEY} value for {name!r}")
        return found(record, self._backend.name)

    # ------------------------------------------------------------------
    # Reverse
    # ------------------------------------------------------------------

    async def resolve_name(self, account: str) -> ResolutionResult[str]:
        """Resolve *account* to its reverse-registered name (normalized)."""
        normalized_account = normalize_account(account)
        if normalized_account is None:
            return self._miss(f"{account!r} is not a resolvable account")
        node = reverse_node(normalized_account)
        resolver = await self._backend.resolver_for(node)
        if resolver is None:
            return self._miss(f"no reverse resolver for {normalized_account}")
        name = normalize_name(await self._backend.name_of(resolver, node))
        if name is None:
            return self._miss(f"no reverse name for {normalized_account}")
        return found(name, self._backend.name)

    async def resolve_identity_by_account(
        self, account: str
    ) -> ResolutionResult[AccountIdentity]:
        """Reverse-resolve *account*, then resolve the identity of the name found."""
        name = await self.resolve_name(account)
        if not name.found or name.value is None:
            return name  # type: ignore[return-value]
        identity = await self.resolve_identity(name.value)
        if not identity.found or identity.value is None:
            return identity  # type: ignore[return-value]
        return found(AccountIdentity(name=name.value, identity=identity.value), self._backend.name)

    # ------------------------------------------------------------------
    # Existence
    # ------------------------------------------------------------------

    async def has_owner(self, org: str, agent: str) -> bool:
        """Return ``True`` when the agent subdomain of *org* is already claimed."""
        return await self._backend.has_owner(org, agent)
