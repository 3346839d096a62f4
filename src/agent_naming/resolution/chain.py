"""Per-chain resolution across several backends, in priority order.

The primary backend is asked first; when it answers "not found" the
secondary is asked.  The first found result wins, without reconciling
disagreement between backends.

A transport failure on one backend is logged at WARNING and that backend
is skipped, so a later backend still gets to answer.  When every backend
failed at the transport level the failure is raised.  When some backend
failed and the others found nothing, the not-found result names the
skipped backends in ``unchecked`` and in its ``reason``, so "no record"
stays distinguishable from "could not check everywhere".
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from agent_naming.backends.base import NamingBackend
from agent_naming.codec.identity import AgentIdentityRecord
from agent_naming.errors import TransportError
from agent_naming.resolution.engine import AccountIdentity, ResolutionEngine
from agent_naming.resolution.result import ResolutionResult

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChainResolver:
    """Fallback resolution over the ordered backends of one chain.

    Parameters
    ----------
    backends:
        Backends in priority order; must not be empty.
    logger:
        Observability hook for not-found reasons and per-backend transport
        failures.  Defaults to this module's logger.

    Raises
    ------
    ValueError
        If *backends* is empty.
    """

    def __init__(
        self, backends: Sequence[NamingBackend], logger: Optional[logging.Logger] = None
    ) -> None:
        if not backends:
            raise ValueError("ChainResolver needs at least one backend")
        self._logger = logger or _logger
        self._engines = [ResolutionEngine(backend, self._logger) for backend in backends]

    @property
    def backends(self) -> list[NamingBackend]:
        return [engine.backend for engine in self._engines]

    async def _first_found(
        self,
        operation: str,
        lookup: Callable[[ResolutionEngine], Awaitable[ResolutionResult[T]]],
    ) -> ResolutionResult[T]:
        last: Optional[ResolutionResult[T]] = None
        failures: list[tuple[str, TransportError]] = []
        for engine in self._engines:
            try:
                result = await lookup(engine)
            except TransportError as exc:
                self._logger.warning(
                    "%s failed on backend %s, trying next backend: %s",
                    operation,
                    engine.backend.name,
                    exc,
                )
                failures.append((engine.backend.name, exc))
                continue
            if result.found:
                return result
            last = result
        if last is None:
            raise failures[-1][1]
        if not failures:
            return last
        unchecked = tuple(name for name, _ in failures)
        return replace(
            last,
            reason=f"{last.reason}; not checked on {', '.join(unchecked)} (transport failure)",
            unchecked=unchecked,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def resolve_account(self, name: str) -> ResolutionResult[str]:
        return await self._first_found("resolve_account", lambda e: e.resolve_account(name))

    async def resolve_identity(self, name: str) -> ResolutionResult[AgentIdentityRecord]:
        return await self._first_found("resolve_identity", lambda e: e.resolve_identity(name))

    async def resolve_text(self, name: str, key: str) -> ResolutionResult[str]:
        return await self._first_found("resolve_text", lambda e: e.resolve_text(name, key))

    async def resolve_name(self, account: str) -> ResolutionResult[str]:
        return await self._first_found("resolve_name", lambda e: e.resolve_name(account))

    async def resolve_identity_by_account(self, account: str) -> ResolutionResult[AccountIdentity]:
        return await self._first_found(
            "resolve_identity_by_account", lambda e: e.resolve_identity_by_account(account)
        )

    async def has_owner(self, org: str, agent: str) -> bool:
        """Return ``True`` as soon as any backend reports the subdomain as claimed.

        A backend that fails at the transport level is skipped with a
        warning; ``False`` then reflects the backends that answered.

        Raises
        ------
        TransportError
            If every backend failed to answer.
        """
        answered = False
        failure: Optional[TransportError] = None
        for engine in self._engines:
            try:
                if await engine.has_owner(org, agent):
                    return True
                answered = True
            except TransportError as exc:
                self._logger.warning(
                    "has_owner failed on backend %s, trying next backend: %s",
                    engine.backend.name,
                    exc,
                )
                failure = exc
        if not answered and failure is not None:
            raise failure
        return False
