"""Resolution outcomes.

Every lookup returns a :class:`ResolutionResult`: either found, carrying
the value, or not found, carrying a short reason.  Transport failures are
not results; they propagate as :class:`~agent_naming.errors.TransportError`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ResolutionResult(Generic[T]):
    """Result of a forward or reverse lookup.

    Parameters
    ----------
    found:
        ``True`` when the lookup produced a value.
    value:
        The account, name or identity record; ``None`` when not found.
    backend:
        Name of the backend that produced the answer (or the last one asked).
    reason:
        Why nothing was found, ``None`` when ``found`` is ``True``.
    unchecked:
        Backends that could not be asked because of a transport failure.
        Only a multi-backend lookup that still got an answer from another
        backend reports them here instead of raising.
    """

    found: bool
    value: Optional[T] = None
    backend: Optional[str] = None
    reason: Optional[str] = None
    unchecked: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.found

    def unwrap(self) -> T:
        """Return the value, raising ``LookupError`` when not found."""
        if not self.found or self.value is None:
            raise LookupError(self.reason or "not found")
        return self.value


def found(value: T, backend: Optional[str] = None) -> ResolutionResult[T]:
    """Build a found result."""
    return ResolutionResult(found=True, value=value, backend=backend)


def not_found(reason: str, backend: Optional[str] = None) -> ResolutionResult[T]:
    """Build a not-found result."""
    return ResolutionResult(found=False, backend=backend, reason=reason)
