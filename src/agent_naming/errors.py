"""Exception hierarchy for agent-naming.

Absence is never an error in this package: read operations return
``None`` or a not-found :class:`~agent_naming.resolution.result.ResolutionResult`.
The exceptions below cover the remaining outcomes:

``TransportError``
    The RPC endpoint or third-party API could not be reached or answered
    with an error.  Always propagated so callers can tell "no record" apart
    from "could not check".
``CallRevertedError``
    A contract read reverted or returned no data.  Backends turn this into
    absence; it does not escape a read operation.
``ConfigurationError`` / ``UnknownChainError``
    Invalid or missing configuration, raised at construction time.
``BatchConstructionError``
    Invalid caller input on a write path (labels, accounts, targets).
"""
from __future__ import annotations


class NamingError(Exception):
    """Base class for all errors raised by agent-naming."""


class TransportError(NamingError):
    """Raised when a network read against a naming backend fails.

    Parameters
    ----------
    backend:
        Short name of the backend that issued the read.
    operation:
        The operation that failed (e.g. ``"resolver"``, ``"is_label_available"``).
    detail:
        Description of the underlying failure.
    """

    def __init__(self, backend: str, operation: str, detail: str) -> None:
        self.backend = backend
        self.operation = operation
        self.detail = detail
        super().__init__(
            f"Transport failure in backend {backend!r} during {operation!r}: {detail}"
        )


class CallRevertedError(NamingError):
    """Raised by a contract reader when a read reverts or returns no data."""

    def __init__(self, address: str, function_name: str, detail: str = "") -> None:
        self.address = address
        self.function_name = function_name
        message = f"Call to {function_name}() on {address} reverted"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigurationError(NamingError, ValueError):
    """Raised when backend or chain configuration is invalid or incomplete."""


class UnknownChainError(ConfigurationError, KeyError):
    """Raised when no naming backends are configured for a chain id."""

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(
            f"No naming backends are configured for chain {chain_id}. "
            "Add the chain to the naming configuration first."
        )

    def __str__(self) -> str:
        return str(self.args[0])


class BatchConstructionError(NamingError, ValueError):
    """Raised when a call batch cannot be built from the supplied input."""
