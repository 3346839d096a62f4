"""Call descriptors and ordered call batches.

A :class:`CallBatch` is the whole contract with the submission layer:
an ordered list of ``{to, data, value}`` descriptors that together apply
one logical naming update.  Nothing here knows about gas, nonces or
signatures.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from agent_naming.accounts import normalize_account


@dataclass(frozen=True)
class CallDescriptor:
    """A single external call.

    Parameters
    ----------
    to:
        Checksummed destination account.
    data:
        ABI-encoded call data (selector followed by arguments).
    value:
        Native value to attach, in wei.
    label:
        Short human-readable description (``"setText(url)"``); not
        submitted, used for display and logs only.
    """

    to: str
    data: bytes
    value: int = 0
    label: str = ""

    def __post_init__(self) -> None:
        to = normalize_account(self.to)
        if to is None:
            raise ValueError(f"Call destination must be a non-zero account, got {self.to!r}")
        object.__setattr__(self, "to", to)
        if self.value < 0:
            raise ValueError(f"Call value must be unsigned, got {self.value}")

    @property
    def data_hex(self) -> str:
        return "0x" + self.data.hex()

    def to_dict(self) -> dict[str, object]:
        """Serialize to the ``{to, data, value}`` wire shape (value as a decimal string)."""
        return {"to": self.to, "data": self.data_hex, "value": str(self.value)}


@dataclass(frozen=True)
class CallBatch:
    """An immutable, ordered sequence of :class:`CallDescriptor` values.

    Order is significant and preserved exactly as built.  The length is
    data-dependent: optional records that were not supplied are absent.
    """

    calls: tuple[CallDescriptor, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, calls: Sequence[CallDescriptor]) -> "CallBatch":
        return cls(calls=tuple(calls))

    def __iter__(self) -> Iterator[CallDescriptor]:
        return iter(self.calls)

    def __len__(self) -> int:
        return len(self.calls)

    def __getitem__(self, index: int) -> CallDescriptor:
        return self.calls[index]

    def __add__(self, other: "CallBatch") -> "CallBatch":
        return CallBatch(calls=self.calls + other.calls)

    @property
    def labels(self) -> list[str]:
        return [call.label for call in self.calls]

    @property
    def total_value(self) -> int:
        return sum(call.value for call in self.calls)

    def to_list(self) -> list[dict[str, object]]:
        """Serialize every call with :meth:`CallDescriptor.to_dict`."""
        return [call.to_dict() for call in self.calls]
