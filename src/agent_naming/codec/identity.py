"""Agent identity codec: the compact value stored in the ``agent-identity`` text record.

Layout (all integers big-endian, hex-encoded with a ``0x`` prefix)::

    byte 0      version tag      0x01
    byte 1      namespace tag    0x01  (chain-qualified account)
    bytes 2-5   chain id         4 bytes
    bytes 6-25  registry         20 bytes
    byte 26     agent id length  1 byte
    bytes 27-   agent id         <length> bytes

The encoder always emits the minimal agent id length; an agent id of zero
is encoded with length 0 and an empty tail.  The decoder accepts any
length that fits the input, so longer-than-minimal fields produced by
other encoders decode to the same record.

Decoding never raises: anything that is not a well-formed value returns
``None``, which read paths report as "not found".
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from agent_naming.accounts import checksum_address

IDENTITY_TEXT_KEY = "agent-identity"

VERSION_TAG = 0x01
NAMESPACE_TAG = 0x01

ACCEPTED_VERSIONS: frozenset[int] = frozenset({VERSION_TAG})
ACCEPTED_NAMESPACES: frozenset[int] = frozenset({NAMESPACE_TAG})

HEADER_LENGTH = 1 + 1 + 4 + 20 + 1

MAX_CHAIN_ID = 2**32 - 1
MAX_AGENT_ID_BYTES = 255

_HEX_VALUE = re.compile(r"^0x(?:[0-9a-fA-F]{2})*$")


@dataclass(frozen=True)
class AgentIdentityRecord:
    """A decoded agent identity: one entry in an on-chain identity registry.

    Parameters
    ----------
    chain_id:
        Chain the identity registry lives on (unsigned 32-bit).
    registry:
        Checksummed address of the identity registry contract.
    agent_id:
        Numeric identity id inside the registry (unsigned, at most 255 bytes).

    Raises
    ------
    ValueError
        If any field is outside its representable range.
    """

    chain_id: int
    registry: str
    agent_id: int

    def __post_init__(self) -> None:
        if not 0 <= self.chain_id <= MAX_CHAIN_ID:
            raise ValueError(f"chain_id must fit in 4 unsigned bytes, got {self.chain_id}")
        registry = checksum_address(self.registry)
        if registry is None:
            raise ValueError(
                f"registry must be a 20-byte hex address, got {self.registry!r}"
            )
        object.__setattr__(self, "registry", registry)
        if self.agent_id < 0:
            raise ValueError(f"agent_id must be unsigned, got {self.agent_id}")
        if _minimal_length(self.agent_id) > MAX_AGENT_ID_BYTES:
            raise ValueError("agent_id does not fit in 255 bytes")

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary (agent id as a decimal string)."""
        return {
            "chain_id": self.chain_id,
            "registry": self.registry,
            "agent_id": str(self.agent_id),
        }


def _minimal_length(value: int) -> int:
    return (value.bit_length() + 7) // 8


def encode_agent_identity(record: AgentIdentityRecord) -> str:
    """Encode *record* as a ``0x``-prefixed hex string.

    Example
    -------
    ::

        >>> record = AgentIdentityRecord(
        ...     11155111, "0x0000000000000000000000000000000000000001", 42
        ... )
        >>> encode_agent_identity(record)
        '0x010100aa36a70000000000000000000000000000000000000001012a'
    """
    id_length = _minimal_length(record.agent_id)
    payload = bytearray((VERSION_TAG, NAMESPACE_TAG))
    payload += record.chain_id.to_bytes(4, "big")
    payload += bytes.fromhex(record.registry[2:])
    payload.append(id_length)
    payload += record.agent_id.to_bytes(id_length, "big")
    return "0x" + payload.hex()


def decode_agent_identity(value: Optional[str]) -> Optional[AgentIdentityRecord]:
    """Decode a text-record value into an :class:`AgentIdentityRecord`.

    Returns ``None`` when *value* is missing, is not ``0x``-prefixed hex
    with whole bytes, is shorter than the fixed header, carries an unknown
    version or namespace tag, or declares more agent id bytes than it
    contains.
    """
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not _HEX_VALUE.match(candidate):
        return None
    raw = bytes.fromhex(candidate[2:])
    if len(raw) < HEADER_LENGTH:
        return None
    if raw[0] not in ACCEPTED_VERSIONS or raw[1] not in ACCEPTED_NAMESPACES:
        return None

    chain_id = int.from_bytes(raw[2:6], "big")
    registry = checksum_address(raw[6:26])
    id_length = raw[26]
    tail = raw[HEADER_LENGTH:HEADER_LENGTH + id_length]
    if registry is None or len(tail) != id_length:
        return None
    agent_id = int.from_bytes(tail, "big") if id_length else 0
    return AgentIdentityRecord(chain_id=chain_id, registry=registry, agent_id=agent_id)
