"""codec: binary encoding of agent identity records.

Public API
----------
``AgentIdentityRecord``
    Frozen value type ``(chain_id, registry, agent_id)``.
``encode_agent_identity`` / ``decode_agent_identity``
    Lossless conversion to and from the ``agent-identity`` text value.
"""
from __future__ import annotations

from agent_naming.codec.identity import (
    IDENTITY_TEXT_KEY,
    AgentIdentityRecord,
    decode_agent_identity,
    encode_agent_identity,
)

__all__ = [
    "IDENTITY_TEXT_KEY",
    "AgentIdentityRecord",
    "decode_agent_identity",
    "encode_agent_identity",
]
