"""naming: pure helpers for canonical names and their hash nodes.

Public API
----------
``normalize_name``
    Trim, lowercase and qualify a human-entered name.
``agent_full_name`` / ``org_name``
    Derive canonical names from organisation and agent names.
``namehash`` / ``reverse_node``
    Compute the 32-byte nodes used by every naming backend.
"""
from __future__ import annotations

from agent_naming.naming.convention import (
    ROOT_SUFFIX,
    agent_full_name,
    is_valid_label,
    normalize_name,
    org_label,
    org_name,
    require_label,
    to_label,
)
from agent_naming.naming.namehash import (
    BASE_REVERSE_NODE,
    ROOT_NODE,
    labelhash,
    namehash,
    node_hex,
    reverse_name,
    reverse_node,
)

__all__ = [
    "BASE_REVERSE_NODE",
    "ROOT_NODE",
    "ROOT_SUFFIX",
    "agent_full_name",
    "is_valid_label",
    "labelhash",
    "namehash",
    "node_hex",
    "normalize_name",
    "org_label",
    "org_name",
    "require_label",
    "reverse_name",
    "reverse_node",
    "to_label",
]
