"""Hierarchical name hashing (EIP-137 ``namehash``).

Each label is keccak-256 hashed and folded right-to-left into its
parent's digest, starting from the all-zero root node.
"""
from __future__ import annotations

from eth_utils import keccak

from agent_naming.accounts import account_hex

ROOT_NODE: bytes = b"\x00" * 32

REVERSE_SUFFIX = "addr.reverse"


def labelhash(label: str) -> bytes:
    """Return the keccak-256 digest of a single label."""
    return keccak(text=label)


def namehash(name: str) -> bytes:
    """Return the 32-byte node for *name*.

    The empty string hashes to :data:`ROOT_NODE`.  *name* is hashed as
    given; normalise it first with
    :func:`~agent_naming.naming.convention.normalize_name`.
    """
    node = ROOT_NODE
    if not name:
        return node
    for label in reversed(name.split(".")):
        node = keccak(node + labelhash(label))
    return node


def reverse_name(account: str) -> str:
    """Return the reverse-registration name ``<hex>.addr.reverse`` for *account*."""
    return f"{account_hex(account)}.{REVERSE_SUFFIX}"


def reverse_node(account: str) -> bytes:
    """Return the reverse node for *account*."""
    return namehash(reverse_name(account))


BASE_REVERSE_NODE: bytes = namehash(REVERSE_SUFFIX)


def node_hex(node: bytes) -> str:
    """Return *node* as a ``0x``-prefixed hex string."""
    return "0x" + node.hex()
