"""Account helpers: 20-byte addresses and the all-zero "unset" sentinel.

Accounts are carried around as EIP-55 checksummed hex strings.  The zero
address is never a resolution result: every helper here maps it to
``None`` so that callers only see real accounts.
"""
from __future__ import annotations

from typing import Optional

from eth_utils import is_hex_address, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_zero_address(value: object) -> bool:
    """Return ``True`` when *value* is the all-zero address in any casing."""
    if isinstance(value, bytes):
        return len(value) == 20 and not any(value)
    if not isinstance(value, str):
        return False
    return value.lower() == ZERO_ADDRESS


def normalize_account(value: object) -> Optional[str]:
    """Return *value* as a checksummed account, or ``None``.

    ``None`` is returned for anything that is not a 20-byte hex address
    (``0x``-prefixed, either casing) and for the zero sentinel.  Raw
    20-byte ``bytes`` values are accepted as well.
    """
    if isinstance(value, bytes):
        if len(value) != 20:
            return None
        value = "0x" + value.hex()
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate.startswith(("0x", "0X")) or not is_hex_address(candidate):
        return None
    if is_zero_address(candidate):
        return None
    return to_checksum_address(candidate)


def require_account(value: object, field: str = "account") -> str:
    """Strict variant of :func:`normalize_account` for write paths.

    Raises
    ------
    ValueError
        If *value* is not a non-zero 20-byte hex address.
    """
    account = normalize_account(value)
    if account is None:
        raise ValueError(f"{field} must be a non-zero 20-byte hex address, got {value!r}")
    return account


def account_hex(account: str) -> str:
    """Return the lowercase hex digits of *account* without the ``0x`` prefix."""
    return account[2:].lower()


def checksum_address(value: object) -> Optional[str]:
    """Checksum *value* without rejecting the zero address.

    Used where any 20-byte value is representable (the identity codec);
    resolution paths use :func:`normalize_account` instead.
    """
    if isinstance(value, bytes):
        if len(value) != 20:
            return None
        value = "0x" + value.hex()
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate.startswith(("0x", "0X")) or not is_hex_address(candidate):
        return None
    return to_checksum_address(candidate)
