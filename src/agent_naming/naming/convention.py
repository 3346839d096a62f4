"""Naming convention: canonical labels and full names for agents.

Agents are named as subdomains of their organisation::

    <agent-label>.<org-label>.eth

All helpers here are pure and never raise; they return ``None`` when the
input cannot be turned into a valid name.  Write paths that need a hard
failure should use :func:`require_label`.
"""
from __future__ import annotations

import re
from typing import Optional

ROOT_SUFFIX = "eth"

_ENS_PREFIX = re.compile(r"^(?:ens:\s*)+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_LABEL_PATTERN = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]*[a-z0-9_])?$")


def normalize_name(name: Optional[str]) -> Optional[str]:
    """Trim, lowercase and qualify *name*.

    An optional ``ens:`` prefix is dropped.  A name without a dot gets the
    root suffix appended (``acme`` becomes ``acme.eth``); a dotted name is
    left unqualified.  Returns ``None`` for an empty name or one with an
    empty label (``a..eth``) or embedded whitespace.

    The function is idempotent: ``normalize_name(normalize_name(n)) ==
    normalize_name(n)`` whenever the inner call returns a value.
    """
    if not name:
        return None
    cleaned = _ENS_PREFIX.sub("", name.strip()).strip().lower()
    if not cleaned:
        return None
    if "." not in cleaned:
        cleaned = f"{cleaned}.{ROOT_SUFFIX}"
    labels = cleaned.split(".")
    if any(not label or _WHITESPACE.search(label) for label in labels):
        return None
    return cleaned


def to_label(value: Optional[str]) -> str:
    """Lowercase and trim *value*, collapsing whitespace runs into ``-``."""
    return _WHITESPACE.sub("-", (value or "").strip().lower())


def org_label(org_name: Optional[str]) -> str:
    """Return the organisation label, dropping a trailing ``.eth``."""
    label = to_label(org_name)
    suffix = f".{ROOT_SUFFIX}"
    if label.endswith(suffix):
        label = label[: -len(suffix)]
    return label


def is_valid_label(label: str) -> bool:
    """Return ``True`` when *label* is a single lowercase subdomain label."""
    return bool(_LABEL_PATTERN.match(label))


def require_label(value: Optional[str], field: str = "label") -> str:
    """Return the canonical label for *value* or raise ``ValueError``."""
    label = to_label(value)
    if not is_valid_label(label):
        raise ValueError(
            f"{field} {value!r} does not yield a valid subdomain label "
            "(lowercase letters, digits, '_' and inner '-' only)"
        )
    return label


def org_name(org: Optional[str]) -> Optional[str]:
    """Return the full organisation name (``<org>.eth``), or ``None``."""
    label = org_label(org)
    if not label:
        return None
    return normalize_name(f"{label}.{ROOT_SUFFIX}")


def agent_full_name(org: Optional[str], agent: Optional[str]) -> Optional[str]:
    """Return ``<agent-label>.<org-label>.eth``, or ``None`` if either part is invalid.

    Example
    -------
    ::

        >>> agent_full_name("Acme", "ATL Test 1")
        'atl-test-1.acme.eth'
    """
    parent = org_label(org)
    label = to_label(agent)
    if not parent or not is_valid_label(label):
        return None
    if not all(is_valid_label(part) for part in parent.split(".")):
        return None
    return f"{label}.{parent}.{ROOT_SUFFIX}"
