"""resolution: forward and reverse lookups with explicit "not found".

Public API
----------
``ResolutionResult``
    Found value or not-found reason; never an exception.
``ResolutionEngine``
    Lookups over a single naming backend.
``ChainResolver``
    Priority-ordered fallback over the backends of one chain.
"""
from __future__ import annotations

from agent_naming.resolution.chain import ChainResolver
from agent_naming.resolution.engine import TEXT_KEYS, AccountIdentity, ResolutionEngine
from agent_naming.resolution.result import ResolutionResult, found, not_found

__all__ = [
    "TEXT_KEYS",
    "AccountIdentity",
    "ChainResolver",
    "ResolutionEngine",
    "ResolutionResult",
    "found",
    "not_found",
]
