"""backends: naming systems that can answer lookups for a chain.

Public API
----------
``NamingBackend``
    The capability set every variant implements.
``DirectBackend`` / ``RegistrarBackend`` / ``MintingBackend``
    Registry-plus-resolver, custom registrar, and hosted minting service.
``select_backends`` / ``BackendRegistry``
    Per-chain backend selection from configuration.
"""
from __future__ import annotations

from agent_naming.backends.base import CreateTarget, NamingBackend, validate_create_input
from agent_naming.backends.direct import DirectBackend
from agent_naming.backends.minting import MintingBackend
from agent_naming.backends.registrar import RegistrarBackend
from agent_naming.backends.selector import BackendRegistry, ChainBackends, select_backends

__all__ = [
    "BackendRegistry",
    "ChainBackends",
    "CreateTarget",
    "DirectBackend",
    "MintingBackend",
    "NamingBackend",
    "RegistrarBackend",
    "select_backends",
    "validate_create_input",
]
