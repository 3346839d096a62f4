"""agent-naming: resolve agent names to on-chain agent identities, and back.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import agent_naming
>>> agent_naming.__version__
'0.1.0'

Quick start
-----------
::

    from agent_naming import (
        # Codec
        AgentIdentityRecord, encode_agent_identity, decode_agent_identity,
        # Naming convention
        normalize_name, agent_full_name, namehash,
        # Resolution
        AgentNamingClient, ChainResolver, ResolutionResult,
        # Configuration
        NamingConfig, load_config, load_config_from_env,
    )
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Codec and naming convention
# ------------------------------------------------------------------
from agent_naming.accounts import ZERO_ADDRESS, normalize_account
from agent_naming.codec.identity import (
    IDENTITY_TEXT_KEY,
    AgentIdentityRecord,
    decode_agent_identity,
    encode_agent_identity,
)
from agent_naming.naming.convention import agent_full_name, normalize_name, to_label
from agent_naming.naming.namehash import namehash, reverse_node

# ------------------------------------------------------------------
# Configuration and errors
# ------------------------------------------------------------------
from agent_naming.config import ChainConfig, NamingConfig, load_config, load_config_from_env
from agent_naming.errors import (
    BatchConstructionError,
    CallRevertedError,
    ConfigurationError,
    NamingError,
    TransportError,
    UnknownChainError,
)

# ------------------------------------------------------------------
# Backends, batches and resolution
# ------------------------------------------------------------------
from agent_naming.backends.base import NamingBackend
from agent_naming.backends.direct import DirectBackend
from agent_naming.backends.minting import MintingBackend
from agent_naming.backends.registrar import RegistrarBackend
from agent_naming.backends.selector import BackendRegistry, ChainBackends, select_backends
from agent_naming.batch.calls import CallBatch, CallDescriptor
from agent_naming.client import AgentNamingClient
from agent_naming.resolution.chain import ChainResolver
from agent_naming.resolution.engine import AccountIdentity, ResolutionEngine
from agent_naming.resolution.result import ResolutionResult

__all__ = [
    # version
    "__version__",
    # codec and naming
    "IDENTITY_TEXT_KEY",
    "ZERO_ADDRESS",
    "AgentIdentityRecord",
    "agent_full_name",
    "decode_agent_identity",
    "encode_agent_identity",
    "namehash",
    "normalize_account",
    "normalize_name",
    "reverse_node",
    "to_label",
    # configuration and errors
    "BatchConstructionError",
    "CallRevertedError",
    "ChainConfig",
    "ConfigurationError",
    "NamingConfig",
    "NamingError",
    "TransportError",
    "UnknownChainError",
    "load_config",
    "load_config_from_env",
    # backends and batches
    "BackendRegistry",
    "CallBatch",
    "CallDescriptor",
    "ChainBackends",
    "DirectBackend",
    "MintingBackend",
    "NamingBackend",
    "RegistrarBackend",
    "select_backends",
    # resolution
    "AccountIdentity",
    "AgentNamingClient",
    "ChainResolver",
    "ResolutionEngine",
    "ResolutionResult",
]
