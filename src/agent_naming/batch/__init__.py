"""batch: ordered write-call construction.

Public API
----------
``CallDescriptor`` / ``CallBatch``
    The ``{to, data, value}[]`` value handed to the submission layer.
``build_direct_create_batch`` / ``build_registrar_create_batch``
    Variant-specific create/update batches.
``build_text_batch`` / ``build_identity_batch``
    Text-record updates, including the encoded agent identity.
"""
from __future__ import annotations

from agent_naming.batch.builder import (
    ETH_COIN_TYPE,
    build_direct_create_batch,
    build_identity_batch,
    build_registrar_create_batch,
    build_text_batch,
    encoded_call,
    evm_coin_type,
    register_call,
    set_addr_call,
    set_coin_addr_call,
    set_name_call,
    set_text_call,
)
from agent_naming.batch.calls import CallBatch, CallDescriptor

__all__ = [
    "ETH_COIN_TYPE",
    "CallBatch",
    "CallDescriptor",
    "build_direct_create_batch",
    "build_identity_batch",
    "build_registrar_create_batch",
    "build_text_batch",
    "encoded_call",
    "evm_coin_type",
    "register_call",
    "set_addr_call",
    "set_coin_addr_call",
    "set_name_call",
    "set_text_call",
]
