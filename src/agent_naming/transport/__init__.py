"""transport: outbound capabilities used by the naming backends.

``ContractReader``
    ``call(address, abi_fragment, function_name, args)`` against a chain.
``MintingClient``
    Availability, index and mint-parameter queries against a hosted
    subdomain minting service.
"""
from __future__ import annotations

from agent_naming.transport.minting import (
    AddressRecord,
    HttpMintingClient,
    MintingClient,
    MintParameters,
    MintRecords,
    MintRequest,
    SubnameRecord,
    TextRecord,
)
from agent_naming.transport.rpc import ContractReader, Web3ContractReader

__all__ = [
    "AddressRecord",
    "ContractReader",
    "HttpMintingClient",
    "MintParameters",
    "MintRecords",
    "MintRequest",
    "MintingClient",
    "SubnameRecord",
    "TextRecord",
    "Web3ContractReader",
]
