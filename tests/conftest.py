"""Shared fakes for the outbound interfaces: contract reads and the minting service."""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import pytest

from agent_naming.errors import CallRevertedError, TransportError
from agent_naming.transport.minting import MintParameters, MintRequest, SubnameRecord


class FakeContractReader:
    """In-memory :class:`ContractReader`.

    Responses are keyed by ``(address, function, args)``; an unknown key
    behaves like a reverted call.  Setting ``down`` makes every call fail
    at the transport level.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, str, tuple[Any, ...]], Any] = {}
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.down = False

    def set(self, address: str, function_name: str, args: Sequence[Any], value: Any) -> None:
        self.responses[(address.lower(), function_name, tuple(args))] = value

    async def call(
        self,
        address: str,
        abi_fragment: Mapping[str, Any],
        function_name: str,
        args: Sequence[Any],
    ) -> Any:
        key = (address.lower(), function_name, tuple(args))
        self.calls.append(key)
        if self.down:
            raise TransportError("rpc", function_name, "connection refused")
        if key not in self.responses:
            raise CallRevertedError(address, function_name, "execution reverted")
        value = self.responses[key]
        if isinstance(value, Exception):
            raise value
        return value

    def called(self, function_name: str) -> int:
        return sum(1 for _, name, _ in self.calls if name == function_name)


class FakeMintingClient:
    """In-memory :class:`MintingClient`."""

    def __init__(self) -> None:
        self.available: dict[str, bool] = {}
        self.subnames: dict[str, SubnameRecord] = {}
        self.mint_parameters: Optional[MintParameters] = None
        self.requests: list[MintRequest] = []
        self.down = False
        self.closed = False

    def _check(self, operation: str) -> None:
        if self.down:
            raise TransportError("minting", operation, "503 Service Unavailable")

    async def is_label_available(self, name: str, chain_id: int) -> bool:
        self._check("is_label_available")
        return self.available.get(name, True)

    async def get_subname(self, chain_id: int, node: str) -> Optional[SubnameRecord]:
        self._check("get_subname")
        return self.subnames.get(node)

    async def get_mint_parameters(self, request: MintRequest) -> MintParameters:
        self._check("get_mint_parameters")
        self.requests.append(request)
        assert self.mint_parameters is not None
        return self.mint_parameters

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def reader() -> FakeContractReader:
    return FakeContractReader()


@pytest.fixture()
def minting_client() -> FakeMintingClient:
    return FakeMintingClient()
