"""Tests for agent_naming.transport: the HTTP minting client and the web3 reader."""
from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiohttp
import httpx
import pytest
from aiohttp import web
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from agent_naming.abi import REGISTRY_RESOLVER
from agent_naming.errors import CallRevertedError, TransportError
from agent_naming.transport.minting import HttpMintingClient, MintRequest
from agent_naming.transport.rpc import ContractReader, Web3ContractReader

_BASE_URL = "https://mint.example"
_OWNER = "0xAbcdAbcdAbcdAbcdAbcdAbcdAbcdAbcdAbcd1234"


def _client(handler) -> HttpMintingClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpMintingClient(_BASE_URL, http_client=http_client)


class TestHttpMintingClient:
    @pytest.mark.asyncio
    async def test_is_label_available(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"available": False})

        assert await _client(handler).is_label_available("bot.acme.eth", 11155420) is False
        assert seen[0].url.path == HttpMintingClient.AVAILABILITY_PATH
        assert seen[0].url.params["name"] == "bot.acme.eth"
        assert seen[0].url.params["chainId"] == "11155420"

    @pytest.mark.asyncio
    async def test_unexpected_availability_payload(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"available": "yes"}))
        with pytest.raises(TransportError):
            await client.is_label_available("bot.acme.eth", 1)

    @pytest.mark.asyncio
    async def test_get_subname(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/subnames/11155420/0xabc"
            return httpx.Response(
                200,
                json={"name": "bot.acme.eth", "owner": _OWNER, "texts": {"url": "https://a"}},
            )

        subname = await _client(handler).get_subname(11155420, "0xabc")
        assert subname is not None
        assert subname.texts == {"url": "https://a"}

    @pytest.mark.asyncio
    async def test_missing_subname_is_none(self) -> None:
        client = _client(lambda request: httpx.Response(404, json={"error": "not found"}))
        assert await client.get_subname(1, "0xabc") is None

    @pytest.mark.asyncio
    async def test_server_error_is_transport_error(self) -> None:
        client = _client(lambda request: httpx.Response(503))
        with pytest.raises(TransportError) as info:
            await client.get_subname(1, "0xabc")
        assert info.value.backend == "minting"

    @pytest.mark.asyncio
    async def test_network_error_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            await _client(handler).is_label_available("bot.acme.eth", 1)

    @pytest.mark.asyncio
    async def test_invalid_json_is_transport_error(self) -> None:
        client = _client(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(TransportError, match="invalid JSON"):
            await client.is_label_available("bot.acme.eth", 1)

    @pytest.mark.asyncio
    async def test_get_mint_parameters_posts_aliased_body(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={
                    "contractAddress": _OWNER,
                    "abi": [],
                    "functionName": "mint",
                    "args": [1],
                    "value": 5,
                },
            )

        request = MintRequest(
            parent_name="acme.eth", label="bot", owner=_OWNER, minter_address=_OWNER
        )
        params = await _client(handler).get_mint_parameters(request)
        assert params.function_name == "mint"
        assert params.value == 5
        assert bodies[0]["parentName"] == "acme.eth"
        assert bodies[0]["minterAddress"] == _OWNER

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self) -> None:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        client = HttpMintingClient(_BASE_URL, http_client=http_client)
        await client.close()
        assert http_client.is_closed is False
        await http_client.aclose()


# ------------------------------------------------------------------
# Web3ContractReader
# ------------------------------------------------------------------

_REGISTRY = "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e"
_NODE = b"\x00" * 32


class _StubFunction:
    def __init__(self, outcome: object) -> None:
        self._outcome = outcome

    async def call(self) -> object:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome


class _StubContract:
    def __init__(self, outcome: object) -> None:
        self._outcome = outcome

    def get_function_by_name(self, name: str):
        return lambda *args: _StubFunction(self._outcome)


class _StubEth:
    def __init__(self, outcome: object) -> None:
        self._outcome = outcome

    def contract(self, address: str, abi: list) -> _StubContract:
        return _StubContract(self._outcome)


class _StubWeb3:
    """Stands in for ``AsyncWeb3``: every call ends with *outcome*."""

    def __init__(self, outcome: object) -> None:
        self.eth = _StubEth(outcome)


def _stub_reader(outcome: object) -> Web3ContractReader:
    return Web3ContractReader("http://stub", web3=_StubWeb3(outcome))  # type: ignore[arg-type]


@asynccontextmanager
async def _rpc_endpoint(handler) -> AsyncIterator[str]:
    app = web.Application()
    app.router.add_post("/", handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


def _http_reader(url: str) -> Web3ContractReader:
    provider = AsyncHTTPProvider(url, exception_retry_configuration=None)
    return Web3ContractReader(url, web3=AsyncWeb3(provider))


async def _json_rpc_error(request: web.Request) -> web.Response:
    body = await request.json()
    if body["method"] == "eth_chainId":
        return web.json_response({"jsonrpc": "2.0", "id": body["id"], "result": "0x1"})
    return web.json_response(
        {
            "jsonrpc": "2.0",
            "id": body["id"],
            "error": {"code": -32000, "message": "header not found"},
        }
    )


class TestWeb3ContractReader:
    def test_satisfies_reader_protocol(self) -> None:
        reader: ContractReader = Web3ContractReader("http://127.0.0.1:8545")
        assert reader.rpc_url == "http://127.0.0.1:8545"  # type: ignore[attr-defined]

    @pytest.mark.asyncio
    async def test_returns_decoded_value(self) -> None:
        reader = _stub_reader(_REGISTRY)
        assert await reader.call(_REGISTRY, REGISTRY_RESOLVER, "resolver", [_NODE]) == _REGISTRY

    @pytest.mark.asyncio
    async def test_revert_is_call_reverted(self) -> None:
        reader = _stub_reader(ContractLogicError("execution reverted"))
        with pytest.raises(CallRevertedError):
            await reader.call(_REGISTRY, REGISTRY_RESOLVER, "resolver", [_NODE])

    @pytest.mark.asyncio
    async def test_empty_output_is_call_reverted(self) -> None:
        reader = _stub_reader(BadFunctionCallOutput("Could not decode contract function call"))
        with pytest.raises(CallRevertedError):
            await reader.call(_REGISTRY, REGISTRY_RESOLVER, "resolver", [_NODE])

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self) -> None:
        reader = _stub_reader(asyncio.TimeoutError())
        with pytest.raises(TransportError) as info:
            await reader.call(_REGISTRY, REGISTRY_RESOLVER, "resolver", [_NODE])
        assert info.value.backend == "rpc"
        assert info.value.operation == "resolver"

    @pytest.mark.asyncio
    async def test_http_error_status_is_transport_error(self) -> None:
        async def unavailable(request: web.Request) -> web.Response:
            return web.Response(status=503)

        async with _rpc_endpoint(unavailable) as url:
            with pytest.raises(TransportError) as info:
                await _http_reader(url).call(_REGISTRY, REGISTRY_RESOLVER, "resolver", [_NODE])
        assert isinstance(info.value.__cause__, aiohttp.ClientResponseError)

    @pytest.mark.asyncio
    async def test_json_rpc_error_is_transport_error(self) -> None:
        async with _rpc_endpoint(_json_rpc_error) as url:
            with pytest.raises(TransportError):
                await _http_reader(url).call(_REGISTRY, REGISTRY_RESOLVER, "resolver", [_NODE])

    @pytest.mark.asyncio
    async def test_unreachable_endpoint_is_transport_error(self) -> None:
        async with _rpc_endpoint(_json_rpc_error) as url:
            pass
        with pytest.raises(TransportError):
            await _http_reader(url).call(_REGISTRY, REGISTRY_RESOLVER, "resolver", [_NODE])
