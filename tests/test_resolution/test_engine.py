"""Tests for agent_naming.resolution.engine: forward and reverse lookups on one backend."""
from __future__ import annotations

import logging

import pytest
from eth_utils import to_checksum_address

from agent_naming.backends.direct import DirectBackend
from agent_naming.codec.identity import AgentIdentityRecord
from agent_naming.errors import TransportError
from agent_naming.naming.namehash import namehash, reverse_node
from agent_naming.resolution.engine import ResolutionEngine
from agent_naming.resolution.result import ResolutionResult, found, not_found

_REGISTRY = "0x2222222222222222222222222222222222222222"
_RESOLVER = "0x1111111111111111111111111111111111111111"
_ACCOUNT = "0xabcdabcdabcdabcdabcdabcdabcdabcdabcd1234"
_NAME = "atl-test-1.acme.eth"
_NODE = namehash(_NAME)
_IDENTITY = "0x0101" + "00aa36a7" + "00" * 19 + "01" + "01" + "2a"


@pytest.fixture()
def engine(reader) -> ResolutionEngine:
    return ResolutionEngine(DirectBackend(chain_id=11155111, reader=reader, registry=_REGISTRY))


@pytest.fixture()
def named(reader) -> None:
    """Register _NAME with a resolver holding an address and identity text."""
    reader.set(_REGISTRY, "resolver", [_NODE], _RESOLVER)
    reader.set(_RESOLVER, "addr", [_NODE], _ACCOUNT)
    reader.set(_RESOLVER, "text", [_NODE, "agent-identity"], _IDENTITY)


class TestResolutionResult:
    def test_found_is_truthy(self) -> None:
        result = found("x", "direct")
        assert result and result.unwrap() == "x"

    def test_not_found_unwrap_raises(self) -> None:
        result: ResolutionResult[str] = not_found("no resolver")
        assert not result
        with pytest.raises(LookupError, match="no resolver"):
            result.unwrap()


class TestResolveAccount:
    @pytest.mark.asyncio
    async def test_found(self, engine: ResolutionEngine, named: None) -> None:
        result = await engine.resolve_account("ATL-Test-1.acme.eth")
        assert result.found
        assert result.value == to_checksum_address(_ACCOUNT)
        assert result.backend == "direct"

    @pytest.mark.asyncio
    async def test_no_resolver(self, engine: ResolutionEngine) -> None:
        result = await engine.resolve_account(_NAME)
        assert not result.found
        assert "no resolver" in (result.reason or "")

    @pytest.mark.asyncio
    async def test_zero_address_is_not_found(self, engine: ResolutionEngine, reader) -> None:
        reader.set(_REGISTRY, "resolver", [_NODE], _RESOLVER)
        reader.set(_RESOLVER, "addr", [_NODE], "0x" + "00" * 20)
        result = await engine.resolve_account(_NAME)
        assert not result.found
        assert "no address record" in (result.reason or "")

    @pytest.mark.asyncio
    async def test_invalid_name_is_not_found(self, engine: ResolutionEngine, reader) -> None:
        result = await engine.resolve_account("a..eth")
        assert not result.found
        assert reader.calls == []

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, engine: ResolutionEngine, reader) -> None:
        reader.down = True
        with pytest.raises(TransportError):
            await engine.resolve_account(_NAME)

    @pytest.mark.asyncio
    async def test_not_found_is_logged(self, reader, caplog: pytest.LogCaptureFixture) -> None:
        hook = logging.getLogger("test.observability")
        engine = ResolutionEngine(
            DirectBackend(chain_id=11155111, reader=reader, registry=_REGISTRY), hook
        )
        with caplog.at_level(logging.DEBUG, logger="test.observability"):
            await engine.resolve_account(_NAME)
        assert any("no resolver" in record.getMessage() for record in caplog.records)


class TestResolveIdentity:
    @pytest.mark.asyncio
    async def test_decodes_identity(self, engine: ResolutionEngine, named: None) -> None:
        result = await engine.resolve_identity(_NAME)
        assert result.value == AgentIdentityRecord(11155111, "0x" + "00" * 19 + "01", 42)

    @pytest.mark.asyncio
    async def test_undecodable_value_is_not_found(self, engine: ResolutionEngine, reader) -> None:
        reader.set(_REGISTRY, "resolver", [_NODE], _RESOLVER)
        reader.set(_RESOLVER, "text", [_NODE, "agent-identity"], "0x0101")
        result = await engine.resolve_identity(_NAME)
        assert not result.found
        assert "undecodable" in (result.reason or "")

    @pytest.mark.asyncio
    async def test_missing_text_is_not_found(self, engine: ResolutionEngine, reader) -> None:
        reader.set(_REGISTRY, "resolver", [_NODE], _RESOLVER)
        assert not (await engine.resolve_identity(_NAME)).found


class TestResolveText:
    @pytest.mark.asyncio
    async def test_url(self, engine: ResolutionEngine, named: None, reader) -> None:
        reader.set(_RESOLVER, "text", [_NODE, "url"], "https://acme.example")
        result = await engine.resolve_text(_NAME, "url")
        assert result.value == "https://acme.example"

    @pytest.mark.asyncio
    async def test_blank_value_is_not_found(self, engine: ResolutionEngine, named: None, reader) -> None:
        reader.set(_RESOLVER, "text", [_NODE, "description"], "  ")
        assert not (await engine.resolve_text(_NAME, "description")).found


class TestReverse:
    @pytest.mark.asyncio
    async def test_no_reverse_resolver_is_not_found(self, engine: ResolutionEngine) -> None:
        result = await engine.resolve_name(_ACCOUNT)
        assert not result.found
        assert "no reverse resolver" in (result.reason or "")

    @pytest.mark.asyncio
    async def test_resolves_and_normalizes_name(self, engine: ResolutionEngine, reader) -> None:
        rnode = reverse_node(_ACCOUNT)
        reader.set(_REGISTRY, "resolver", [rnode], _RESOLVER)
        reader.set(_RESOLVER, "name", [rnode], " ATL-Test-1.Acme.eth ")
        result = await engine.resolve_name(to_checksum_address(_ACCOUNT))
        assert result.value == _NAME

    @pytest.mark.asyncio
    async def test_empty_reverse_name_is_not_found(self, engine: ResolutionEngine, reader) -> None:
        rnode = reverse_node(_ACCOUNT)
        reader.set(_REGISTRY, "resolver", [rnode], _RESOLVER)
        reader.set(_RESOLVER, "name", [rnode], "")
        assert not (await engine.resolve_name(_ACCOUNT)).found

    @pytest.mark.asyncio
    async def test_zero_account_is_not_found(self, engine: ResolutionEngine, reader) -> None:
        assert not (await engine.resolve_name("0x" + "00" * 20)).found
        assert reader.calls == []

    @pytest.mark.asyncio
    async def test_identity_by_account(self, engine: ResolutionEngine, named: None, reader) -> None:
        rnode = reverse_node(_ACCOUNT)
        reader.set(_REGISTRY, "resolver", [rnode], _RESOLVER)
        reader.set(_RESOLVER, "name", [rnode], _NAME)
        result = await engine.resolve_identity_by_account(_ACCOUNT)
        assert result.found
        assert result.unwrap().name == _NAME
        assert result.unwrap().identity.agent_id == 42

    @pytest.mark.asyncio
    async def test_identity_by_account_without_name(self, engine: ResolutionEngine) -> None:
        assert not (await engine.resolve_identity_by_account(_ACCOUNT)).found
