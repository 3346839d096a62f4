"""Tests for agent_naming.resolution.chain: fallback across a chain's backends."""
from __future__ import annotations

import logging

import pytest
from eth_utils import to_checksum_address

from agent_naming.backends.direct import DirectBackend
from agent_naming.backends.minting import MintingBackend
from agent_naming.backends.registrar import RegistrarBackend
from agent_naming.errors import TransportError
from agent_naming.naming.namehash import namehash, node_hex
from agent_naming.resolution.chain import ChainResolver
from agent_naming.transport.minting import SubnameRecord

_REGISTRY = "0x2222222222222222222222222222222222222222"
_REGISTRAR = "0x4444444444444444444444444444444444444444"
_L2_REGISTRY = "0x5555555555555555555555555555555555555555"
_ACCOUNT = "0xabcdabcdabcdabcdabcdabcdabcdabcdabcd1234"
_OTHER = "0x9999999999999999999999999999999999999999"
_NAME = "atl-test-1.acme.eth"
_NODE = namehash(_NAME)


@pytest.fixture()
def direct(reader) -> DirectBackend:
    return DirectBackend(chain_id=84532, reader=reader, registry=_REGISTRY)


@pytest.fixture()
def registrar(reader) -> RegistrarBackend:
    return RegistrarBackend(
        chain_id=84532, reader=reader, registrar=_REGISTRAR, registry=_L2_REGISTRY
    )


@pytest.fixture()
def resolver(direct: DirectBackend, registrar: RegistrarBackend) -> ChainResolver:
    return ChainResolver([direct, registrar])


def _timeout(operation: str) -> TransportError:
    return TransportError("rpc", operation, "request timed out")


class TestConstruction:
    def test_needs_a_backend(self) -> None:
        with pytest.raises(ValueError):
            ChainResolver([])

    def test_backends_in_order(self, resolver: ChainResolver) -> None:
        assert [b.name for b in resolver.backends] == ["direct", "registrar"]


class TestFallback:
    @pytest.mark.asyncio
    async def test_primary_answer_wins(self, resolver: ChainResolver, reader) -> None:
        reader.set(_REGISTRY, "resolver", [_NODE], _L2_REGISTRY)
        reader.set(_L2_REGISTRY, "addr", [_NODE], _OTHER)
        result = await resolver.resolve_account(_NAME)
        assert result.value == to_checksum_address(_OTHER)
        assert result.backend == "direct"

    @pytest.mark.asyncio
    async def test_secondary_answers_when_primary_has_nothing(
        self, resolver: ChainResolver, reader
    ) -> None:
        reader.set(_L2_REGISTRY, "addr", [_NODE], _ACCOUNT)
        result = await resolver.resolve_account(_NAME)
        assert result.value == to_checksum_address(_ACCOUNT)
        assert result.backend == "registrar"

    @pytest.mark.asyncio
    async def test_all_not_found(self, resolver: ChainResolver) -> None:
        result = await resolver.resolve_account(_NAME)
        assert not result.found
        assert result.backend == "registrar"

    @pytest.mark.asyncio
    async def test_identity_from_secondary(self, resolver: ChainResolver, reader) -> None:
        reader.set(
            _L2_REGISTRY,
            "text",
            [_NODE, "agent-identity"],
            "0x0101" + "00014a34" + "00" * 19 + "01" + "01" + "07",
        )
        result = await resolver.resolve_identity(_NAME)
        assert result.unwrap().chain_id == 84532
        assert result.unwrap().agent_id == 7


class TestTransportPolicy:
    @pytest.mark.asyncio
    async def test_failed_backend_is_skipped_with_warning(
        self, resolver: ChainResolver, reader, caplog: pytest.LogCaptureFixture
    ) -> None:
        reader.set(_REGISTRY, "resolver", [_NODE], _timeout("resolver"))
        reader.set(_L2_REGISTRY, "addr", [_NODE], _ACCOUNT)
        with caplog.at_level(logging.WARNING):
            result = await resolver.resolve_account(_NAME)
        assert result.value == to_checksum_address(_ACCOUNT)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings and "direct" in warnings[0].getMessage()

    @pytest.mark.asyncio
    async def test_failure_then_not_found_is_not_found(
        self, resolver: ChainResolver, reader
    ) -> None:
        reader.set(_REGISTRY, "resolver", [_NODE], _timeout("resolver"))
        result = await resolver.resolve_account(_NAME)
        assert not result.found
        assert result.unchecked == ("direct",)
        assert "not checked on direct" in (result.reason or "")

    @pytest.mark.asyncio
    async def test_plain_not_found_has_nothing_unchecked(self, resolver: ChainResolver) -> None:
        result = await resolver.resolve_account(_NAME)
        assert result.unchecked == ()
        assert "not checked" not in (result.reason or "")

    @pytest.mark.asyncio
    async def test_every_backend_failing_raises(self, resolver: ChainResolver, reader) -> None:
        reader.down = True
        with pytest.raises(TransportError):
            await resolver.resolve_account(_NAME)

    @pytest.mark.asyncio
    async def test_single_backend_failure_raises(self, direct: DirectBackend, reader) -> None:
        reader.down = True
        with pytest.raises(TransportError):
            await ChainResolver([direct]).resolve_name(_ACCOUNT)

    @pytest.mark.asyncio
    async def test_custom_logger_receives_warnings(
        self, direct: DirectBackend, registrar: RegistrarBackend, reader, caplog
    ) -> None:
        hook = logging.getLogger("test.chain")
        resolver = ChainResolver([direct, registrar], hook)
        reader.set(_REGISTRY, "resolver", [_NODE], _timeout("resolver"))
        with caplog.at_level(logging.WARNING, logger="test.chain"):
            await resolver.resolve_text(_NAME, "url")
        assert any(r.name == "test.chain" for r in caplog.records)


class TestHasOwner:
    @pytest.mark.asyncio
    async def test_secondary_reports_owner(self, resolver: ChainResolver, reader) -> None:
        reader.set(_REGISTRY, "owner", [_NODE], "0x" + "00" * 20)
        reader.set(_REGISTRAR, "available", ["atl-test-1"], False)
        assert await resolver.has_owner("acme", "atl-test-1") is True

    @pytest.mark.asyncio
    async def test_primary_owner_short_circuits(self, resolver: ChainResolver, reader) -> None:
        reader.set(_REGISTRY, "owner", [_NODE], _ACCOUNT)
        assert await resolver.has_owner("acme", "atl-test-1") is True
        assert reader.called("available") == 0

    @pytest.mark.asyncio
    async def test_nobody_owns(self, resolver: ChainResolver, reader) -> None:
        reader.set(_REGISTRAR, "available", ["atl-test-1"], True)
        assert await resolver.has_owner("acme", "atl-test-1") is False

    @pytest.mark.asyncio
    async def test_partial_failure_uses_remaining_answer(
        self, resolver: ChainResolver, reader
    ) -> None:
        reader.set(_REGISTRY, "owner", [_NODE], _timeout("owner"))
        reader.set(_REGISTRAR, "available", ["atl-test-1"], True)
        assert await resolver.has_owner("acme", "atl-test-1") is False

    @pytest.mark.asyncio
    async def test_all_failing_raises(self, resolver: ChainResolver, reader) -> None:
        reader.down = True
        with pytest.raises(TransportError):
            await resolver.has_owner("acme", "atl-test-1")


class TestMintingSecondary:
    @pytest.mark.asyncio
    async def test_minting_client_created_once_across_lookups(
        self, direct: DirectBackend, minting_client
    ) -> None:
        created: list[int] = []

        def factory():
            created.append(1)
            return minting_client

        minting = MintingBackend(chain_id=11155420, client_factory=factory)
        minting_client.subnames[node_hex(_NODE)] = SubnameRecord(name=_NAME, owner=_ACCOUNT)
        resolver = ChainResolver([direct, minting])

        first = await resolver.resolve_account(_NAME)
        second = await resolver.resolve_account(_NAME)
        assert first.value == second.value == to_checksum_address(_ACCOUNT)
        assert first.backend == "minting"
        assert created == [1]
