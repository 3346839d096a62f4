"""Read-only contract access over JSON-RPC.

The naming backends depend only on the :class:`ContractReader` protocol,
a single ``call(address, abi_fragment, function_name, args)`` capability.
:class:`Web3ContractReader` implements it with web3's async provider;
tests substitute an in-memory reader.

Error mapping
-------------
- A revert or empty return data raises
  :class:`~agent_naming.errors.CallRevertedError`; backends turn it into
  absence.
- Anything else (connection refused, timeout, an HTTP error status from
  the endpoint, JSON-RPC error response) raises
  :class:`~agent_naming.errors.TransportError`.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Protocol, Sequence

import aiohttp
from eth_utils import to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, Web3Exception

from agent_naming.errors import CallRevertedError, TransportError

logger = logging.getLogger(__name__)


class ContractReader(Protocol):
    """Minimal read-contract capability consumed by the naming backends."""

    async def call(
        self,
        address: str,
        abi_fragment: Mapping[str, Any],
        function_name: str,
        args: Sequence[Any],
    ) -> Any:
        """Execute a read-only call and return the decoded result."""
        ...


class Web3ContractReader:
    """:class:`ContractReader` backed by an :class:`~web3.AsyncWeb3` HTTP client.

    Parameters
    ----------
    rpc_url:
        JSON-RPC endpoint for the chain.
    web3:
        Optional pre-built client, mainly for tests and shared connections.
        When omitted a client is created for *rpc_url*; the provider's own
        request timeout applies to every call.
    """

    def __init__(self, rpc_url: str, web3: Optional[AsyncWeb3] = None) -> None:
        self._rpc_url = rpc_url
        self._w3 = web3 if web3 is not None else AsyncWeb3(AsyncHTTPProvider(rpc_url))

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def call(
        self,
        address: str,
        abi_fragment: Mapping[str, Any],
        function_name: str,
        args: Sequence[Any],
    ) -> Any:
        """Call *function_name* on the contract at *address*.

        Raises
        ------
        CallRevertedError
            If the call reverts or the contract returns no data.
        TransportError
            If the endpoint cannot be reached, answers with an HTTP error
            status, or returns an RPC error.
        """
        contract = self._w3.eth.contract(
            address=to_checksum_address(address), abi=[dict(abi_fragment)]
        )
        try:
            function = contract.get_function_by_name(function_name)(*args)
            return await function.call()
        except (ContractLogicError, BadFunctionCallOutput) as exc:
            raise CallRevertedError(address, function_name, str(exc)) from exc
        except (
            Web3Exception, aiohttp.ClientError, OSError, asyncio.TimeoutError, ValueError
        ) as exc:
            logger.debug("RPC call %s() on %s failed: %s", function_name, address, exc)
            raise TransportError("rpc", function_name, f"{self._rpc_url}: {exc}") from exc
