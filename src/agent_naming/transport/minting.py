"""Third-party subdomain minting and indexing service.

Chains served by a hosted minting service do not expose names through
an on-chain resolver the backend can read directly.  Instead the service
answers availability queries, returns indexed subname records, and
prepares mint transactions.  :class:`MintingClient` is the capability
set the minting backend depends on; :class:`HttpMintingClient` is an
``httpx`` implementation against the service's REST API.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx
from pydantic import BaseModel, Field, ValidationError

from agent_naming.errors import TransportError

logger = logging.getLogger(__name__)


class TextRecord(BaseModel):
    """One ``key -> value`` text record in a mint request."""

    key: str
    value: str


class AddressRecord(BaseModel):
    """One coin-type address record in a mint request."""

    chain: int
    value: str


class MintRecords(BaseModel):
    texts: list[TextRecord] = Field(default_factory=list)
    addresses: list[AddressRecord] = Field(default_factory=list)


class MintRequest(BaseModel):
    """Request body for preparing a subname mint transaction."""

    parent_name: str = Field(alias="parentName")
    label: str
    owner: str
    minter_address: str = Field(alias="minterAddress")
    records: MintRecords = Field(default_factory=MintRecords)

    model_config = {"populate_by_name": True}


class MintParameters(BaseModel):
    """Transaction parameters returned by the service for a mint request."""

    contract_address: str = Field(alias="contractAddress")
    abi: list[dict[str, Any]]
    function_name: str = Field(alias="functionName")
    args: list[Any] = Field(default_factory=list)
    value: int = 0

    model_config = {"populate_by_name": True}


class SubnameRecord(BaseModel):
    """An indexed subname as reported by the service."""

    name: str = ""
    owner: Optional[str] = None
    resolver: Optional[str] = None
    texts: dict[str, str] = Field(default_factory=dict)
    addresses: dict[str, str] = Field(default_factory=dict)


class MintingClient(Protocol):
    """Capability set of a third-party minting/indexing service."""

    async def is_label_available(self, name: str, chain_id: int) -> bool:
        """Return ``True`` when *name* can still be minted on *chain_id*."""
        ...

    async def get_subname(self, chain_id: int, node: str) -> Optional[SubnameRecord]:
        """Return the indexed record for *node*, or ``None`` if not minted."""
        ...

    async def get_mint_parameters(self, request: MintRequest) -> MintParameters:
        """Return the transaction parameters that mint *request*."""
        ...


class HttpMintingClient:
    """``httpx``-based :class:`MintingClient`.

    Parameters
    ----------
    base_url:
        Root URL of the minting service API.
    http_client:
        Optional shared :class:`httpx.AsyncClient`.  When omitted one is
        created on first use and closed by :meth:`close`.
    timeout:
        Request timeout in seconds for an owned client.  A timeout raises
        :class:`~agent_naming.errors.TransportError`.
    """

    AVAILABILITY_PATH = "/api/v1/subnames/available"
    SUBNAME_PATH = "/api/v1/subnames/{chain_id}/{node}"
    MINT_PATH = "/api/v1/mint/parameters"

    def __init__(
        self,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client
        self._owns_http_client = False
        self._timeout = timeout

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_http_client = True
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        allow_missing: bool = False,
        **kwargs: Any,
    ) -> Optional[Any]:
        client = await self._client()
        try:
            response = await client.request(method, f"{self._base_url}{path}", **kwargs)
            if allow_missing and response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise TransportError("minting", operation, str(exc)) from exc
        except ValueError as exc:
            raise TransportError("minting", operation, f"invalid JSON response: {exc}") from exc

    async def is_label_available(self, name: str, chain_id: int) -> bool:
        payload = await self._request(
            "is_label_available",
            "GET",
            self.AVAILABILITY_PATH,
            params={"name": name, "chainId": chain_id},
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("available"), bool):
            raise TransportError("minting", "is_label_available", f"unexpected payload {payload!r}")
        return payload["available"]

    async def get_subname(self, chain_id: int, node: str) -> Optional[SubnameRecord]:
        payload = await self._request(
            "get_subname",
            "GET",
            self.SUBNAME_PATH.format(chain_id=chain_id, node=node),
            allow_missing=True,
        )
        if payload is None:
            return None
        try:
            return SubnameRecord.model_validate(payload)
        except ValidationError as exc:
            raise TransportError("minting", "get_subname", str(exc)) from exc

    async def get_mint_parameters(self, request: MintRequest) -> MintParameters:
        payload = await self._request(
            "get_mint_parameters",
            "POST",
            self.MINT_PATH,
            json=request.model_dump(by_alias=True),
        )
        try:
            return MintParameters.model_validate(payload)
        except ValidationError as exc:
            raise TransportError("minting", "get_mint_parameters", str(exc)) from exc
