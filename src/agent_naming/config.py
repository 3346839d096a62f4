"""Naming configuration: per-chain addresses and endpoints.

Every field a backend needs is declared and validated here, at
construction time, instead of being discovered at first use.  Address
fields are checksummed; a chain must configure at least one naming
system (registry, custom registrar or minting service).

Configuration can be loaded from a JSON document::

    {
      "chains": [
        {
          "chain_id": 11155111,
          "name": "Ethereum Sepolia",
          "rpc_url": "https://rpc.sepolia.example",
          "ens_registry": "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e",
          "ens_resolver": "0xE99638b40E4Fff0129D56f03b55b6bbC4BBE49b5",
          "identity_registry": "0x..."
        }
      ]
    }

or from ``AGENT_NAMING_<PREFIX>_*`` environment variables with
:func:`load_config_from_env`.
"""
from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from agent_naming.accounts import normalize_account
from agent_naming.errors import ConfigurationError, UnknownChainError

ENS_REGISTRY_ADDRESS = "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e"

# Custom per-chain registrars and the L2 registry/resolver they write to.
KNOWN_REGISTRARS: dict[int, str] = {
    84532: "0x68CAd072571E8bea1DA9e5C071367Aa6ddC8F37F",
}
KNOWN_L2_REGISTRIES: dict[int, str] = {
    84532: "0x119bFf40969bFBe0438c3f72f3855958E8E0d30c",
}

# Environment variable prefixes of the networks the loader knows about.
ENV_PREFIXES: dict[int, str] = {
    11155111: "ETH_SEPOLIA",
    84532: "BASE_SEPOLIA",
    11155420: "OP_SEPOLIA",
}
ENV_CHAIN_NAMES: dict[int, str] = {
    11155111: "Ethereum Sepolia",
    84532: "Base Sepolia",
    11155420: "OP Sepolia",
}
_L1_CHAINS = frozenset({1, 11155111})


class NetworkType(str, Enum):
    L1 = "L1"
    L2 = "L2"


class ChainConfig(BaseModel):
    """Naming configuration for one chain.

    Parameters
    ----------
    chain_id:
        Numeric chain id.
    name:
        Display name, also used for the ``chain`` text record.
    rpc_url:
        JSON-RPC endpoint.
    identity_registry:
        Agent identity registry; the default registry in encoded identities.
    ens_registry:
        Naming registry for the direct backend.
    ens_resolver:
        Default resolver, used as the write target for names whose resolver
        is not yet registered.
    reverse_registrar:
        Reverse registrar; discovered from the registry when omitted.
    registrar:
        Custom registrar contract.  Defaults to the known registrar of the
        chain, if any.
    registrar_registry:
        Registry/resolver the custom registrar writes to.
    minting_api_url:
        Base URL of a third-party minting service for this chain.
    network_type:
        ``L1`` or ``L2``; derived from the chain id when omitted.
    """

    chain_id: int = Field(gt=0)
    name: str = ""
    rpc_url: str
    identity_registry: Optional[str] = None
    ens_registry: Optional[str] = None
    ens_resolver: Optional[str] = None
    reverse_registrar: Optional[str] = None
    registrar: Optional[str] = None
    registrar_registry: Optional[str] = None
    minting_api_url: Optional[str] = None
    network_type: Optional[NetworkType] = None

    @field_validator(
        "identity_registry",
        "ens_registry",
        "ens_resolver",
        "reverse_registrar",
        "registrar",
        "registrar_registry",
        mode="before",
    )
    @classmethod
    def _checksum(cls, value: object) -> Optional[str]:
        if value is None or value == "":
            return None
        account = normalize_account(value)
        if account is None:
            raise ValueError(f"{value!r} is not a non-zero 20-byte hex address")
        return account

    @field_validator("rpc_url")
    @classmethod
    def _require_url(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("rpc_url must not be empty")
        return value.strip()

    @model_validator(mode="after")
    def _fill_defaults(self) -> "ChainConfig":
        updates: dict[str, object] = {}
        if self.registrar is None and self.chain_id in KNOWN_REGISTRARS:
            updates["registrar"] = KNOWN_REGISTRARS[self.chain_id]
        if self.registrar_registry is None and self.chain_id in KNOWN_L2_REGISTRIES:
            updates["registrar_registry"] = KNOWN_L2_REGISTRIES[self.chain_id]
        if self.network_type is None:
            updates["network_type"] = (
                NetworkType.L1 if self.chain_id in _L1_CHAINS else NetworkType.L2
            )
        if not self.name:
            updates["name"] = ENV_CHAIN_NAMES.get(self.chain_id, f"chain-{self.chain_id}")
        for key, value in updates.items():
            setattr(self, key, value)

        registrar = self.registrar
        if self.ens_registry is None and registrar is None and not self.minting_api_url:
            raise ValueError(
                f"chain {self.chain_id} configures no naming system "
                "(set ens_registry, registrar or minting_api_url)"
            )
        if registrar is not None and self.registrar_registry is None:
            raise ValueError(
                f"chain {self.chain_id} sets a registrar without registrar_registry"
            )
        return self

    @property
    def chain_slug(self) -> str:
        """Lowercased, dash-separated chain name (``base-sepolia``)."""
        return "-".join(self.name.lower().split())


class NamingConfig(BaseModel):
    """The full multi-chain configuration."""

    chains: list[ChainConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_chains(self) -> "NamingConfig":
        seen: set[int] = set()
        for chain in self.chains:
            if chain.chain_id in seen:
                raise ValueError(f"chain {chain.chain_id} is configured more than once")
            seen.add(chain.chain_id)
        return self

    def chain(self, chain_id: int) -> ChainConfig:
        """Return the configuration for *chain_id*.

        Raises
        ------
        UnknownChainError
            If the chain is not configured.
        """
        for chain in self.chains:
            if chain.chain_id == chain_id:
                return chain
        raise UnknownChainError(chain_id)

    @property
    def chain_ids(self) -> list[int]:
        return [chain.chain_id for chain in self.chains]


def parse_config(data: Mapping[str, object]) -> NamingConfig:
    """Validate a configuration mapping.

    Raises
    ------
    ConfigurationError
        If the mapping does not describe a valid configuration.
    """
    try:
        return NamingConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid naming configuration: {exc}") from exc


def load_config(path: str | Path) -> NamingConfig:
    """Load and validate a JSON configuration file.

    Raises
    ------
    ConfigurationError
        If the file cannot be read, is not JSON, or is invalid.
    """
    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read naming configuration {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a JSON object")
    return parse_config(data)


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> NamingConfig:
    """Build a configuration from ``AGENT_NAMING_<PREFIX>_*`` variables.

    For each known network prefix (``ETH_SEPOLIA``, ``BASE_SEPOLIA``,
    ``OP_SEPOLIA``) the variables ``RPC_URL``, ``ENS_REGISTRY``,
    ``ENS_RESOLVER``, ``IDENTITY_REGISTRY``, ``REVERSE_REGISTRAR``,
    ``REGISTRAR`` and ``MINTING_API_URL`` are read.  Networks without an
    RPC URL are skipped.
    """
    env = os.environ if environ is None else environ
    chains: list[dict[str, object]] = []
    for chain_id, prefix in ENV_PREFIXES.items():
        def var(suffix: str) -> Optional[str]:
            value = env.get(f"AGENT_NAMING_{prefix}_{suffix}", "").strip()
            return value or None

        rpc_url = var("RPC_URL")
        if rpc_url is None:
            continue
        chains.append(
            {
                "chain_id": chain_id,
                "name": ENV_CHAIN_NAMES[chain_id],
                "rpc_url": rpc_url,
                "ens_registry": var("ENS_REGISTRY")
                or (ENS_REGISTRY_ADDRESS if chain_id in _L1_CHAINS else None),
                "ens_resolver": var("ENS_RESOLVER"),
                "identity_registry": var("IDENTITY_REGISTRY"),
                "reverse_registrar": var("REVERSE_REGISTRAR"),
                "registrar": var("REGISTRAR"),
                "minting_api_url": var("MINTING_API_URL"),
            }
        )
    return parse_config({"chains": chains})
