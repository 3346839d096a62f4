"""Call batch builder: ordered write operations for one naming update.

Builders are synchronous and perform no I/O.  Every target address (the
resolver, the reverse registrar, the custom registrar) is passed in by
the caller; backends look those up before delegating here.  Invalid input
raises :class:`~agent_naming.errors.BatchConstructionError` before any
call is built, so a partial batch is never returned.

Direct create/update order::

    setAddr(node, owner)
    setText(node, "url", url)                 # only when url is non-empty
    setText(node, "description", description) # only when non-empty
    setName(full_name)                        # on the reverse registrar

Registrar create order::

    register(label, owner)
    setAddr(node, coinType, owner)            # per coin type, when requested
    setText(node, key, value)                 # per non-empty text record

Address and ownership calls always precede text calls: some resolvers
refuse text writes for a node without an owner or address.
"""
from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from eth_abi.exceptions import EncodingError

from agent_naming import abi
from agent_naming.accounts import require_account
from agent_naming.batch.calls import CallBatch, CallDescriptor
from agent_naming.codec.identity import (
    IDENTITY_TEXT_KEY,
    AgentIdentityRecord,
    encode_agent_identity,
)
from agent_naming.errors import BatchConstructionError
from agent_naming.naming.convention import normalize_name, require_label
from agent_naming.naming.namehash import namehash

ETH_COIN_TYPE = 60
_EVM_COIN_TYPE_FLAG = 0x80000000


def evm_coin_type(chain_id: int) -> int:
    """Return the ENSIP-11 coin type for an EVM chain (60 for Ethereum mainnet)."""
    if chain_id == 1:
        return ETH_COIN_TYPE
    return _EVM_COIN_TYPE_FLAG | chain_id


def _account(value: object, field: str) -> str:
    try:
        return require_account(value, field)
    except ValueError as exc:
        raise BatchConstructionError(str(exc)) from exc


def _name(value: str) -> str:
    name = normalize_name(value)
    if name is None:
        raise BatchConstructionError(f"{value!r} is not a valid name")
    return name


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


# ------------------------------------------------------------------
# Single calls
# ------------------------------------------------------------------


def set_addr_call(resolver: str, name: str, account: str) -> CallDescriptor:
    """``setAddr(node, account)`` on *resolver*."""
    target = _account(resolver, "resolver")
    owner = _account(account, "account")
    data = abi.encode_function_call(abi.RESOLVER_SET_ADDR, [namehash(_name(name)), owner])
    return CallDescriptor(to=target, data=data, label="setAddr")


def set_coin_addr_call(
    resolver: str, name: str, coin_type: int, account: str
) -> CallDescriptor:
    """``setAddr(node, coinType, bytes)`` with the raw 20-byte account."""
    target = _account(resolver, "resolver")
    owner = _account(account, "account")
    if coin_type < 0:
        raise BatchConstructionError(f"coin type must be unsigned, got {coin_type}")
    data = abi.encode_function_call(
        abi.RESOLVER_SET_ADDR_COIN,
        [namehash(_name(name)), coin_type, bytes.fromhex(owner[2:])],
    )
    return CallDescriptor(to=target, data=data, label=f"setAddr({coin_type})")


def set_text_call(resolver: str, name: str, key: str, value: str) -> CallDescriptor:
    """``setText(node, key, value)`` on *resolver*."""
    target = _account(resolver, "resolver")
    if not key:
        raise BatchConstructionError("text record key must not be empty")
    data = abi.encode_function_call(abi.RESOLVER_SET_TEXT, [namehash(_name(name)), key, value])
    return CallDescriptor(to=target, data=data, label=f"setText({key})")


def set_name_call(reverse_registrar: str, name: str) -> CallDescriptor:
    """``setName(name)`` on the reverse registrar."""
    target = _account(reverse_registrar, "reverse registrar")
    data = abi.encode_function_call(abi.REVERSE_SET_NAME, [_name(name)])
    return CallDescriptor(to=target, data=data, label="setName")


def register_call(registrar: str, label: str, owner: str) -> CallDescriptor:
    """``register(label, owner)`` on a custom registrar."""
    target = _account(registrar, "registrar")
    try:
        canonical = require_label(label, "agent label")
    except ValueError as exc:
        raise BatchConstructionError(str(exc)) from exc
    data = abi.encode_function_call(
        abi.REGISTRAR_REGISTER, [canonical, _account(owner, "owner")]
    )
    return CallDescriptor(to=target, data=data, label="register")


def encoded_call(
    to: str,
    fragment: Mapping[str, object],
    args: Sequence[object],
    value: int = 0,
) -> CallDescriptor:
    """Encode an arbitrary call, e.g. one described by a minting service."""
    target = _account(to, "call target")
    try:
        data = abi.encode_function_call(fragment, args)
    except (EncodingError, TypeError, ValueError) as exc:
        raise BatchConstructionError(f"Cannot encode {fragment.get('name')}(): {exc}") from exc
    return CallDescriptor(to=target, data=data, value=value, label=str(fragment.get("name", "")))


# ------------------------------------------------------------------
# Batches
# ------------------------------------------------------------------


def build_direct_create_batch(
    *,
    resolver: str,
    reverse_registrar: str,
    full_name: str,
    owner: str,
    url: Optional[str] = None,
    description: Optional[str] = None,
) -> CallBatch:
    """Build the direct-backend batch that points *full_name* at *owner*.

    Parameters
    ----------
    resolver:
        Resolver that holds the forward records of *full_name*.
    reverse_registrar:
        Reverse registrar owning ``addr.reverse``; the ``setName`` call is
        sent there so *owner*'s reverse record resolves to *full_name*.
    full_name:
        Canonical agent name (``agent.org.eth``).
    owner:
        Account the name should resolve to.
    url, description:
        Optional text records; ``None``, empty and whitespace-only values
        are omitted.

    Returns
    -------
    CallBatch
        ``[setAddr, setText(url)?, setText(description)?, setName]``.

    Raises
    ------
    BatchConstructionError
        If any account or the name is invalid.
    """
    name = _name(full_name)
    calls = [set_addr_call(resolver, name, owner)]
    for key, value in (("url", _text(url)), ("description", _text(description))):
        if value is not None:
            calls.append(set_text_call(resolver, name, key, value))
    calls.append(set_name_call(reverse_registrar, name))
    return CallBatch.of(calls)


def build_registrar_create_batch(
    *,
    registrar: str,
    label: str,
    owner: str,
    resolver: Optional[str] = None,
    full_name: Optional[str] = None,
    coin_types: Iterable[int] = (),
    texts: Optional[Mapping[str, Optional[str]]] = None,
) -> CallBatch:
    """Build the custom-registrar batch for a new subdomain.

    ``register(label, owner)`` is always first.  Address records for
    *coin_types* and non-empty *texts* follow, in that order, and require
    *resolver* and *full_name*.

    Raises
    ------
    BatchConstructionError
        If the label or an account is invalid, or records were requested
        without a resolver and full name.
    """
    calls = [register_call(registrar, label, owner)]
    coin_types = list(coin_types)
    text_items = [(key, _text(value)) for key, value in (texts or {}).items()]
    text_items = [(key, value) for key, value in text_items if value is not None]
    if (coin_types or text_items) and (resolver is None or full_name is None):
        raise BatchConstructionError(
            "Address and text records need both a resolver and a full name"
        )
    for coin_type in coin_types:
        calls.append(set_coin_addr_call(resolver, full_name, coin_type, owner))  # type: ignore[arg-type]
    for key, value in text_items:
        calls.append(set_text_call(resolver, full_name, key, value))  # type: ignore[arg-type]
    return CallBatch.of(calls)


def build_text_batch(
    resolver: str, name: str, records: Mapping[str, Optional[str]]
) -> CallBatch:
    """One ``setText`` per non-empty entry of *records*, in mapping order."""
    name = _name(name)
    return CallBatch.of(
        [
            set_text_call(resolver, name, key, value)
            for key, value in ((k, _text(v)) for k, v in records.items())
            if value is not None
        ]
    )


def build_identity_batch(
    resolver: str, name: str, record: AgentIdentityRecord
) -> CallBatch:
    """A single ``setText(node, "agent-identity", encode(record))`` call."""
    return CallBatch.of(
        [set_text_call(resolver, name, IDENTITY_TEXT_KEY, encode_agent_identity(record))]
    )
