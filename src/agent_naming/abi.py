"""ABI fragments and call-data encoding for the naming contracts.

Only the functions this package reads or writes are listed.  Fragments
follow the JSON ABI format so they can be handed to web3 for reads and to
:func:`encode_function_call` for writes.

Arguments may arrive in their JSON shape, as returned by a minting
service.  :func:`normalize_arguments` converts them to the values
``eth_abi`` expects before encoding.
"""
from __future__ import annotations

from typing import Any, Mapping, Sequence

from eth_abi import encode
from eth_utils import decode_hex, is_hex, keccak
from eth_utils.abi import collapse_if_tuple


def _fragment(
    name: str,
    inputs: Sequence[tuple[str, str]],
    outputs: Sequence[tuple[str, str]] = (),
    mutability: str = "view",
) -> dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": mutability,
        "inputs": [{"name": arg, "type": typ} for arg, typ in inputs],
        "outputs": [{"name": arg, "type": typ} for arg, typ in outputs],
    }


# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------

REGISTRY_RESOLVER = _fragment("resolver", [("node", "bytes32")], [("", "address")])
REGISTRY_OWNER = _fragment("owner", [("node", "bytes32")], [("", "address")])

# ------------------------------------------------------------------
# Resolver (reads)
# ------------------------------------------------------------------

RESOLVER_ADDR = _fragment("addr", [("node", "bytes32")], [("", "address")])
RESOLVER_TEXT = _fragment("text", [("node", "bytes32"), ("key", "string")], [("", "string")])
RESOLVER_NAME = _fragment("name", [("node", "bytes32")], [("", "string")])

# ------------------------------------------------------------------
# Resolver / reverse registrar (writes)
# ------------------------------------------------------------------

RESOLVER_SET_ADDR = _fragment(
    "setAddr", [("node", "bytes32"), ("a", "address")], mutability="nonpayable"
)
RESOLVER_SET_ADDR_COIN = _fragment(
    "setAddr",
    [("node", "bytes32"), ("coinType", "uint256"), ("a", "bytes")],
    mutability="nonpayable",
)
RESOLVER_SET_TEXT = _fragment(
    "setText",
    [("node", "bytes32"), ("key", "string"), ("value", "string")],
    mutability="nonpayable",
)
REVERSE_SET_NAME = _fragment(
    "setName", [("name", "string")], [("node", "bytes32")], mutability="nonpayable"
)

# ------------------------------------------------------------------
# Custom registrar
# ------------------------------------------------------------------

REGISTRAR_AVAILABLE = _fragment("available", [("label", "string")], [("available", "bool")])
REGISTRAR_REGISTER = _fragment(
    "register", [("label", "string"), ("owner", "address")], mutability="nonpayable"
)


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------


def function_signature(fragment: Mapping[str, Any]) -> str:
    """Return the canonical signature, e.g. ``setText(bytes32,string,string)``."""
    types = ",".join(collapse_if_tuple(dict(arg)) for arg in fragment.get("inputs", []))
    return f"{fragment['name']}({types})"


def function_selector(fragment: Mapping[str, Any]) -> bytes:
    """Return the 4-byte selector for *fragment*."""
    return keccak(text=function_signature(fragment))[:4]


def _normalize(param: Mapping[str, Any], value: Any) -> Any:
    typ = str(param["type"])
    if typ.endswith("]"):
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"{typ} argument must be a list, got {type(value).__name__}")
        element = dict(param, type=typ[: typ.rindex("[")])
        return [_normalize(element, item) for item in value]
    if typ == "tuple":
        components = param.get("components", [])
        if isinstance(value, Mapping):
            missing = [c["name"] for c in components if c["name"] not in value]
            if missing:
                raise ValueError(f"struct argument is missing field(s) {missing}")
            value = [value[c["name"]] for c in components]
        if not isinstance(value, (list, tuple)) or len(value) != len(components):
            raise TypeError(f"struct argument must have {len(components)} field(s)")
        return tuple(_normalize(c, item) for c, item in zip(components, value))
    if isinstance(value, str):
        if typ.startswith("bytes"):
            if not is_hex(value):
                raise ValueError(f"{typ} argument must be hex, got {value!r}")
            return decode_hex(value)
        if typ.startswith(("uint", "int")):
            return int(value, 0)
    return value


def normalize_arguments(fragment: Mapping[str, Any], args: Sequence[Any]) -> list[Any]:
    """Convert JSON-shaped *args* to the Python values ``eth_abi`` encodes.

    - ``bytes``/``bytesN`` hex strings become bytes.
    - ``intN``/``uintN`` strings (decimal or ``0x`` hex) become integers.
    - Struct objects become tuples in component order.
    - Arrays are converted element by element.

    Values already in Python form pass through unchanged.

    Raises
    ------
    ValueError
        If the number of arguments does not match the fragment's inputs or
        a value cannot be converted.
    """
    inputs = fragment.get("inputs", [])
    if len(inputs) != len(args):
        raise ValueError(
            f"{fragment['name']}() takes {len(inputs)} argument(s), got {len(args)}"
        )
    return [_normalize(param, value) for param, value in zip(inputs, args)]


def encode_function_call(fragment: Mapping[str, Any], args: Sequence[Any]) -> bytes:
    """ABI-encode a call to *fragment* with positional *args*.

    Raises
    ------
    ValueError
        If the arguments do not match the fragment's inputs.
    """
    types = [collapse_if_tuple(dict(arg)) for arg in fragment.get("inputs", [])]
    return function_selector(fragment) + encode(types, normalize_arguments(fragment, args))


def find_fragment(abi: Sequence[Mapping[str, Any]], function_name: str) -> Mapping[str, Any]:
    """Return the first function fragment in *abi* named *function_name*.

    Raises
    ------
    ValueError
        If *abi* has no function with that name.
    """
    for entry in abi:
        if entry.get("type", "function") == "function" and entry.get("name") == function_name:
            return entry
    raise ValueError(f"ABI does not define a function named {function_name!r}")
