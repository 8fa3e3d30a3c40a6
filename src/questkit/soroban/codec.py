"""
ScVal codec for the Quest Manager contract.

Encoding turns Python values into the SCVal arguments the contract expects,
one function per argument kind. Decoding delegates to ``scval.to_native`` and
then normalises the SDK's objects into plain Python values before the typed
converters build domain objects.
"""

from __future__ import annotations

from typing import Any, Callable, Union

from stellar_sdk import Address, StrKey, scval
from stellar_sdk import xdr as stellar_xdr

from ..domain.errors import EncodingError
from ..domain.models import (
    DistributionType,
    PoolPosition,
    Quest,
    QuestStats,
    TokenHold,
    TradeVolume,
    UserStats,
)

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _unsigned(value: Any, limit: int, kind: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        try:
            value = int(str(value), 10)
        except ValueError:
            raise EncodingError(f"Expected an integer for {kind}, got {value!r}")
    if value < 0 or value > limit:
        raise EncodingError(f"Value {value} out of range for {kind}")
    return value


def encode_u32(value: Any) -> stellar_xdr.SCVal:
    return scval.to_uint32(_unsigned(value, U32_MAX, "u32"))


def encode_u64(value: Any) -> stellar_xdr.SCVal:
    return scval.to_uint64(_unsigned(value, U64_MAX, "u64"))


def encode_u128(value: Any) -> stellar_xdr.SCVal:
    return scval.to_uint128(_unsigned(value, U128_MAX, "u128"))


def encode_address(value: Any) -> stellar_xdr.SCVal:
    if isinstance(value, Address):
        return scval.to_address(value)
    text = str(value)
    if not (StrKey.is_valid_ed25519_public_key(text) or StrKey.is_valid_contract(text)):
        raise EncodingError(f"Not a valid account or contract address: {text!r}")
    return scval.to_address(text)


def encode_string(value: Any) -> stellar_xdr.SCVal:
    if not isinstance(value, str):
        raise EncodingError(f"Expected a string, got {type(value).__name__}")
    return scval.to_string(value)


def encode_bool(value: Any) -> stellar_xdr.SCVal:
    if not isinstance(value, bool):
        raise EncodingError(f"Expected a bool, got {type(value).__name__}")
    return scval.to_bool(value)


def _enum(tag: str, *values: stellar_xdr.SCVal) -> stellar_xdr.SCVal:
    # Contract enums are a vec whose first element is the variant symbol
    return scval.to_vec([scval.to_symbol(tag), *values])


def encode_distribution(value: Union[str, DistributionType]) -> stellar_xdr.SCVal:
    return _enum(DistributionType.parse(value).value)


def encode_quest_type(value: Any) -> stellar_xdr.SCVal:
    """
    Encode a quest type variant as its tagged contract enum.

    Raises:
        EncodingError: For anything that is not one of the three variants
    """
    if isinstance(value, TradeVolume):
        return _enum(value.tag, encode_u128(value.target_volume))
    if isinstance(value, PoolPosition):
        return _enum(value.tag, encode_u128(value.min_position))
    if isinstance(value, TokenHold):
        return _enum(value.tag, encode_address(value.token), encode_u128(value.min_amount))
    raise EncodingError(
        f"Unsupported quest type: {type(value).__name__} "
        "(expected TradeVolume, PoolPosition or TokenHold)"
    )


ENCODERS: dict[str, Callable[[Any], stellar_xdr.SCVal]] = {
    "u32": encode_u32,
    "u64": encode_u64,
    "u128": encode_u128,
    "address": encode_address,
    "string": encode_string,
    "bool": encode_bool,
    "distribution": encode_distribution,
    "quest_type": encode_quest_type,
}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _plain(value: Any) -> Any:
    if isinstance(value, Address):
        return value.address
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {_plain(k): _plain(v) for k, v in value.items()}
    return value


def to_python(value: Union[stellar_xdr.SCVal, str]) -> Any:
    """
    Decode an SCVal (or its base64 XDR) into plain Python values.

    Addresses become strkeys, Soroban strings become ``str``, vecs become
    lists and maps become dicts.
    """
    if isinstance(value, str):
        value = stellar_xdr.SCVal.from_xdr(value)
    return _plain(scval.to_native(value))


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"Expected an integer result, got {value!r}")
    return value


def _as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise EncodingError(f"Expected a bool result, got {value!r}")
    return value


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise EncodingError(f"Expected a vec result, got {value!r}")
    return value


def _as_map(value: Any) -> dict:
    if not isinstance(value, dict):
        raise EncodingError(f"Expected a struct result, got {value!r}")
    return value


DECODERS: dict[str, Callable[[Any], Any]] = {
    "void": lambda v: None,
    "bool": _as_bool,
    "u32": _as_int,
    "u64": _as_int,
    "u128": _as_int,
    "address_list": lambda v: [str(a) for a in _as_list(v)],
    "u64_list": lambda v: [_as_int(i) for i in _as_list(v)],
    "quest": lambda v: Quest.from_native(_as_map(v)),
    "quest_list": lambda v: [Quest.from_native(_as_map(q)) for q in _as_list(v)],
    "quest_stats": lambda v: QuestStats.from_native(_as_map(v)),
    "user_stats": lambda v: UserStats.from_native(_as_map(v)),
}


def decode_value(kind: str, value: Union[stellar_xdr.SCVal, str, None]) -> Any:
    """Decode a raw return value into the Python type for ``kind``."""
    try:
        decoder = DECODERS[kind]
    except KeyError:
        raise EncodingError(f"No decoder for return kind {kind!r}")
    if value is None:
        return None if kind == "void" else decoder(None)
    try:
        return decoder(to_python(value))
    except (KeyError, TypeError) as exc:
        raise EncodingError(f"Malformed {kind} value: {exc}") from exc
