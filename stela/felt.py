"""
Field element codec

Conversions between Python integers, felt252 values, u256 (low, high) limb pairs,
Cairo short strings, hex strings and human readable token amounts. Every other
module goes through these helpers instead of shifting bits on its own.
"""

from typing import Any, Dict, Tuple, Union

from .config import FIELD_PRIME
from .errors import EncodingError, RangeError

U128_BOUND = 2**128
U256_BOUND = 2**256
U128_MASK = U128_BOUND - 1

SHORTSTRING_MAX_LEN = 31

IntLike = Union[int, str]


def parse_int(value: Any) -> int:
    """Parse an int, decimal string or 0x-prefixed hex string"""
    if isinstance(value, bool):
        raise EncodingError(f"Expected an integer, got bool {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            if text.lstrip("-").isdigit():
                return int(text, 10)
        except ValueError:
            pass
        raise EncodingError(f"Malformed integer literal: {value!r}")
    raise EncodingError(f"Unsupported value type {type(value).__name__}: {value!r}")


def parse_bool(value: Any) -> bool:
    """Parse a bool, 0/1 or a "true"/"false"/"0"/"1" string"""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("1", "true"):
            return True
        if text in ("0", "false"):
            return False
    raise EncodingError(f"Invalid bool value: {value!r}")


def to_felt(value: Any) -> int:
    """Range-checked conversion into a field element"""
    n = parse_int(value)
    if n < 0 or n >= FIELD_PRIME:
        raise RangeError(f"Value is not a valid field element: {n}")
    return n


def encode_shortstring(text: str) -> int:
    """Pack up to 31 ASCII characters into one felt (big-endian)"""
    if not isinstance(text, str):
        raise EncodingError(f"Short string must be str, got {type(text).__name__}")
    try:
        raw = text.encode("ascii")
    except UnicodeEncodeError:
        raise EncodingError(f"Short string must be ASCII: {text!r}") from None
    if len(raw) > SHORTSTRING_MAX_LEN:
        raise RangeError(f"Short string exceeds {SHORTSTRING_MAX_LEN} bytes: {text!r}")
    return int.from_bytes(raw, "big")


def decode_shortstring(value: IntLike) -> str:
    n = to_felt(value)
    length = (n.bit_length() + 7) // 8
    if length > SHORTSTRING_MAX_LEN:
        raise RangeError(f"Felt too large for a short string: {hex(n)}")
    try:
        return n.to_bytes(length, "big").decode("ascii")
    except UnicodeDecodeError:
        raise EncodingError(f"Felt is not an ASCII short string: {hex(n)}") from None


def parse_felt(value: Any) -> int:
    """Coerce a felt/shortstring field value the way SNIP-12 revision 1 does.

    Integers pass through, decimal-digit strings and 0x hex strings are read as
    numbers, and any other string is packed as a short string. The result is
    range-checked against the field.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit() or (text.lower().startswith("0x") and _is_hex(text[2:])):
            return to_felt(text)
        return to_felt(encode_shortstring(value))
    return to_felt(value)


def _is_hex(digits: str) -> bool:
    if not digits:
        return False
    try:
        int(digits, 16)
    except ValueError:
        return False
    return True


def to_u256(n: Any) -> Tuple[int, int]:
    """Split an unsigned 256-bit integer into (low, high) u128 limbs"""
    value = parse_int(n)
    if value < 0 or value >= U256_BOUND:
        raise RangeError(f"Value out of u256 range: {value}")
    return value & U128_MASK, value >> 128


def from_u256(low: Any, high: Any) -> int:
    """Recombine (low, high) u128 limbs into one integer"""
    lo = parse_int(low)
    hi = parse_int(high)
    if not (0 <= lo < U128_BOUND and 0 <= hi < U128_BOUND):
        raise RangeError("Invalid u256 component: low and high must be u128")
    return lo + (hi << 128)


def split_u256(value: Any) -> Dict[str, str]:
    """Hex {low, high} form used by the order-book JSON payloads"""
    low, high = to_u256(value)
    return {"low": hex(low), "high": hex(high)}


def id_to_fixed_hex(value: Any) -> str:
    """0x-prefixed, zero-padded 64 digit hex string (storage key form)"""
    if isinstance(value, dict):
        n = from_u256(value["low"], value["high"])
    elif isinstance(value, tuple):
        n = from_u256(*value)
    else:
        low, high = to_u256(value)
        n = from_u256(low, high)
    return "0x" + format(n, "064x")


def to_hex(value: Any) -> str:
    return hex(parse_int(value))


def normalize_address(address: Any) -> str:
    """Fully padded lower-case hex form of a contract address"""
    return "0x" + format(to_felt(address), "064x")


def addresses_equal(a: Any, b: Any) -> bool:
    try:
        return normalize_address(a) == normalize_address(b)
    except EncodingError:
        return str(a).lower() == str(b).lower()


def format_address(address: Any) -> str:
    """Truncate an address for display: 0x1a2b...3c4d"""
    padded = normalize_address(address)
    return f"{padded[:6]}...{padded[-4:]}"


def parse_amount(human_amount: str, decimals: int) -> int:
    """Convert a human readable amount (e.g. "1.5") to its raw on-chain value"""
    if not human_amount or human_amount == ".":
        return 0
    whole, _, frac = human_amount.partition(".")
    frac = frac.ljust(decimals, "0")[:decimals]
    digits = (whole or "0") + frac
    if not digits.isdigit():
        raise EncodingError(f"Malformed amount: {human_amount!r}")
    return int(digits)


def format_token_value(raw: Any, decimals: int) -> str:
    """Format a raw token value given its decimals"""
    if raw is None or raw == "" or raw == "0":
        return "0"
    n = parse_int(raw)
    if decimals == 0:
        return str(n)
    whole, frac = divmod(n, 10**decimals)
    if frac == 0:
        return str(whole)
    return f"{whole}.{str(frac).rjust(decimals, '0').rstrip('0')}"
