"""Deterministic canonical JSON serialization.

Every hash in canonpack is ``sha256(canonical_bytes(value))``. The encoding:

- mapping keys must be strings and are sorted by code point;
- lists and tuples keep their given order;
- no insignificant whitespace, no trailing newline;
- strings use JSON escaping without ASCII-escaping;
- integral numbers render as integers, other floats in shortest round-trip
  form with ECMAScript exponent style;
- NaN and Infinity are rejected.

This module is the sole authority for "two records are identical" and for
"this payload byte-matches its hash". Its output is frozen: legacy identity
hashes depend on it byte for byte.
"""

import hashlib
import json
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from canonpack.errors import CanonicalizationError

__all__ = [
    "canonical_dumps",
    "canonical_bytes",
    "canonical_hash",
]


def canonical_dumps(value: Any) -> str:
    """Serialize a JSON-compatible value tree to its canonical string.

    Parameters
    ----------
    value : Any
        None, bool, int, float, str, list/tuple, or mapping with string keys.

    Returns
    -------
    str
        Canonical JSON text.

    Raises
    ------
    CanonicalizationError
        If the tree contains a non-string key, a non-finite float, or an
        unsupported type.
    """
    parts: list[str] = []
    _encode(value, parts)
    return "".join(parts)


def canonical_bytes(value: Any) -> bytes:
    """Serialize a value tree to canonical UTF-8 bytes."""
    return canonical_dumps(value).encode("utf-8")


def canonical_hash(value: Any) -> str:
    """Return the lowercase sha256 hex digest of the canonical bytes."""
    return hashlib.sha256(canonical_bytes(value)).hexdigest()


def _encode(value: Any, parts: list[str]) -> None:
    if value is None:
        parts.append("null")
    elif value is True:
        parts.append("true")
    elif value is False:
        parts.append("false")
    elif isinstance(value, str):
        parts.append(_encode_string(value))
    elif isinstance(value, int):
        parts.append(str(int(value)))
    elif isinstance(value, float):
        parts.append(_encode_float(value))
    elif isinstance(value, Mapping):
        _encode_mapping(value, parts)
    elif isinstance(value, (list, tuple)):
        parts.append("[")
        for i, item in enumerate(value):
            if i:
                parts.append(",")
            _encode(item, parts)
        parts.append("]")
    else:
        raise CanonicalizationError(
            f"Cannot canonicalize value of type {type(value).__name__}"
        )


def _encode_mapping(value: Mapping[Any, Any], parts: list[str]) -> None:
    for key in value:
        if not isinstance(key, str):
            raise CanonicalizationError(f"Mapping keys must be strings, got {key!r}")

    parts.append("{")
    for i, key in enumerate(sorted(value)):
        if i:
            parts.append(",")
        parts.append(_encode_string(key))
        parts.append(":")
        _encode(value[key], parts)
    parts.append("}")


def _encode_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _encode_float(value: float) -> str:
    """Render a float the way ECMAScript Number#toString does."""
    if math.isnan(value) or math.isinf(value):
        raise CanonicalizationError(f"Non-finite number cannot be canonicalized: {value!r}")

    if value == 0:
        return "0"

    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    sign = "-" if value < 0 else ""
    digits, point = _shortest_digits(abs(value))
    k = len(digits)

    if k <= point <= 21:
        body = digits + "0" * (point - k)
    elif 0 < point <= 21:
        body = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        body = "0." + "0" * (-point) + digits
    else:
        exponent = point - 1
        mantissa = digits[0] + (f".{digits[1:]}" if k > 1 else "")
        body = f"{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"

    return sign + body


def _shortest_digits(value: float) -> tuple[str, int]:
    """Split a positive float into significant digits and decimal point position.

    Returns ``(digits, n)`` such that ``value == 0.<digits> * 10**n``, using
    the shortest digit string that round-trips.
    """
    decimal_value = Decimal(repr(value)).normalize()
    _, digit_tuple, exponent = decimal_value.as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    return digits, len(digits) + int(exponent)
