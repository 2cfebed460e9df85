"""Document values and their canonical text encodings.

Documents are plain JSON-shaped Python data. ``int`` stands for a 64-bit
integer and ``float`` for a 64-bit float; ``bool`` is never treated as a
number even though Python makes it an ``int`` subclass.

The JSON encoder matches the encoding the control plane uses for values
that get hashed or copied into connection details: sorted keys, no
whitespace, integral floats without a fractional part.
"""

from __future__ import annotations

import json
import math
from decimal import Decimal
from enum import StrEnum
from typing import Final, TypeAlias

Value: TypeAlias = "str | int | float | bool | None | list[Value] | dict[str, Value]"
Document: TypeAlias = "dict[str, Value]"


class ValueType(StrEnum):
    """Type names used by transforms and in error messages."""

    STRING = "string"
    INT = "int"
    INT64 = "int64"
    FLOAT64 = "float64"
    BOOL = "bool"
    OBJECT = "object"
    ARRAY = "array"


def value_type(value: object) -> ValueType | None:
    """Classify ``value``; ``None`` when it is not a JSON-shaped value."""

    match value:
        case bool():
            return ValueType.BOOL
        case str():
            return ValueType.STRING
        case int():
            return ValueType.INT64
        case float():
            return ValueType.FLOAT64
        case dict():
            return ValueType.OBJECT
        case list():
            return ValueType.ARRAY
        case _:
            return None


def describe_type(value: object) -> str:
    if value is None:
        return "null"
    kind = value_type(value)
    return str(kind) if kind is not None else type(value).__name__


def is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def deep_equal(left: object, right: object) -> bool:
    """Structural equality that keeps ``True``, ``1`` and ``1.0`` apart."""

    if type(left) is not type(right):
        return False
    if isinstance(left, dict):
        assert isinstance(right, dict)
        return left.keys() == right.keys() and all(
            deep_equal(item, right[key]) for key, item in left.items()
        )
    if isinstance(left, list):
        assert isinstance(right, list)
        return len(left) == len(right) and all(
            deep_equal(a, b) for a, b in zip(left, right, strict=True)
        )
    return left == right


def is_empty(value: object) -> bool:
    """Zero-value test used by merge policies: ``""``, ``0``, ``False``, empty containers."""

    if value is None:
        return True
    if isinstance(value, str | list | dict):
        return len(value) == 0
    if isinstance(value, bool):
        return not value
    if is_number(value):
        return value == 0
    return False


_HTML_ESCAPES: Final[dict[str, str]] = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def marshal_json(value: Value) -> str:
    """Encode ``value`` as compact JSON with sorted object keys."""

    match value:
        case None:
            return "null"
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case float():
            return _json_float(value)
        case str():
            return _json_string(value)
        case list():
            return "[" + ",".join(marshal_json(item) for item in value) + "]"
        case dict():
            members = (
                f"{_json_string(key)}:{marshal_json(value[key])}" for key in sorted(value)
            )
            return "{" + ",".join(members) + "}"
        case _:
            raise TypeError(f"json: unsupported type: {type(value).__name__}")


def _json_string(text: str) -> str:
    encoded = json.dumps(text, ensure_ascii=False)
    for char, escape in _HTML_ESCAPES.items():
        encoded = encoded.replace(char, escape)
    return encoded


def _json_float(number: float) -> str:
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"json: unsupported value: {format_float_general(number)}")
    magnitude = abs(number)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        text = repr(number)
        mantissa, _, exponent = text.partition("e")
        sign = exponent[0]
        digits = exponent[1:].lstrip("0") or "0"
        return f"{mantissa}e{sign}{digits}"
    return format_float_positional(number)


def format_float_positional(number: float) -> str:
    """Shortest round-tripping decimal without an exponent (``1000``, ``0.25``)."""

    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    return format(Decimal(repr(number)).normalize(), "f")


def format_float_general(number: float) -> str:
    """Shortest ``%g``-style rendering: exponent form outside ``1e-4 <= |x| < 1e6``."""

    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    if number == 0:
        return "-0" if math.copysign(1.0, number) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(number)).normalize().as_tuple()
    assert isinstance(exponent, int)
    digits = "".join(str(d) for d in digit_tuple)
    point = len(digits) + exponent
    prefix = "-" if sign else ""
    decimal_exponent = point - 1

    if decimal_exponent < -4 or decimal_exponent >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if decimal_exponent < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(decimal_exponent):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{prefix}{digits}{'0' * (point - len(digits))}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"
