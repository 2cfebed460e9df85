"""Type conversions between document value types."""

from __future__ import annotations

import json
import math
import re
from typing import TYPE_CHECKING, Final, TypeAlias

from patchform.domain.errors import TransformError
from patchform.domain.values import (
    ValueType,
    describe_type,
    format_float_positional,
    marshal_json,
    value_type,
)
from patchform.schema import ConvertTransformFormat

from .quantity import quantity_to_float

if TYPE_CHECKING:
    from collections.abc import Callable

    from patchform.domain.values import Value
    from patchform.schema import ConvertTransform

Conversion: TypeAlias = "Callable[[Value], Value]"

_INT64_MIN: Final[int] = -(2**63)
_INT64_MAX: Final[int] = 2**63 - 1
_INTEGER_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?[0-9]+$")
_INFINITY_SPELLINGS: Final[frozenset[str]] = frozenset({"inf", "infinity"})

_BOOL_STRINGS: Final[dict[str, bool]] = {
    "1": True,
    "t": True,
    "T": True,
    "TRUE": True,
    "true": True,
    "True": True,
    "0": False,
    "f": False,
    "F": False,
    "FALSE": False,
    "false": False,
    "False": False,
}


def resolve_convert(transform: ConvertTransform, value: Value) -> Value:
    """Convert ``value`` to ``transform.to_type``.

    Converting to the input's own type returns the input untouched whatever
    the format says.
    """

    from_type = value_type(value)
    if from_type is None:
        raise TransformError(f"invalid input type {describe_type(value)}")
    try:
        to_type = ValueType(transform.to_type)
    except ValueError as exc:
        raise TransformError(f'toType: Invalid value: "{transform.to_type}": invalid type') from exc

    conversion = conversion_for(from_type, to_type, transform.effective_format)
    return conversion(value)


def conversion_for(from_type: ValueType, to_type: ValueType, fmt: str) -> Conversion:
    if to_type is ValueType.INT:
        to_type = ValueType.INT64
    if from_type is to_type:
        return _identity
    conversion = _CONVERSIONS.get((from_type, to_type, fmt))
    if conversion is None:
        raise TransformError(
            f"conversion from {from_type} to {to_type} is not supported with format {fmt}"
        )
    return conversion


def _identity(value: Value) -> Value:
    return value


def _string_to_int(value: Value) -> Value:
    assert isinstance(value, str)
    if _INTEGER_RE.match(value) is None:
        raise TransformError(f"cannot parse {value!r} as int64: invalid syntax")
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise TransformError(f"cannot parse {value!r} as int64: value out of range")
    return number


def _string_to_bool(value: Value) -> Value:
    assert isinstance(value, str)
    try:
        return _BOOL_STRINGS[value]
    except KeyError as exc:
        raise TransformError(f"cannot parse {value!r} as bool: invalid syntax") from exc


def _string_to_float(value: Value) -> Value:
    assert isinstance(value, str)
    if not value or value != value.strip() or "_" in value:
        raise TransformError(f"cannot parse {value!r} as float64: invalid syntax")
    try:
        parsed = float(value)
    except ValueError as exc:
        raise TransformError(f"cannot parse {value!r} as float64: invalid syntax") from exc
    if math.isinf(parsed) and value.lstrip("+-").lower() not in _INFINITY_SPELLINGS:
        raise TransformError(f"cannot parse {value!r} as float64: value out of range")
    return parsed


def _string_to_quantity(value: Value) -> Value:
    assert isinstance(value, str)
    return quantity_to_float(value)


def _json_parser(expected: type[dict[str, Value]] | type[list[Value]]) -> Conversion:
    def parse(value: Value) -> Value:
        assert isinstance(value, str)
        try:
            parsed = json.loads(value, parse_constant=_reject_constant)
        except ValueError as exc:
            raise TransformError(f"cannot parse {value!r} as JSON: {exc}") from exc
        if not isinstance(parsed, expected):
            raise TransformError(
                f"cannot unmarshal {describe_type(parsed)} into {value_type(expected())}"
            )
        return parsed

    return parse


def _reject_constant(name: str) -> Value:
    raise ValueError(f"invalid character {name[0]!r} looking for beginning of value")


def _to_json_string(value: Value) -> Value:
    try:
        return marshal_json(value)
    except (ValueError, TypeError) as exc:
        raise TransformError(str(exc)) from exc


def _int_to_string(value: Value) -> Value:
    return str(value)


def _float_to_string(value: Value) -> Value:
    assert isinstance(value, float)
    return format_float_positional(value)


def _float_to_int(value: Value) -> Value:
    assert isinstance(value, float)
    if math.isnan(value) or math.isinf(value):
        raise TransformError(f"cannot convert {format_float_positional(value)} to int64")
    return int(value)


def _bool_to_string(value: Value) -> Value:
    return "true" if value else "false"


_NONE = ConvertTransformFormat.NONE

_CONVERSIONS: Final[dict[tuple[ValueType, ValueType, str], Conversion]] = {
    (ValueType.STRING, ValueType.INT64, _NONE): _string_to_int,
    (ValueType.STRING, ValueType.BOOL, _NONE): _string_to_bool,
    (ValueType.STRING, ValueType.FLOAT64, _NONE): _string_to_float,
    (ValueType.STRING, ValueType.FLOAT64, ConvertTransformFormat.QUANTITY): _string_to_quantity,
    (ValueType.STRING, ValueType.OBJECT, ConvertTransformFormat.JSON): _json_parser(dict),
    (ValueType.STRING, ValueType.ARRAY, ConvertTransformFormat.JSON): _json_parser(list),
    (ValueType.OBJECT, ValueType.STRING, ConvertTransformFormat.JSON): _to_json_string,
    (ValueType.ARRAY, ValueType.STRING, ConvertTransformFormat.JSON): _to_json_string,
    (ValueType.INT64, ValueType.STRING, _NONE): _int_to_string,
    (ValueType.INT64, ValueType.BOOL, _NONE): lambda value: value == 1,
    (ValueType.INT64, ValueType.FLOAT64, _NONE): float,
    (ValueType.BOOL, ValueType.STRING, _NONE): _bool_to_string,
    (ValueType.BOOL, ValueType.INT64, _NONE): lambda value: 1 if value else 0,
    (ValueType.BOOL, ValueType.FLOAT64, _NONE): lambda value: 1.0 if value else 0.0,
    (ValueType.FLOAT64, ValueType.STRING, _NONE): _float_to_string,
    (ValueType.FLOAT64, ValueType.INT64, _NONE): _float_to_int,
    (ValueType.FLOAT64, ValueType.BOOL, _NONE): lambda value: value == 1.0,
}
