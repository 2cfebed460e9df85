from __future__ import annotations

import math

import pytest

from patchform.domain.errors import TransformError
from patchform.domain.transforms import resolve_convert
from patchform.domain.values import Value
from patchform.schema import ConvertTransform


def _convert(to_type: str, fmt: str | None = None) -> ConvertTransform:
    return ConvertTransform.model_validate({"toType": to_type, "format": fmt})


@pytest.mark.parametrize(
    ("to_type", "fmt", "value", "expected"),
    [
        ("int64", None, "10", 10),
        ("int", None, "-7", -7),
        ("float64", None, "1.5", 1.5),
        ("bool", None, "true", True),
        ("bool", None, "0", False),
        ("string", None, 10, "10"),
        ("string", None, 2.0, "2"),
        ("string", None, 0.25, "0.25"),
        ("string", None, False, "false"),
        ("int64", None, 7.9, 7),
        ("float64", None, 3, 3.0),
        ("bool", None, 1, True),
        ("float64", "quantity", "250m", 0.25),
        ("float64", "quantity", "1Gi", 1073741824.0),
        ("object", "json", '{"a": 1}', {"a": 1}),
        ("array", "json", "[1, 2]", [1, 2]),
        ("string", "json", {"b": 1, "a": "x"}, '{"a":"x","b":1}'),
    ],
)
def test_resolve_convert_converts_between_types(
    to_type: str, fmt: str | None, value: Value, expected: Value
) -> None:
    result = resolve_convert(_convert(to_type, fmt), value)

    assert result == expected
    assert type(result) is type(expected)


def test_resolve_convert_returns_input_for_same_type() -> None:
    assert resolve_convert(_convert("string", "quantity"), "abc") == "abc"


def test_resolve_convert_rejects_unparseable_strings() -> None:
    with pytest.raises(TransformError) as exc:
        resolve_convert(_convert("int64"), "abc")

    assert str(exc.value) == "cannot parse 'abc' as int64: invalid syntax"


def test_resolve_convert_rejects_unknown_target_type() -> None:
    with pytest.raises(TransformError) as exc:
        resolve_convert(_convert("complex"), "abc")

    assert str(exc.value) == 'toType: Invalid value: "complex": invalid type'


def test_resolve_convert_rejects_unsupported_conversion() -> None:
    with pytest.raises(TransformError) as exc:
        resolve_convert(_convert("object"), True)

    assert str(exc.value) == "conversion from bool to object is not supported with format none"


def test_resolve_convert_rejects_null_input() -> None:
    with pytest.raises(TransformError) as exc:
        resolve_convert(_convert("string"), None)

    assert str(exc.value) == "invalid input type null"


def test_resolve_convert_requires_matching_json_shape() -> None:
    with pytest.raises(TransformError):
        resolve_convert(_convert("object", "json"), "[1, 2]")


def test_resolve_convert_parses_infinity_spellings() -> None:
    assert resolve_convert(_convert("float64"), "-Inf") == float("-inf")
    assert math.isnan(resolve_convert(_convert("float64"), "NaN"))


def test_resolve_convert_rejects_out_of_range_floats() -> None:
    with pytest.raises(TransformError) as exc:
        resolve_convert(_convert("float64"), "1e400")

    assert str(exc.value) == "cannot parse '1e400' as float64: value out of range"


def test_resolve_convert_rejects_non_finite_json_constants() -> None:
    with pytest.raises(TransformError) as exc:
        resolve_convert(_convert("array", "json"), "[NaN]")

    assert str(exc.value).startswith("cannot parse '[NaN]' as JSON:")


def test_resolve_convert_rejects_non_finite_values_for_json_output() -> None:
    with pytest.raises(TransformError) as exc:
        resolve_convert(_convert("string", "json"), [float("inf")])

    assert str(exc.value) == "json: unsupported value: +Inf"
