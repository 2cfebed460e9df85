"""Arithmetic transforms over numeric values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from patchform.domain.errors import TransformError
from patchform.domain.values import describe_type, is_number
from patchform.schema import MathTransformType

if TYPE_CHECKING:
    from patchform.domain.values import Value
    from patchform.schema import MathTransform


def resolve_math(transform: MathTransform, value: Value) -> Value:
    """Multiply or clamp ``value``; integers stay integers, floats stay floats."""

    if not is_number(value):
        raise TransformError(
            f"input is required to be a number for math transformer, got {describe_type(value)}"
        )
    assert isinstance(value, int | float)

    match transform.type:
        case MathTransformType.MULTIPLY:
            if transform.multiply is None:
                raise TransformError(
                    "must specify a value if a multiply math transform is specified"
                )
            return value * transform.multiply
        case MathTransformType.CLAMP_MIN:
            if transform.clamp_min is None:
                raise TransformError(
                    "must specify a value if a clamp min math transform is specified"
                )
            if value < transform.clamp_min:
                return _same_width(value, transform.clamp_min)
            return value
        case MathTransformType.CLAMP_MAX:
            if transform.clamp_max is None:
                raise TransformError(
                    "must specify a value if a clamp max math transform is specified"
                )
            if value > transform.clamp_max:
                return _same_width(value, transform.clamp_max)
            return value
    raise TransformError(f"type {transform.type} is not supported for math transform type")


def _same_width(value: int | float, bound: int) -> int | float:
    return float(bound) if isinstance(value, float) else bound
