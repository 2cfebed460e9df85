"""Transform dispatch and ordered pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from patchform.domain.errors import TransformError
from patchform.schema import TransformType

from .arithmetic import resolve_math
from .convert import resolve_convert
from .mapping import resolve_map
from .match import resolve_match
from .strings import resolve_string

if TYPE_CHECKING:
    from collections.abc import Sequence

    from patchform.domain.values import Value
    from patchform.schema import Transform


def resolve(transform: Transform, value: Value) -> Value:
    """Apply a single transform to ``value``."""

    kind = transform.type
    match kind:
        case TransformType.MATH:
            if transform.math is None:
                raise TransformError(f"given transform type {kind} requires configuration")
            return resolve_math(transform.math, value)
        case TransformType.MAP:
            if transform.map is None:
                raise TransformError(f"given transform type {kind} requires configuration")
            return resolve_map(transform.map, value)
        case TransformType.MATCH:
            if transform.match is None:
                raise TransformError(f"given transform type {kind} requires configuration")
            return resolve_match(transform.match, value)
        case TransformType.STRING:
            if transform.string is None:
                raise TransformError(f"given transform type {kind} requires configuration")
            return resolve_string(transform.string, value)
        case TransformType.CONVERT:
            if transform.convert is None:
                raise TransformError(f"given transform type {kind} requires configuration")
            return resolve_convert(transform.convert, value)
    raise TransformError(f"transform type {kind} is not supported")


def resolve_transforms(transforms: Sequence[Transform], value: Value) -> Value:
    """Run ``transforms`` in declared order, feeding each output into the next."""

    for index, transform in enumerate(transforms):
        try:
            value = resolve(transform, value)
        except TransformError as exc:
            raise TransformError(f"transform at index {index} returned error: {exc}") from exc
    return value
