"""Combine several source values into one."""

from __future__ import annotations

from typing import TYPE_CHECKING

from patchform.domain.errors import CombineError
from patchform.domain.transforms import sprintf
from patchform.schema import CombineStrategy

if TYPE_CHECKING:
    from collections.abc import Sequence

    from patchform.domain.values import Value
    from patchform.schema import Combine


def combine(config: Combine, values: Sequence[Value]) -> Value:
    """Merge ``values`` according to the configured strategy."""

    if not values:
        raise CombineError("combine patch types require at least one variable")
    match config.strategy:
        case CombineStrategy.STRING:
            if config.string is None:
                raise CombineError(
                    f"given combine strategy {config.strategy} requires configuration"
                )
            return sprintf(config.string.fmt, *values)
    raise CombineError(f"combine strategy {config.strategy} is not supported")
