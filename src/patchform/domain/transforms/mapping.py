"""Lookup-table transform."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from patchform.domain.errors import TransformError
from patchform.domain.values import describe_type

if TYPE_CHECKING:
    from collections.abc import Mapping

    from patchform.domain.values import Value


def resolve_map(pairs: Mapping[str, Value], value: Value) -> Value:
    if not isinstance(value, str):
        raise TransformError(f"type {describe_type(value)} is not supported for map transform")
    if value not in pairs:
        raise TransformError(f"key {value} is not found in map")
    return copy.deepcopy(pairs[value])
