"""Document model: field paths and the operations that evaluate them."""

from __future__ import annotations

from .merge import MergeOptions, merge_values
from .paved import (
    PathLike,
    as_path,
    expand_wildcards,
    get_bool,
    get_integer,
    get_string,
    get_value,
    merge_value,
    set_value,
)
from .segments import WILDCARD, Field, FieldPath, Index, Segment, Wildcard, parse

__all__ = [
    "WILDCARD",
    "Field",
    "FieldPath",
    "Index",
    "MergeOptions",
    "PathLike",
    "Segment",
    "Wildcard",
    "as_path",
    "expand_wildcards",
    "get_bool",
    "get_integer",
    "get_string",
    "get_value",
    "merge_value",
    "merge_values",
    "parse",
    "set_value",
]
