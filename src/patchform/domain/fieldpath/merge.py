"""Merge semantics for writing a value over an existing one."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from patchform.domain.values import deep_equal, is_empty

if TYPE_CHECKING:
    from patchform.domain.values import Value


@dataclass(frozen=True, slots=True)
class MergeOptions:
    """How a source value is folded into an existing destination value.

    ``keep_map_values`` lets existing non-empty values win over the source;
    ``append_slice`` concatenates arrays instead of replacing them.
    """

    keep_map_values: bool = False
    append_slice: bool = False


def merge_values(current: Value, incoming: Value, options: MergeOptions) -> Value:
    """Return ``incoming`` merged into ``current`` without mutating either."""

    if current is None or incoming is None:
        return incoming
    if options.append_slice and isinstance(current, list) and isinstance(incoming, list):
        # Only the top level is de-duplicated; nested arrays are appended as-is.
        incoming = [
            item for item in incoming if not any(deep_equal(item, seen) for seen in current)
        ]
    return _merge(current, incoming, options)


def _merge(current: Value, incoming: Value, options: MergeOptions) -> Value:
    if isinstance(current, dict) and isinstance(incoming, dict):
        merged = dict(current)
        for key, value in incoming.items():
            merged[key] = _merge(current[key], value, options) if key in current else value
        return merged
    if options.append_slice and isinstance(current, list) and isinstance(incoming, list):
        return [*current, *incoming]
    if not options.keep_map_values or is_empty(current):
        return incoming
    return current
