"""Value transforms applied between reading and writing a patch."""

from __future__ import annotations

from .arithmetic import resolve_math
from .convert import conversion_for, resolve_convert
from .gofmt import format_value, sprintf
from .mapping import resolve_map
from .match import resolve_match
from .quantity import parse_quantity, quantity_to_float
from .resolve import resolve, resolve_transforms
from .strings import convert_string, resolve_string

__all__ = [
    "conversion_for",
    "convert_string",
    "format_value",
    "parse_quantity",
    "quantity_to_float",
    "resolve",
    "resolve_convert",
    "resolve_map",
    "resolve_match",
    "resolve_math",
    "resolve_string",
    "resolve_transforms",
    "sprintf",
]
