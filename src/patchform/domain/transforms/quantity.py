"""Kubernetes resource quantity parsing (``500m``, ``1.5Gi``, ``2e3``)."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Final

from patchform.domain.errors import TransformError

QUANTITY_PATTERN: Final[str] = "^([+-]?[0-9.]+)([eEinumkKMGTP]*[-+]?[0-9]*)$"

ERR_QUANTITY_FORMAT: Final[str] = (
    f"quantities must match the regular expression '{QUANTITY_PATTERN}'"
)
ERR_QUANTITY_SUFFIX: Final[str] = "unable to parse quantity's suffix"

_QUANTITY_RE: Final[re.Pattern[str]] = re.compile(QUANTITY_PATTERN)
_EXPONENT_RE: Final[re.Pattern[str]] = re.compile(r"^[eE][-+]?[0-9]+$")
_NUMBER_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)$")

_BINARY_SUFFIXES: Final[dict[str, int]] = {
    "Ki": 2**10,
    "Mi": 2**20,
    "Gi": 2**30,
    "Ti": 2**40,
    "Pi": 2**50,
    "Ei": 2**60,
}

_DECIMAL_SUFFIXES: Final[dict[str, int]] = {
    "n": -9,
    "u": -6,
    "m": -3,
    "": 0,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
    "P": 15,
    "E": 18,
}


def parse_quantity(text: str) -> Decimal:
    """Parse ``text`` into an exact decimal amount."""

    match = _QUANTITY_RE.match(text)
    if match is None or _NUMBER_RE.match(match.group(1)) is None:
        raise TransformError(ERR_QUANTITY_FORMAT)
    number, suffix = match.groups()

    if suffix in _BINARY_SUFFIXES:
        multiplier = Decimal(_BINARY_SUFFIXES[suffix])
    elif suffix in _DECIMAL_SUFFIXES:
        multiplier = Decimal(10) ** _DECIMAL_SUFFIXES[suffix]
    elif _EXPONENT_RE.match(suffix):
        multiplier = Decimal(10) ** int(suffix[1:])
    else:
        raise TransformError(ERR_QUANTITY_SUFFIX)

    try:
        return Decimal(number) * multiplier
    except InvalidOperation as exc:
        raise TransformError(ERR_QUANTITY_FORMAT) from exc


def quantity_to_float(text: str) -> float:
    return float(parse_quantity(text))
