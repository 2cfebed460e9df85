from __future__ import annotations

from decimal import Decimal

import pytest

from patchform.domain.errors import TransformError
from patchform.domain.transforms import parse_quantity, quantity_to_float
from patchform.domain.transforms.quantity import ERR_QUANTITY_FORMAT, ERR_QUANTITY_SUFFIX


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1", Decimal(1)),
        ("500m", Decimal("0.5")),
        ("2k", Decimal(2000)),
        ("1Ki", Decimal(1024)),
        ("1.5Gi", Decimal(1610612736)),
        ("2e3", Decimal(2000)),
        ("-3M", Decimal(-3000000)),
    ],
)
def test_parse_quantity_applies_suffixes(text: str, expected: Decimal) -> None:
    assert parse_quantity(text) == expected


def test_quantity_to_float_returns_float() -> None:
    assert quantity_to_float("250m") == 0.25


def test_parse_quantity_rejects_malformed_numbers() -> None:
    with pytest.raises(TransformError) as exc:
        parse_quantity("abc")

    assert str(exc.value) == ERR_QUANTITY_FORMAT


def test_parse_quantity_rejects_unknown_suffix() -> None:
    with pytest.raises(TransformError) as exc:
        parse_quantity("5KM")

    assert str(exc.value) == ERR_QUANTITY_SUFFIX
