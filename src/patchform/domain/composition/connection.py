"""Derive composite connection details from a composed resource."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from patchform.domain.errors import (
    ConnectionDetailError,
    FieldPathError,
    ValidationFieldError,
)
from patchform.domain.fieldpath import get_value
from patchform.domain.values import marshal_json
from patchform.schema import ConnectionDetailType

from .validate import validate_connection_detail

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from patchform.domain.values import Document
    from patchform.schema import ConnectionDetail

log = logging.getLogger(__name__)


def extract_connection_details(
    document: Document,
    observed_details: Mapping[str, bytes],
    rules: Sequence[ConnectionDetail],
) -> dict[str, bytes]:
    """Build connection details from ``rules``.

    Keys absent from ``observed_details`` and field paths that cannot be
    read are skipped; only an invalid rule is an error.
    """

    details: dict[str, bytes] = {}
    for rule in rules:
        try:
            validate_connection_detail(rule)
        except ValidationFieldError as exc:
            raise ConnectionDetailError(f"invalid: {exc}") from exc

        match ConnectionDetailType(rule.type):
            case ConnectionDetailType.FROM_VALUE:
                details[rule.name] = (rule.value or "").encode()
            case ConnectionDetailType.FROM_CONNECTION_SECRET_KEY:
                key = rule.from_connection_secret_key or ""
                if key in observed_details:
                    details[rule.name] = observed_details[key]
            case ConnectionDetailType.FROM_FIELD_PATH:
                try:
                    details[rule.name] = _field_path_value(document, rule.from_field_path or "")
                except (FieldPathError, ValueError, TypeError) as exc:
                    log.debug("Skipping connection detail %s: %s", rule.name, exc)
    return details


def _field_path_value(document: Document, path: str) -> bytes:
    value = get_value(document, path)
    if isinstance(value, str):
        return value.encode()
    return marshal_json(value).encode()
