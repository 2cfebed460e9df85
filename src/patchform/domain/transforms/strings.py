"""String transforms: formatting, conversions, trimming, regexps, joins and replacement."""

from __future__ import annotations

import base64
import binascii
import hashlib
import re
import zlib
from typing import TYPE_CHECKING

from patchform.domain.errors import TransformError
from patchform.domain.values import describe_type, marshal_json
from patchform.schema import StringConversionType, StringTransformType

from .gofmt import format_value, quote, sprintf

if TYPE_CHECKING:
    from patchform.domain.values import Value
    from patchform.schema import StringTransform, StringTransformRegexp


def resolve_string(transform: StringTransform, value: Value) -> Value:
    kind = transform.type
    match kind:
        case StringTransformType.FORMAT:
            if transform.fmt is None:
                raise TransformError(f"string transform of type {kind} fmt is not set")
            return sprintf(transform.fmt, value)
        case StringTransformType.CONVERT:
            if transform.convert is None:
                raise TransformError(f"string transform of type {kind} convert is not set")
            return convert_string(transform.convert, value)
        case StringTransformType.TRIM_PREFIX | StringTransformType.TRIM_SUFFIX:
            if transform.trim is None:
                raise TransformError(f"string transform of type {kind} trim is not set")
            text = format_value(value)
            if kind is StringTransformType.TRIM_PREFIX:
                return text.removeprefix(transform.trim)
            return text.removesuffix(transform.trim)
        case StringTransformType.REGEXP:
            if transform.regexp is None:
                raise TransformError(f"string transform of type {kind} regexp is not set")
            return _extract(transform.regexp, value)
        case StringTransformType.JOIN:
            if transform.join is None:
                raise TransformError(f"string transform of type {kind} join is not set")
            if not isinstance(value, list):
                raise TransformError(f"cannot join input of type {describe_type(value)}")
            return transform.join.separator.join(format_value(item) for item in value)
        case StringTransformType.REPLACE:
            if transform.replace is None:
                raise TransformError(f"string transform of type {kind} replace is not set")
            return format_value(value).replace(transform.replace.search, transform.replace.replace)
    raise TransformError(f"type {kind} is not supported for string transform type")


def convert_string(conversion: str, value: Value) -> str:
    match conversion:
        case StringConversionType.TO_UPPER:
            return format_value(value).upper()
        case StringConversionType.TO_LOWER:
            return format_value(value).lower()
        case StringConversionType.TO_BASE64:
            return base64.b64encode(format_value(value).encode()).decode()
        case StringConversionType.FROM_BASE64:
            try:
                decoded = base64.b64decode(format_value(value), validate=True)
            except (binascii.Error, ValueError) as exc:
                raise TransformError("string is not valid base64") from exc
            return decoded.decode(errors="replace")
        case StringConversionType.TO_JSON:
            return _marshal(value)
        case StringConversionType.TO_SHA1:
            return hashlib.sha1(_hash_input(value)).hexdigest()  # noqa: S324
        case StringConversionType.TO_SHA256:
            return hashlib.sha256(_hash_input(value)).hexdigest()
        case StringConversionType.TO_SHA512:
            return hashlib.sha512(_hash_input(value)).hexdigest()
        case StringConversionType.TO_ADLER32:
            return str(zlib.adler32(_hash_input(value)))
    raise TransformError(f"type {conversion} is not supported for string convert")


def _hash_input(value: Value) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return _marshal(value).encode()


def _marshal(value: Value) -> str:
    try:
        return marshal_json(value)
    except (ValueError, TypeError) as exc:
        raise TransformError(f"cannot marshal input to JSON: {exc}") from exc


def _extract(config: StringTransformRegexp, value: Value) -> str:
    try:
        compiled = re.compile(config.match)
    except re.error as exc:
        raise TransformError(f"could not compile regexp: {exc}") from exc
    group = config.group or 0
    found = compiled.search(format_value(value))
    if found is None or group > compiled.groups:
        raise TransformError(f"regexp {quote(config.match)} had no matches for group {group}")
    return found.group(group) or ""
