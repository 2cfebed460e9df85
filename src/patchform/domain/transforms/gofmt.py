"""printf-style formatting with the control plane's ``fmt`` semantics.

Format strings in compositions are written for Go's ``fmt.Sprintf``, so
they are rendered with its rules rather than Python's ``%`` operator:
``%v`` prints any value, a verb that does not fit its argument renders as
``%!d(string=foo)``, a missing argument as ``%!s(MISSING)`` and unused
arguments are reported with ``%!(EXTRA ...)``.
"""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING, Final

from patchform.domain.values import format_float_general, is_number

if TYPE_CHECKING:
    from patchform.domain.values import Value

_FLAG_CHARS: Final[str] = "-+# 0"
_MAX_RUNE: Final[int] = 0x10FFFF
_SURROGATE_MIN: Final[int] = 0xD800
_SURROGATE_MAX: Final[int] = 0xDFFF
_REPLACEMENT_CHAR: Final[str] = "\ufffd"


def format_value(value: Value) -> str:
    """Render ``value`` the way ``%v`` does."""

    match value:
        case None:
            return "<nil>"
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case float():
            return format_float_general(value)
        case str():
            return value
        case list():
            return "[" + " ".join(format_value(item) for item in value) + "]"
        case dict():
            members = (f"{key}:{format_value(value[key])}" for key in sorted(value))
            return "map[" + " ".join(members) + "]"
        case _:
            return str(value)


def go_type_name(value: Value) -> str:
    match value:
        case None:
            return "<nil>"
        case bool():
            return "bool"
        case int():
            return "int64"
        case float():
            return "float64"
        case str():
            return "string"
        case list():
            return "[]interface {}"
        case dict():
            return "map[string]interface {}"
        case _:
            return type(value).__name__


def quote(text: str) -> str:
    """Double-quote ``text`` with backslash escapes."""

    return json.dumps(text, ensure_ascii=False)


def sprintf(template: str, *args: Value) -> str:
    return _Formatter(template, args).render()


class _Formatter:
    def __init__(self, template: str, args: tuple[Value, ...]) -> None:
        self.template = template
        self.args = args
        self.position = 0
        self.arg_num = 0
        self.reordered = False
        self.bad_index = False

    def render(self) -> str:
        out: list[str] = []
        template = self.template
        length = len(template)
        while self.position < length:
            start = self.position
            next_verb = template.find("%", start)
            if next_verb == -1:
                out.append(template[start:])
                break
            out.append(template[start:next_verb])
            self.position = next_verb + 1
            if self.position >= length:
                out.append("%!(NOVERB)")
                break
            out.append(self._directive())

        if not self.reordered and self.arg_num < len(self.args):
            extras = ", ".join(
                "<nil>" if arg is None else f"{go_type_name(arg)}={format_value(arg)}"
                for arg in self.args[self.arg_num :]
            )
            out.append(f"%!(EXTRA {extras})")
        return "".join(out)

    def _directive(self) -> str:
        template = self.template
        flags = ""
        while self.position < len(template) and template[self.position] in _FLAG_CHARS:
            flags += template[self.position]
            self.position += 1

        self.bad_index = False
        self._argument_index()
        width = self._number()
        precision: int | None = None
        if self.position < len(template) and template[self.position] == ".":
            self.position += 1
            precision = self._number() or 0
        self._argument_index()

        if self.position >= len(template):
            return "%!(NOVERB)"
        verb = template[self.position]
        self.position += 1

        if verb == "%":
            return "%"
        if self.bad_index:
            return f"%!{verb}(BADINDEX)"
        if self.arg_num >= len(self.args):
            return f"%!{verb}(MISSING)"
        arg = self.args[self.arg_num]
        self.arg_num += 1
        return _format_arg(verb, arg, flags, width, precision)

    def _number(self) -> int | None:
        start = self.position
        while self.position < len(self.template) and self.template[self.position].isdigit():
            self.position += 1
        if start == self.position:
            return None
        return int(self.template[start : self.position])

    def _argument_index(self) -> None:
        template = self.template
        if self.position >= len(template) or template[self.position] != "[":
            return
        close = template.find("]", self.position)
        digits = template[self.position + 1 : close] if close != -1 else ""
        if close == -1 or not digits.isdigit() or not 1 <= int(digits) <= len(self.args):
            self.bad_index = True
            self.position = close + 1 if close != -1 else len(template)
            return
        self.arg_num = int(digits) - 1
        self.reordered = True
        self.position = close + 1


def _rune(number: int) -> str:
    """The character for code point ``number``; invalid code points render as U+FFFD."""

    if 0 <= number <= _MAX_RUNE and not _SURROGATE_MIN <= number <= _SURROGATE_MAX:
        return chr(number)
    return _REPLACEMENT_CHAR


def _bad_verb(verb: str, arg: Value) -> str:
    if arg is None:
        return f"%!{verb}(<nil>)"
    return f"%!{verb}({go_type_name(arg)}={format_value(arg)})"


def _pad(text: str, width: int | None, flags: str, *, numeric: bool = False) -> str:
    if width is None or len(text) >= width:
        return text
    if "-" in flags:
        return text.ljust(width)
    if "0" in flags and numeric:
        sign = text[0] if text[:1] in ("+", "-", " ") else ""
        return sign + text[len(sign) :].rjust(width - len(sign), "0")
    return text.rjust(width)


def _sign(negative: bool, flags: str) -> str:
    if negative:
        return "-"
    if "+" in flags:
        return "+"
    if " " in flags:
        return " "
    return ""


def _format_arg(verb: str, arg: Value, flags: str, width: int | None, precision: int | None) -> str:
    if verb == "T":
        return _pad(go_type_name(arg), width, flags)
    if verb == "v":
        if isinstance(arg, float):
            return _pad(_format_float("g", arg, flags, precision), width, flags, numeric=True)
        return _pad(format_value(arg), width, flags, numeric=is_number(arg))
    if isinstance(arg, list) and verb in "sdqxXfeEgGot":
        rendered = (_format_arg(verb, item, flags, None, precision) for item in arg)
        return _pad("[" + " ".join(rendered) + "]", width, flags)
    if isinstance(arg, dict) and verb in "sdqxXfeEgGot":
        members = (
            f"{_format_arg(verb, key, flags, None, precision)}:"
            f"{_format_arg(verb, arg[key], flags, None, precision)}"
            for key in sorted(arg)
        )
        return _pad("map[" + " ".join(members) + "]", width, flags)

    match verb:
        case "s":
            if not isinstance(arg, str):
                return _bad_verb(verb, arg)
            text = arg if precision is None else arg[:precision]
            return _pad(text, width, flags)
        case "q":
            if isinstance(arg, str):
                return _pad(quote(arg), width, flags)
            if isinstance(arg, int) and not isinstance(arg, bool):
                return _pad("'" + _rune(arg) + "'", width, flags)
            return _bad_verb(verb, arg)
        case "t":
            if not isinstance(arg, bool):
                return _bad_verb(verb, arg)
            return _pad("true" if arg else "false", width, flags)
        case "d" | "b" | "o" | "x" | "X" | "c":
            if isinstance(arg, str) and verb in "xX":
                encoded = arg.encode().hex()
                return _pad(encoded.upper() if verb == "X" else encoded, width, flags)
            if not isinstance(arg, int) or isinstance(arg, bool):
                return _bad_verb(verb, arg)
            return _pad(_format_int(verb, arg, flags), width, flags, numeric=verb != "c")
        case "f" | "F" | "e" | "E" | "g" | "G":
            if not isinstance(arg, float):
                return _bad_verb(verb, arg)
            return _pad(_format_float(verb, arg, flags, precision), width, flags, numeric=True)
        case _:
            return _bad_verb(verb, arg)


def _format_int(verb: str, number: int, flags: str) -> str:
    if verb == "c":
        return _rune(number)
    digits = format(abs(number), {"d": "d", "b": "b", "o": "o", "x": "x", "X": "X"}[verb])
    if "#" in flags:
        digits = {"b": "0b", "o": "0", "x": "0x", "X": "0X"}.get(verb, "") + digits
    return _sign(number < 0, flags) + digits


def _format_float(verb: str, number: float, flags: str, precision: int | None) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "-Inf" if number < 0 else "+Inf"
    sign = _sign(math.copysign(1.0, number) < 0, flags)
    magnitude = abs(number)
    match verb:
        case "f" | "F":
            body = f"{magnitude:.{6 if precision is None else precision}f}"
        case "e" | "E":
            body = f"{magnitude:.{6 if precision is None else precision}e}"
        case _:
            body = (
                format_float_general(magnitude)
                if precision is None
                else f"{magnitude:.{max(precision, 1)}g}"
            )
    if verb in "EG":
        body = body.upper()
    return sign + body
