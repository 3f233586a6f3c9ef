"""Type-directed conversion of text into field values."""
from __future__ import annotations

import math
import re
import struct
from typing import TYPE_CHECKING, Any

from envbind.durations import parse_duration
from envbind.errors import ValueParseError
from envbind.types import FieldKind, TypeSpec, find_capability

if TYPE_CHECKING:  # pragma: no cover
    from envbind.descriptors import FieldDescriptor

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_PREFIXED_INT = re.compile(
    r"0(?:[xX](?P<hex>_?[0-9a-fA-F]+(?:_[0-9a-fA-F]+)*)"
    r"|[bB](?P<bin>_?[01]+(?:_[01]+)*)"
    r"|[oO](?P<oct>_?[0-7]+(?:_[0-7]+)*)"
    r"|(?P<legacy>_?[0-7]+(?:_[0-7]+)*))"
)
_DECIMAL_INT = re.compile(r"[0-9]+")
_UNDERSCORED_INT = re.compile(r"0|[1-9][0-9]*(?:_[0-9]+)*")
_DECIMAL_FLOAT = re.compile(
    r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_HEX_FLOAT = re.compile(
    r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)
_SPECIAL_FLOATS = {"inf": math.inf, "infinity": math.inf, "nan": math.nan}


def _fail(text: str, kind: str, reason: str = "invalid syntax") -> ValueParseError:
    return ValueParseError(
        f"cannot parse {text!r} as {kind}: {reason}", text=text, kind=kind
    )


def parse_bool(text: str) -> bool:
    """Accept ``1/t/T/TRUE/true/True`` and their false counterparts."""

    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise _fail(text, "bool")


def _parse_magnitude(digits: str, base: int, kind: str) -> int:
    """Parse an unsigned digit string; ``base=0`` honours 0x/0b/0o/0 prefixes."""

    if base == 10:
        if not _DECIMAL_INT.fullmatch(digits):
            raise _fail(digits, kind)
        return int(digits, 10)

    match = _PREFIXED_INT.fullmatch(digits)
    if match is None:
        if digits.startswith("0") and len(digits) > 1:
            raise _fail(digits, kind)
        if not _UNDERSCORED_INT.fullmatch(digits):
            raise _fail(digits, kind)
        return int(digits.replace("_", ""), 10)
    for group, radix in (("hex", 16), ("bin", 2), ("oct", 8), ("legacy", 8)):
        value = match.group(group)
        if value is not None:
            return int(value.replace("_", ""), radix)
    raise _fail(digits, kind)  # pragma: no cover - regex has no other branch


def parse_int(text: str, bits: int = 64, *, base: int = 0) -> int:
    """Parse a signed integer that must fit in ``bits`` bits."""

    kind = "int" if bits == 64 else f"int{bits}"
    if not text:
        raise _fail(text, kind)
    sign = 1
    digits = text
    if digits[0] in "+-":
        sign = -1 if digits[0] == "-" else 1
        digits = digits[1:]
    value = sign * _parse_magnitude(digits, base, kind)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise _fail(text, kind, "value out of range")
    return value


def parse_uint(text: str, bits: int = 64, *, base: int = 0) -> int:
    """Parse an unsigned integer that must fit in ``bits`` bits."""

    kind = "uint" if bits == 64 else f"uint{bits}"
    if not text or text[0] in "+-":
        raise _fail(text, kind)
    value = _parse_magnitude(text, base, kind)
    if value >= 1 << bits:
        raise _fail(text, kind, "value out of range")
    return value


def parse_float(text: str, bits: int = 64) -> float:
    """Parse a float, rounding to single precision when ``bits`` is 32."""

    kind = f"float{bits}"
    body = text[1:] if text[:1] in ("+", "-") else text
    negative = text[:1] == "-"
    lowered = body.lower()
    if lowered in _SPECIAL_FLOATS:
        value = _SPECIAL_FLOATS[lowered]
    elif _DECIMAL_FLOAT.fullmatch(body):
        value = float(body)
    elif _HEX_FLOAT.fullmatch(body):
        value = float.fromhex(body)
    else:
        raise _fail(text, kind)
    if negative:
        value = -value
    if math.isinf(value) and lowered not in _SPECIAL_FLOATS:
        raise _fail(text, kind, "value out of range")
    if bits == 32 and math.isfinite(value):
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as exc:
            raise _fail(text, kind, "value out of range") from exc
        if math.isinf(value):
            raise _fail(text, kind, "value out of range")
    return value


def _apply_capability(text: str, spec: TypeSpec, current: Any) -> tuple[bool, Any]:
    """Run the first decode capability exposed by a custom field type."""

    if spec.kind is not FieldKind.CUSTOM:
        return False, current

    target = current
    if target is None:
        try:
            target = spec.python_type()
        except TypeError as exc:
            raise ValueParseError(
                f"cannot allocate {spec.python_type.__name__} to decode {text!r}",
                text=text,
                kind=spec.kind.value,
            ) from exc

    method_name = find_capability(target)
    if method_name is None:
        return False, current

    payload: Any = text
    if method_name in ("unmarshal_text", "unmarshal_binary"):
        payload = text.encode("utf-8")
    try:
        getattr(target, method_name)(payload)
    except ValueParseError:
        raise
    except (ValueError, TypeError) as exc:
        raise ValueParseError(
            f"cannot parse {text!r} as {type(target).__name__}: {exc}",
            text=text,
            kind=spec.kind.value,
        ) from exc
    return True, target


def convert(text: str, spec: TypeSpec, current: Any = None) -> Any:
    """Convert ``text`` into a value of ``spec``.

    For custom types the first capability found wins, in the order decode,
    set, unmarshal_text, unmarshal_binary; other kinds use the built-in parsers.
    """

    handled, value = _apply_capability(text, spec, current)
    if handled:
        return value

    kind = spec.kind
    if kind is FieldKind.BOOL:
        return parse_bool(text)
    if kind is FieldKind.DURATION:
        return parse_duration(text)
    if kind is FieldKind.INT:
        return parse_int(text, spec.bits)
    if kind is FieldKind.UINT:
        return parse_uint(text, spec.bits)
    if kind is FieldKind.FLOAT:
        return parse_float(text, spec.bits)
    if kind is FieldKind.STRING:
        return text
    if kind is FieldKind.BYTES:
        data = text.encode("utf-8")
        return bytearray(data) if spec.python_type is bytearray else data
    if kind is FieldKind.SEQUENCE:
        return convert_sequence(text, spec)
    raise ValueParseError(
        f"cannot parse {text!r}: unsupported field type {spec.type_name}",
        text=text,
        kind=kind.value,
    )


def convert_sequence(text: str, spec: TypeSpec) -> Any:
    """Split ``text`` on commas and convert each element.

    Blank text yields an empty sequence; byte sequences take the raw bytes.
    """

    if spec.kind is FieldKind.BYTES:
        return convert(text, spec)
    if spec.element is None:
        raise ValueParseError(
            f"sequence type {spec.type_name} has no element type", text=text
        )

    items: list[Any] = []
    if text.strip():
        items = [convert(part, spec.element) for part in text.split(",")]
    return tuple(items) if spec.python_type is tuple else items


def parse_value(text: str, field: "FieldDescriptor") -> None:
    """Convert ``text`` for ``field`` and store the result in the field."""

    try:
        value = convert(text, field.spec, field.get())
    except ValueParseError as exc:
        if exc.field is None:
            exc.field = field.path
        raise
    field.set(value)


__all__ = [
    "convert",
    "convert_sequence",
    "parse_bool",
    "parse_float",
    "parse_int",
    "parse_uint",
    "parse_value",
]
