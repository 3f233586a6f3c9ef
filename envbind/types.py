"""Semantic field types and the capabilities custom types may implement."""
from __future__ import annotations

import types
import typing
from dataclasses import dataclass, is_dataclass
from datetime import timedelta
from enum import Enum
from typing import Annotated, Any, Iterable, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class FieldKind(str, Enum):
    """Enumeration of the semantic types a field can be bound as."""

    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"
    DURATION = "duration"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    CUSTOM = "custom"
    RECORD = "record"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class BitSize:
    """Annotation marker fixing the width of an integer or float field."""

    bits: int
    signed: bool = True


Int8 = Annotated[int, Field(ge=-(2**7), le=2**7 - 1), BitSize(8)]
Int16 = Annotated[int, Field(ge=-(2**15), le=2**15 - 1), BitSize(16)]
Int32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1), BitSize(32)]
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1), BitSize(64)]
Uint8 = Annotated[int, Field(ge=0, le=2**8 - 1), BitSize(8, signed=False)]
Uint16 = Annotated[int, Field(ge=0, le=2**16 - 1), BitSize(16, signed=False)]
Uint32 = Annotated[int, Field(ge=0, le=2**32 - 1), BitSize(32, signed=False)]
Uint64 = Annotated[int, Field(ge=0, le=2**64 - 1), BitSize(64, signed=False)]
Float32 = Annotated[float, BitSize(32)]
Float64 = Annotated[float, BitSize(64)]


@runtime_checkable
class Decoder(Protocol):
    """Type that decodes itself from a textual value."""

    def decode(self, value: str) -> None: ...


@runtime_checkable
class Setter(Protocol):
    """Type that can be set from a textual value."""

    def set(self, value: str) -> None: ...


@runtime_checkable
class TextUnmarshaler(Protocol):
    """Type that loads itself from UTF-8 encoded text."""

    def unmarshal_text(self, data: bytes) -> None: ...


@runtime_checkable
class BinaryUnmarshaler(Protocol):
    """Type that loads itself from raw bytes."""

    def unmarshal_binary(self, data: bytes) -> None: ...


CAPABILITIES: tuple[tuple[str, type], ...] = (
    ("decode", Decoder),
    ("set", Setter),
    ("unmarshal_text", TextUnmarshaler),
    ("unmarshal_binary", BinaryUnmarshaler),
)


def find_capability(target: Any) -> str | None:
    """Return the first capability method ``target`` (instance or class) exposes."""

    for method_name, _protocol in CAPABILITIES:
        if callable(getattr(target, method_name, None)):
            return method_name
    return None


@dataclass(frozen=True, slots=True)
class TypeSpec:
    """Resolved semantic type of one field."""

    kind: FieldKind
    python_type: Any = None
    bits: int = 64
    element: Optional["TypeSpec"] = None

    @property
    def deferred(self) -> bool:
        """Whether the field is populated from raw text after argument parsing."""

        return self.kind in (FieldKind.SEQUENCE, FieldKind.BYTES)

    @property
    def type_name(self) -> str:
        """Short type label used in usage text."""

        if self.kind is FieldKind.INT:
            return "int" if self.bits == 64 else f"int{self.bits}"
        if self.kind is FieldKind.UINT:
            return "uint" if self.bits == 64 else f"uint{self.bits}"
        if self.kind is FieldKind.FLOAT:
            return f"float{self.bits}"
        if self.kind is FieldKind.SEQUENCE and self.element is not None:
            return f"[]{self.element.type_name}"
        if self.kind is FieldKind.CUSTOM:
            return "value"
        return self.kind.value

    def zero(self) -> Any:
        """Return the zero value of this type."""

        if self.kind is FieldKind.BOOL:
            return False
        if self.kind in (FieldKind.INT, FieldKind.UINT):
            return 0
        if self.kind is FieldKind.FLOAT:
            return 0.0
        if self.kind is FieldKind.STRING:
            return ""
        if self.kind is FieldKind.DURATION:
            return timedelta(0)
        if self.kind is FieldKind.BYTES:
            return b"" if self.python_type is not bytearray else bytearray()
        if self.kind is FieldKind.SEQUENCE:
            return [] if self.python_type is not tuple else ()
        if self.kind is FieldKind.CUSTOM:
            return self.python_type()
        return None


UNSUPPORTED = TypeSpec(FieldKind.UNSUPPORTED)


def _strip_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def split_annotation(annotation: Any) -> tuple[Any, list[Any]]:
    """Unwrap ``Optional`` and ``Annotated`` layers, collecting the metadata."""

    metadata: list[Any] = []
    while True:
        unwrapped = _strip_optional(annotation)
        if typing.get_origin(unwrapped) is Annotated:
            base, *extras = typing.get_args(unwrapped)
            metadata.extend(extras)
            annotation = base
            continue
        return unwrapped, metadata


def _bit_size(metadata: Iterable[Any]) -> BitSize | None:
    for item in metadata:
        if isinstance(item, BitSize):
            return item
    return None


def is_record_type(candidate: Any) -> bool:
    """Return ``True`` for pydantic model and dataclass types."""

    if not isinstance(candidate, type):
        return False
    return issubclass(candidate, BaseModel) or is_dataclass(candidate)


def resolve_type_spec(annotation: Any, metadata: Iterable[Any] = ()) -> TypeSpec:
    """Map a field annotation (plus any extra metadata) onto a :class:`TypeSpec`."""

    base, extras = split_annotation(annotation)
    size = _bit_size([*metadata, *extras])

    if base is bool:
        return TypeSpec(FieldKind.BOOL, bool)
    if base is int:
        if size is not None and not size.signed:
            return TypeSpec(FieldKind.UINT, int, size.bits)
        return TypeSpec(FieldKind.INT, int, size.bits if size else 64)
    if base is float:
        return TypeSpec(FieldKind.FLOAT, float, size.bits if size else 64)
    if base is str:
        return TypeSpec(FieldKind.STRING, str)
    if base is timedelta:
        return TypeSpec(FieldKind.DURATION, timedelta)
    if base in (bytes, bytearray):
        return TypeSpec(FieldKind.BYTES, base, 8)
    if isinstance(base, type) and find_capability(base) is not None:
        return TypeSpec(FieldKind.CUSTOM, base)
    if is_record_type(base):
        return TypeSpec(FieldKind.RECORD, base)

    origin = typing.get_origin(base)
    if origin in (list, tuple):
        args = typing.get_args(base)
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return UNSUPPORTED
        if not args:
            return UNSUPPORTED
        element = resolve_type_spec(args[0])
        if element.kind in (
            FieldKind.SEQUENCE,
            FieldKind.BYTES,
            FieldKind.RECORD,
            FieldKind.UNSUPPORTED,
        ):
            return UNSUPPORTED
        return TypeSpec(FieldKind.SEQUENCE, origin, element=element)

    return UNSUPPORTED


__all__ = [
    "BinaryUnmarshaler",
    "BitSize",
    "CAPABILITIES",
    "Decoder",
    "FieldKind",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "Setter",
    "TextUnmarshaler",
    "TypeSpec",
    "Uint16",
    "Uint32",
    "Uint64",
    "Uint8",
    "find_capability",
    "is_record_type",
    "resolve_type_spec",
    "split_annotation",
]
