"""Walk a configuration record and flatten it into field descriptors."""
from __future__ import annotations

import dataclasses
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Protocol, runtime_checkable

from pydantic import BaseModel

from envbind.descriptors import (
    TAG_CLI,
    TAG_DESC,
    TAG_EMBEDDED,
    TAG_ENV,
    TAG_JSON,
    FieldDescriptor,
    attribute_accessors,
)
from envbind.errors import CyclicSchemaError, InvalidSchemaError
from envbind.naming import to_env_style
from envbind.types import FieldKind, TypeSpec, is_record_type, resolve_type_spec

logger = logging.getLogger(__name__)

MAX_DEPTH = 32


@dataclass(slots=True)
class RecordField:
    """A field as exposed by a record, before naming rules are applied."""

    name: str
    spec: TypeSpec
    metadata: Mapping[str, Any]
    getter: Callable[[], Any]
    setter: Callable[[Any], None]
    settable: bool = True


@runtime_checkable
class FieldSource(Protocol):
    """Records that enumerate their own fields (see ``envbind.dynamic``)."""

    def envbind_fields(self) -> Iterable[RecordField]: ...


def is_record(candidate: Any) -> bool:
    """Return ``True`` for record *instances* the walker can bind."""

    if isinstance(candidate, type):
        return False
    return isinstance(candidate, (BaseModel, FieldSource)) or dataclasses.is_dataclass(
        candidate
    )


def _model_fields(record: BaseModel, path: str) -> Iterable[RecordField]:
    model_type = type(record)
    frozen = bool(model_type.model_config.get("frozen", False))
    for name, info in model_type.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        metadata: dict[str, Any] = dict(extra)
        if TAG_JSON not in metadata and info.alias:
            metadata[TAG_JSON] = info.alias
        getter, setter = attribute_accessors(record, name, _join(path, name))
        yield RecordField(
            name=name,
            spec=resolve_type_spec(info.annotation, info.metadata),
            metadata=metadata,
            getter=getter,
            setter=setter,
            settable=not (frozen or info.frozen or name.startswith("_")),
        )


def _dataclass_fields(record: Any, path: str) -> Iterable[RecordField]:
    record_type = type(record)
    try:
        hints = typing.get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError):
        hints = {}
    frozen = record_type.__dataclass_params__.frozen
    for item in dataclasses.fields(record):
        getter, setter = attribute_accessors(record, item.name, _join(path, item.name))
        yield RecordField(
            name=item.name,
            spec=resolve_type_spec(hints.get(item.name, item.type)),
            metadata=item.metadata,
            getter=getter,
            setter=setter,
            settable=not (frozen or item.name.startswith("_")),
        )


def _record_fields(record: Any, path: str) -> Iterable[RecordField]:
    if isinstance(record, BaseModel):
        return _model_fields(record, path)
    if isinstance(record, FieldSource):
        return record.envbind_fields()
    return _dataclass_fields(record, path)


def _allocate(record_type: type) -> Any:
    if issubclass(record_type, BaseModel):
        return record_type.model_construct()
    try:
        return record_type()
    except TypeError as exc:
        raise InvalidSchemaError(
            f"cannot allocate nested record {record_type.__name__}: {exc}"
        ) from exc


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def walk_schema(schema: Any, prefix: str = "") -> list[FieldDescriptor]:
    """Return descriptors for every assignable field of ``schema``, in order.

    Nested records are flattened into the list. Fields of a record marked
    ``embedded`` keep their own keys; fields of any other nested record get the
    parent key as an ``PARENT_`` prefix.
    """

    if not is_record(schema):
        raise InvalidSchemaError(
            "schema must be a pydantic model, dataclass or dynamic configuration "
            f"instance, got {type(schema).__name__}"
        )
    return _walk(schema, prefix, "", ())


def _walk(
    record: Any, prefix: str, path: str, stack: tuple[type, ...]
) -> list[FieldDescriptor]:
    record_type = type(record)
    if record_type in stack:
        chain = " -> ".join(item.__name__ for item in (*stack, record_type))
        raise CyclicSchemaError(f"cyclic schema detected: {chain}")
    if len(stack) >= MAX_DEPTH:
        raise CyclicSchemaError(
            f"schema nesting deeper than {MAX_DEPTH} levels at {path or '<root>'}"
        )
    stack = (*stack, record_type)

    descriptors: list[FieldDescriptor] = []
    for field in _record_fields(record, path):
        if not field.settable:
            logger.debug("Skipping unassignable field %s", _join(path, field.name))
            continue

        spec = field.spec
        value = field.getter()
        if spec.kind is FieldKind.UNSUPPORTED and is_record(value):
            spec = TypeSpec(FieldKind.RECORD, type(value))
        if spec.kind is FieldKind.RECORD and value is None:
            value = _allocate(spec.python_type)
            field.setter(value)

        alt_env = str(field.metadata.get(TAG_ENV, "") or "").upper()
        key = to_env_style(alt_env or field.name)
        if prefix:
            key = f"{prefix}_{key}"

        descriptor = FieldDescriptor(
            name=field.name,
            spec=spec,
            getter=field.getter,
            setter=field.setter,
            alt_env=alt_env,
            alt_cli=str(field.metadata.get(TAG_CLI, "") or ""),
            alt_json=str(field.metadata.get(TAG_JSON, "") or ""),
            desc_cli=str(field.metadata.get(TAG_DESC, "") or ""),
            key=key,
            path=_join(path, field.name),
            embedded=bool(field.metadata.get(TAG_EMBEDDED, False)),
        )
        descriptors.append(descriptor)

        if spec.kind is FieldKind.RECORD:
            descriptors.pop()
            child_prefix = prefix if descriptor.embedded else key
            descriptors.extend(_walk(value, child_prefix, descriptor.path, stack))

    return descriptors


__all__ = [
    "FieldSource",
    "MAX_DEPTH",
    "RecordField",
    "is_record",
    "walk_schema",
]
