"""Field descriptors and the metadata keys that feed them."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from pydantic import Field, ValidationError
from pydantic_core import PydanticUndefined

from envbind.errors import ValueParseError
from envbind.types import FieldKind, TypeSpec

TAG_ENV = "envconfig"
TAG_CLI = "envcli"
TAG_JSON = "json"
TAG_DESC = "clidesc"
TAG_EMBEDDED = "embedded"


@dataclass(slots=True)
class FieldDescriptor:
    """One configurable field, bound to its owning record.

    ``alt_*`` hold the explicit overrides found in the field metadata (empty
    when absent); ``key`` is the upper-cased canonical name used when no
    override applies.
    """

    name: str
    spec: TypeSpec
    getter: Callable[[], Any]
    setter: Callable[[Any], None]
    alt_env: str = ""
    alt_cli: str = ""
    alt_json: str = ""
    desc_cli: str = ""
    key: str = ""
    path: str = ""
    embedded: bool = False

    @property
    def kind(self) -> FieldKind:
        return self.spec.kind

    def get(self) -> Any:
        return self.getter()

    def set(self, value: Any) -> None:
        self.setter(value)


def attribute_accessors(
    owner: Any, attribute: str, path: str
) -> tuple[Callable[[], Any], Callable[[Any], None]]:
    """Return get/set closures writing straight into ``owner.attribute``."""

    def getter() -> Any:
        return getattr(owner, attribute, None)

    def setter(value: Any) -> None:
        try:
            setattr(owner, attribute, value)
        except ValidationError as exc:
            raise ValueParseError(
                f"{path}: value {value!r} rejected by model validation: {exc}",
                field=path,
            ) from exc

    return getter, setter


def standalone_accessors(
    initial: Any = None,
) -> tuple[Callable[[], Any], Callable[[Any], None]]:
    """Return get/set closures over a private cell not owned by any record."""

    cell = [initial]

    def getter() -> Any:
        return cell[0]

    def setter(value: Any) -> None:
        cell[0] = value

    return getter, setter


def tags(
    *,
    env: str | None = None,
    cli: str | None = None,
    json: str | None = None,
    desc: str | None = None,
    embedded: bool = False,
) -> dict[str, Any]:
    """Build the metadata mapping understood by the schema walker.

    Use it as ``dataclasses.field(metadata=tags(...))`` or
    ``pydantic.Field(json_schema_extra=tags(...))``.
    """

    metadata: dict[str, Any] = {}
    for key, value in ((TAG_ENV, env), (TAG_CLI, cli), (TAG_JSON, json), (TAG_DESC, desc)):
        if value:
            metadata[key] = value
    if embedded:
        metadata[TAG_EMBEDDED] = True
    return metadata


def flag_field(
    default: Any = PydanticUndefined,
    *,
    env: str | None = None,
    cli: str | None = None,
    json: str | None = None,
    desc: str | None = None,
    embedded: bool = False,
    **kwargs: Any,
) -> Any:
    """``pydantic.Field`` carrying envbind naming overrides."""

    return Field(
        default,
        json_schema_extra=tags(env=env, cli=cli, json=json, desc=desc, embedded=embedded),
        **kwargs,
    )


__all__ = [
    "FieldDescriptor",
    "TAG_CLI",
    "TAG_DESC",
    "TAG_EMBEDDED",
    "TAG_ENV",
    "TAG_JSON",
    "attribute_accessors",
    "flag_field",
    "standalone_accessors",
    "tags",
]
