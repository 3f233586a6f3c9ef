from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from envbind.descriptors import flag_field, tags
from envbind.errors import CyclicSchemaError, InvalidSchemaError
from envbind.types import FieldKind
from envbind.walker import MAX_DEPTH, walk_schema


@dataclass
class Inner:
    x: str = ""
    y: int = 0


@dataclass
class Outer:
    first: str = ""
    base: Inner = field(default_factory=Inner, metadata=tags(embedded=True))
    nested: Inner = field(default_factory=Inner)
    named: Inner = field(default_factory=Inner, metadata=tags(env="grp"))
    last: bool = False


@dataclass
class WithPrivate:
    visible: str = ""
    _hidden: str = ""


@dataclass(frozen=True)
class Frozen:
    value: str = ""


@dataclass
class Node:
    label: str = ""
    child: Optional["Node"] = None


@dataclass
class OptionalChild:
    inner: Optional[Inner] = None


class ServerModel(BaseModel):
    host: str = flag_field("localhost", env="server_host", desc="bind address")
    port: int = Field(0, alias="listenPort")
    token: str = Field("", frozen=True)


class AppModel(BaseModel):
    name: str = ""
    server: ServerModel = ServerModel()
    maybe: Optional[ServerModel] = None


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str = ""


@pytest.mark.parametrize("schema", [Outer, None, {"a": 1}, "text", 3])
def test_non_record_schema_is_rejected(schema: object) -> None:
    with pytest.raises(InvalidSchemaError):
        walk_schema(schema)


def test_walk_preserves_declaration_order_and_flattens() -> None:
    descriptors = walk_schema(Outer())
    assert [d.path for d in descriptors] == [
        "first",
        "base.x",
        "base.y",
        "nested.x",
        "nested.y",
        "named.x",
        "named.y",
        "last",
    ]


def test_embedded_records_keep_keys_and_named_records_are_prefixed() -> None:
    keys = {d.path: d.key for d in walk_schema(Outer())}
    assert keys["base.x"] == "X"
    assert keys["nested.x"] == "NESTED_X"
    assert keys["named.y"] == "GRP_Y"
    assert keys["first"] == "FIRST"


def test_private_and_frozen_fields_are_skipped() -> None:
    assert [d.name for d in walk_schema(WithPrivate())] == ["visible"]
    assert walk_schema(Frozen()) == []
    assert walk_schema(FrozenModel()) == []


def test_missing_nested_record_is_allocated() -> None:
    schema = OptionalChild()
    descriptors = walk_schema(schema)
    assert isinstance(schema.inner, Inner)
    assert [d.key for d in descriptors] == ["INNER_X", "INNER_Y"]


def test_cyclic_schema_fails_fast() -> None:
    with pytest.raises(CyclicSchemaError, match="Node -> Node"):
        walk_schema(Node())


def test_depth_limit_is_generous() -> None:
    assert MAX_DEPTH >= 8


def test_pydantic_metadata_becomes_overrides() -> None:
    app = AppModel()
    descriptors = {d.path: d for d in walk_schema(app)}
    host = descriptors["server.host"]
    assert host.alt_env == "SERVER_HOST"
    assert host.desc_cli == "bind address"
    assert host.key == "SERVER_SERVER_HOST"
    assert descriptors["server.port"].alt_json == "listenPort"
    assert "server.token" not in descriptors
    assert "maybe.host" in descriptors
    assert isinstance(app.maybe, ServerModel)


def test_descriptors_write_into_the_record() -> None:
    app = AppModel()
    descriptors = {d.path: d for d in walk_schema(app)}
    descriptors["server.port"].set(8080)
    descriptors["name"].set("demo")
    assert app.server.port == 8080
    assert app.name == "demo"
    assert descriptors["server.port"].get() == 8080


def test_field_kinds_are_resolved() -> None:
    kinds = {d.name: d.kind for d in walk_schema(Inner())}
    assert kinds == {"x": FieldKind.STRING, "y": FieldKind.INT}
