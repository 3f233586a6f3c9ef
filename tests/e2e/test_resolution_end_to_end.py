"""End-to-end resolution of static and dynamic schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

import pytest
from pydantic import BaseModel

from envbind import (
    Float32,
    FlagParseError,
    Uint16,
    build_config,
    flag_field,
    get_config_flag_set,
    int_option,
    string_option,
    tags,
)
from envbind.flags import FlagSet


@dataclass
class SampleConfig:
    test_string: str = ""
    test_int: int = field(default=0, metadata=tags(cli="testint"))
    test_float: float = field(default=0.0, metadata=tags(cli="testfloat"))
    pass_: bool = field(default=False, metadata=tags(env="PASS"))


@dataclass
class Gauge:
    ratio: Float32 = 0.0


@dataclass
class Embedded:
    x: str = ""


@dataclass
class Group:
    x: str = ""


@dataclass
class Layout:
    shared: Embedded = field(default_factory=Embedded, metadata=tags(embedded=True))
    n: Group = field(default_factory=Group)


class Database(BaseModel):
    url: str = flag_field("", desc="database URL")
    pool_size: Uint16 = 0
    timeout: timedelta = timedelta(0)


class Service(BaseModel):
    name: str = flag_field("", cli="name")
    replicas: list[int] = []
    db: Optional[Database] = None


def test_flag_only_resolution() -> None:
    schema = SampleConfig()
    get_config_flag_set(["-testint", "1"], schema, environ={})
    assert schema == SampleConfig(test_string="", test_int=1, test_float=0.0, pass_=False)


def test_environment_and_flags_combine() -> None:
    schema = SampleConfig()
    get_config_flag_set(
        ["-testint", "5", "-TEST_STRING", "testit", "-testfloat", "3.14"],
        schema,
        environ={"PASS": "true"},
    )
    assert schema == SampleConfig(
        test_string="testit", test_int=5, test_float=3.14, pass_=True
    )


def test_malformed_environment_value_does_not_fail() -> None:
    schema = SampleConfig()
    flags = get_config_flag_set([], schema, environ={"TESTINT": "five"})
    assert schema.test_int == 0
    assert flags.lookup("testint").default == "0"


def test_malformed_flag_value_fails() -> None:
    schema = SampleConfig()
    with pytest.raises(FlagParseError):
        get_config_flag_set(["-testint", "five"], schema, environ={"TESTINT": "2"})
    assert schema.test_int == 2


@pytest.mark.parametrize(
    "args",
    (
        ["-testi", "3"],
        ["-TEST", "x"],
        ["-pass"],
    ),
)
def test_unknown_and_abbreviated_flags_fail(args: list[str]) -> None:
    schema = SampleConfig()
    with pytest.raises(FlagParseError):
        get_config_flag_set(args, schema, environ={})
    assert schema == SampleConfig()


def test_float32_overflow_fails_on_command_line() -> None:
    with pytest.raises(FlagParseError, match="out of range"):
        get_config_flag_set(["-RATIO", "1e39"], Gauge(), environ={})


def test_float32_overflow_in_environment_seeds_zero() -> None:
    schema = Gauge()
    flags = get_config_flag_set([], schema, environ={"RATIO": "1e39"})
    assert schema.ratio == 0.0
    assert flags.lookup("RATIO").default == "0.0"


def test_embedded_and_named_records_flatten() -> None:
    schema = Layout()
    flags = get_config_flag_set(["-X", "outer", "-N_X", "inner"], schema, environ={})
    assert [flag.name for flag in flags] == ["X", "N_X"]
    assert schema.shared.x == "outer"
    assert schema.n.x == "inner"


def test_nested_pydantic_service() -> None:
    service = Service()
    flags = get_config_flag_set(
        ["-name", "api", "-DB_TIMEOUT", "1.5s"],
        service,
        environ={"REPLICAS": "1,2", "DB_POOL_SIZE": "20", "DB_URL": "sqlite://"},
    )
    assert service.name == "api"
    assert service.replicas == [1, 2]
    assert service.db is not None
    assert service.db.url == "sqlite://"
    assert service.db.pool_size == 20
    assert service.db.timeout == timedelta(seconds=1.5)
    assert flags.lookup("DB_URL").usage == "database URL"
    assert flags.lookup("DB_POOL_SIZE").type_name == "uint16"


def test_dynamic_schema_round_trip() -> None:
    flags = FlagSet("eager")
    options = [int_option("workers", 4), string_option("mode", "fast")]
    config = build_config(options, flag_set=flags, environ={"WORKERS": "8"})
    assert flags.lookup("workers").default == "8"

    get_config_flag_set(["-mode", "slow"], config, environ={"WORKERS": "8"})
    assert config.as_dict() == {"workers": 8, "mode": "slow"}
