from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from envbind.binder import get_config_flag_set
from envbind.descriptors import tags
from envbind.errors import DuplicateFlagError, FlagParseError, HelpRequested
from envbind.flags import FlagOrigin, FlagSet


@dataclass
class ServeConfig:
    host: str = field(default="", metadata=tags(cli="host", desc="address to bind"))
    port: int = field(default=0, metadata=tags(cli="port"))
    verbose: bool = field(default=False, metadata=tags(cli="verbose"))
    ratio: float = 0.0


@dataclass
class OwnHelp:
    h: str = field(default="", metadata=tags(cli="h"))


@dataclass
class Clashing:
    first: str = field(default="", metadata=tags(cli="name"))
    second: str = field(default="", metadata=tags(cli="name"))


def _resolve(args: list[str], environ: dict[str, str] | None = None) -> tuple[ServeConfig, FlagSet]:
    schema = ServeConfig()
    flags = get_config_flag_set(args, schema, environ=environ or {}, name="serve")
    return schema, flags


def test_flags_are_registered_in_field_order() -> None:
    _, flags = _resolve([])
    assert [flag.name for flag in flags] == ["host", "port", "verbose", "RATIO"]
    assert len(flags) == 4
    assert "port" in flags
    assert flags.parsed


@pytest.mark.parametrize(
    "args",
    (
        ["-port", "80"],
        ["-port=80"],
        ["--port", "80"],
        ["--port=80"],
    ),
)
def test_value_syntaxes(args: list[str]) -> None:
    schema, _ = _resolve(args)
    assert schema.port == 80


def test_negative_values_are_accepted() -> None:
    schema, _ = _resolve(["-port", "-5", "-RATIO", "-0.5"])
    assert schema.port == -5
    assert schema.ratio == -0.5


def test_bool_flags_take_optional_values() -> None:
    schema, _ = _resolve(["-verbose"])
    assert schema.verbose is True
    schema, _ = _resolve(["-verbose=false"], {"VERBOSE": "true"})
    assert schema.verbose is False


def test_bool_flag_does_not_consume_next_argument() -> None:
    schema, flags = _resolve(["-verbose", "run", "-port", "1"])
    assert schema.verbose is True
    assert schema.port == 0
    assert flags.args == ["run", "-port", "1"]


def test_double_dash_ends_flag_parsing() -> None:
    schema, flags = _resolve(["-port", "1", "--", "-host", "x"])
    assert schema.port == 1
    assert schema.host == ""
    assert flags.args == ["-host", "x"]


def test_unknown_flag_is_an_error() -> None:
    with pytest.raises(FlagParseError, match="unrecognized"):
        _resolve(["-nope", "1"])


def test_missing_value_is_an_error() -> None:
    with pytest.raises(FlagParseError):
        _resolve(["-port"])


@pytest.mark.parametrize(
    "args",
    (
        ["-por", "1"],
        ["--por=1"],
        ["-verb"],
        ["-hos", "x"],
        ["-he"],
    ),
)
def test_abbreviations_are_not_expanded(args: list[str]) -> None:
    with pytest.raises(FlagParseError, match="unrecognized arguments: -"):
        _resolve(args)


def test_prefixes_after_positional_arguments_are_left_alone() -> None:
    schema, flags = _resolve(["run", "-po", "-hos"])
    assert schema.port == 0
    assert flags.args == ["run", "-po", "-hos"]


def test_help_carries_usage() -> None:
    with pytest.raises(HelpRequested) as excinfo:
        _resolve(["-h"])
    usage = excinfo.value.usage
    assert usage.startswith("Usage of serve:")
    assert "  -port int" in usage
    assert "    \taddress to bind" in usage
    assert "    \tflag: port or env: PORT" in usage


def test_user_defined_h_flag_is_not_help() -> None:
    schema = OwnHelp()
    get_config_flag_set(["-h", "value"], schema, environ={})
    assert schema.h == "value"


def test_duplicate_flag_names_are_rejected() -> None:
    with pytest.raises(DuplicateFlagError, match="name"):
        get_config_flag_set([], Clashing(), environ={})


def test_format_defaults_shows_non_zero_defaults() -> None:
    _, flags = _resolve([], {"HOST": "example.org", "PORT": "8080"})
    text = flags.format_defaults()
    assert '  -host string\n    \taddress to bind (default "example.org")' in text
    assert "(default 8080)" in text
    assert "  -verbose\n" in text
    assert "RATIO float64" in text


def test_format_defaults_hides_zero_values_of_every_kind() -> None:
    _, flags = _resolve([], {"RATIO": "0", "VERBOSE": "false"})
    text = flags.format_defaults()
    assert "(default" not in text
    _, flags = _resolve([], {"RATIO": "0.5", "VERBOSE": "true"})
    text = flags.format_defaults()
    assert "(default 0.5)" in text
    assert "(default true)" in text


def test_explain_reports_origin() -> None:
    _, flags = _resolve(["-port", "9"], {"HOST": "example.org"})
    host = flags.explain("host")
    assert "-host = 'example.org'" in host
    assert "source: env (HOST)" in host
    assert "source: cli" in flags.explain("port")
    assert flags.lookup("verbose").origin is FlagOrigin.ZERO
    with pytest.raises(FlagParseError):
        flags.explain("missing")
