"""Configuration schemas assembled at runtime from a list of options."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from envbind.descriptors import FieldDescriptor, standalone_accessors, tags
from envbind.env import EnvStatus, load_environ, resolve_env
from envbind.errors import InvalidOptionError, TypeMismatchError, UnknownFieldError
from envbind.flags import Flag, FlagOrigin, FlagSet, command_line, format_default
from envbind.naming import to_display_style, to_env_style, to_flag_style
from envbind.types import FieldKind, TypeSpec
from envbind.walker import RecordField

logger = logging.getLogger(__name__)

_SPECS: dict[type, TypeSpec] = {
    bool: TypeSpec(FieldKind.BOOL, bool),
    int: TypeSpec(FieldKind.INT, int, 64),
    float: TypeSpec(FieldKind.FLOAT, float, 64),
    str: TypeSpec(FieldKind.STRING, str),
}


@dataclass(frozen=True, slots=True)
class Option:
    """Specification of one dynamically declared field."""

    name: str
    default: Any
    env_name: str
    cli_name: str
    json_name: str
    usage: str
    use_cli: bool = True

    @property
    def spec(self) -> TypeSpec:
        return _SPECS[type(self.default)]

    def metadata(self) -> dict[str, Any]:
        if self.use_cli:
            return tags(env=self.env_name, cli=self.cli_name, json=self.json_name, desc=self.usage)
        return tags(env=self.env_name, json=self.json_name)


def option(
    name: str,
    default: Any,
    *,
    env_name: str | None = None,
    cli_name: str | None = None,
    json_name: str | None = None,
    usage: str | None = None,
    use_cli: bool = True,
) -> Option:
    """Declare a field; the type of ``default`` (bool, int, float or str) fixes its type."""

    if not name or not name.strip():
        raise InvalidOptionError("option name must not be empty")
    if type(default) not in _SPECS:
        raise InvalidOptionError(
            f"option {name!r}: default must be bool, int, float or str, "
            f"got {type(default).__name__}"
        )
    return Option(
        name=name,
        default=default,
        env_name=to_env_style(env_name or name),
        cli_name=to_flag_style(cli_name or name),
        json_name=to_display_style(json_name or name),
        usage=usage or name,
        use_cli=use_cli,
    )


def bool_option(name: str, default: bool = False, **overrides: Any) -> Option:
    return option(name, default, **overrides)


def int_option(name: str, default: int = 0, **overrides: Any) -> Option:
    return option(name, default, **overrides)


def float_option(name: str, default: float = 0.0, **overrides: Any) -> Option:
    return option(name, float(default), **overrides)


def string_option(name: str, default: str = "", **overrides: Any) -> Option:
    return option(name, default, **overrides)


def _check_type(name: str, spec: TypeSpec, value: Any) -> Any:
    kind = spec.kind
    if kind is FieldKind.BOOL and type(value) is bool:
        return value
    if kind is FieldKind.INT and isinstance(value, int) and not isinstance(value, bool):
        return value
    if kind is FieldKind.FLOAT and isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if kind is FieldKind.STRING and isinstance(value, str):
        return value
    raise TypeMismatchError(
        f"field {name!r} holds {spec.type_name} values, got {type(value).__name__}"
    )


class Configuration:
    """Handle over a runtime-built schema: one typed value slot per option.

    Slots start at their type's zero value. Pass the handle to
    :func:`envbind.get_config_flag_set` to resolve it like a static schema.
    """

    def __init__(self, options: Iterable[Option]) -> None:
        self._options: tuple[Option, ...] = tuple(options)
        self._values: dict[str, Any] = {}
        for item in self._options:
            if item.name in self._values:
                raise InvalidOptionError(f"duplicate option name {item.name!r}")
            self._values[item.name] = item.spec.zero()

    def __repr__(self) -> str:
        body = ", ".join(f"{name}={value!r}" for name, value in self._values.items())
        return f"Configuration({body})"

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    @property
    def fields(self) -> tuple[Option, ...]:
        return self._options

    def _option(self, name: str) -> Option:
        for item in self._options:
            if item.name == name:
                return item
        raise UnknownFieldError(f"configuration has no field named {name!r}")

    def _get(self, name: str, kind: FieldKind) -> Any:
        spec = self._option(name).spec
        if spec.kind is not kind:
            raise TypeMismatchError(
                f"field {name!r} holds {spec.type_name} values, not {kind.value}"
            )
        return self._values[name]

    def get_bool(self, name: str) -> bool:
        return self._get(name, FieldKind.BOOL)

    def get_string(self, name: str) -> str:
        return self._get(name, FieldKind.STRING)

    def get_int64(self, name: str) -> int:
        return self._get(name, FieldKind.INT)

    def get_float64(self, name: str) -> float:
        return self._get(name, FieldKind.FLOAT)

    def get_raw(self, name: str) -> Any:
        """Return the stored value without a type check."""

        self._option(name)
        return self._values[name]

    def set(self, name: str, value: Any) -> None:
        spec = self._option(name).spec
        self._values[name] = _check_type(name, spec, value)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def envbind_fields(self) -> Iterator[RecordField]:
        for item in self._options:
            name = item.name
            yield RecordField(
                name=name,
                spec=item.spec,
                metadata=item.metadata(),
                getter=lambda name=name: self._values[name],
                setter=lambda value, name=name: self.set(name, value),
            )


def build_config(
    options: Iterable[Option],
    *,
    flag_set: FlagSet | None = None,
    environ: Mapping[str, str] | None = None,
) -> Configuration:
    """Build a :class:`Configuration` and eagerly register a flag per CLI option.

    Each flag's default is the option's environment value, falling back to
    the option default. The flags live on ``flag_set`` (the process-wide
    :data:`envbind.flags.command_line` set when omitted) and are independent of
    the returned configuration, whose slots start at zero values.
    """

    options = tuple(options)
    target = command_line if flag_set is None else flag_set
    snapshot = load_environ(environ)
    for item in options:
        if not item.use_cli:
            continue
        getter, setter = standalone_accessors()
        field = FieldDescriptor(
            name=item.name,
            spec=item.spec,
            getter=getter,
            setter=setter,
            alt_env=item.env_name,
            alt_cli=item.cli_name,
            alt_json=item.json_name,
            desc_cli=item.usage,
            key=item.env_name,
            path=item.name,
        )
        seed, status = resolve_env(item.spec, item.env_name, item.default, environ=snapshot)
        setter(seed)
        origin = {
            EnvStatus.OK: FlagOrigin.ENV,
            EnvStatus.INVALID: FlagOrigin.ENV_INVALID,
        }.get(status, FlagOrigin.DECLARED)
        target.add(
            Flag(
                name=item.cli_name,
                usage=item.usage,
                field=field,
                default=format_default(seed),
                origin=origin,
                env_key=item.env_name,
            )
        )
        logger.debug("Registered flag -%s for option %s", item.cli_name, item.name)
    return Configuration(options)


__all__ = [
    "Configuration",
    "Option",
    "bool_option",
    "build_config",
    "float_option",
    "int_option",
    "option",
    "string_option",
]
