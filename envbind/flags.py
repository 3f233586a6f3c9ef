"""Named flag registry backed by :mod:`argparse`.

Flags use the single-dash grammar ``-name value`` / ``-name=value`` (``--name``
is accepted too). Parsing stops at the first argument that is not a flag; the
remainder is exposed as :attr:`FlagSet.args`.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Sequence

from envbind.descriptors import FieldDescriptor
from envbind.durations import format_duration
from envbind.env import EnvErrorPolicy
from envbind.errors import (
    DuplicateFlagError,
    EnvParseError,
    FlagParseError,
    HelpRequested,
    ValueParseError,
)
from envbind.parsing import convert_sequence, parse_value
from envbind.types import FieldKind

logger = logging.getLogger(__name__)

_HELP_NAMES = ("h", "help")


def format_default(value: Any) -> str:
    """Render a seed value the way it is shown in usage text."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (list, tuple)):
        return ",".join(format_default(item) for item in value)
    if value is None:
        return ""
    return str(value)


class FlagOrigin(str, Enum):
    """Where the current value of a flag came from."""

    ZERO = "zero"
    DECLARED = "declared"
    ENV = "env"
    ENV_INVALID = "env-invalid"
    CLI = "cli"


@dataclass
class Flag:
    """A registered flag bound to the storage of one field."""

    name: str
    usage: str
    field: FieldDescriptor
    default: str
    origin: FlagOrigin = FlagOrigin.ZERO
    env_key: str | None = None
    raw: str | None = None
    env_policy: EnvErrorPolicy = EnvErrorPolicy.ZERO
    fallback: str = ""

    @property
    def type_name(self) -> str:
        return self.field.spec.type_name

    @property
    def is_bool(self) -> bool:
        return self.field.kind is FieldKind.BOOL

    @property
    def value(self) -> Any:
        return self.field.get()

    def set_text(self, text: str) -> None:
        """Apply a textual value given on the command line."""

        if self.field.spec.deferred:
            self.raw = text
        else:
            parse_value(text, self.field)
        self.origin = FlagOrigin.CLI

    def populate(self) -> None:
        """Convert pending raw text of sequence/byte flags into the field."""

        if not self.field.spec.deferred:
            return
        self.field.set(convert_sequence(self.raw or "", self.field.spec))

    def recover_env(self, exc: ValueParseError) -> None:
        """Apply the env error policy to raw env text that failed to convert."""

        policy = EnvErrorPolicy(self.env_policy)
        if policy is EnvErrorPolicy.FAIL:
            raise EnvParseError(
                f"environment variable {self.env_key}={self.raw!r} is invalid: {exc}",
                text=self.raw,
                kind=exc.kind,
                field=self.env_key,
            ) from exc
        replacement = "" if policy is EnvErrorPolicy.ZERO else self.fallback
        logger.warning(
            "Ignoring malformed environment value %s=%r (%s); using %r",
            self.env_key,
            self.raw,
            exc,
            replacement,
        )
        self.raw = replacement
        self.origin = FlagOrigin.ENV_INVALID
        self.populate()

    def has_zero_default(self) -> bool:
        try:
            zero = self.field.spec.zero()
        except TypeError:
            return self.default == ""
        return self.default in ("", format_default(zero))

    def render_origin(self) -> str:
        if self.env_key and self.origin in (FlagOrigin.ENV, FlagOrigin.ENV_INVALID):
            return f"{self.origin.value} ({self.env_key})"
        return self.origin.value


class _FlagParser(argparse.ArgumentParser):
    """Argument parser that raises instead of exiting the process."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise FlagParseError(f"{self.prog}: {message}")

    def _get_option_tuples(self, option_string: str) -> list[Any]:
        # allow_abbrev does not cover single-dash prefixes on older interpreters.
        return []


class _FlagAction(argparse.Action):
    def __init__(self, option_strings: Sequence[str], dest: str, flag: Flag, **kwargs: Any) -> None:
        super().__init__(option_strings, dest, **kwargs)
        self.flag = flag

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        try:
            self.flag.set_text(values)
        except ValueParseError as exc:
            raise FlagParseError(
                f"invalid value {values!r} for flag -{self.flag.name}: {exc}"
            ) from exc


class _HelpAction(argparse.Action):
    def __init__(self, option_strings: Sequence[str], dest: str, flag_set: "FlagSet", **kwargs: Any) -> None:
        super().__init__(option_strings, dest, nargs=0, **kwargs)
        self.flag_set = flag_set

    def __call__(self, parser: Any, namespace: Any, values: Any, option_string: str | None = None) -> None:
        raise HelpRequested(self.flag_set.format_usage())


class FlagSet:
    """Ordered collection of flags plus the command-line parser that feeds them."""

    def __init__(self, name: str = "config") -> None:
        self.name = name
        self._flags: dict[str, Flag] = {}
        self.args: list[str] = []
        self.parsed = False

    def __iter__(self) -> Iterator[Flag]:
        return iter(self._flags.values())

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def lookup(self, name: str) -> Flag | None:
        return self._flags.get(name)

    def add(self, flag: Flag) -> Flag:
        if flag.name in self._flags:
            raise DuplicateFlagError(f"{self.name}: flag redefined: {flag.name}")
        self._flags[flag.name] = flag
        return flag

    def _normalise(self, args: Sequence[str]) -> list[str]:
        """Rewrite ``-name value`` pairs as ``-name=value``.

        Bool flags without an explicit value become ``-name=true``; scanning
        stops at the first non-flag argument or ``--``. Names must match a
        registered flag exactly.
        """

        result: list[str] = []
        index = 0
        while index < len(args):
            arg = args[index]
            if arg == "--" or arg == "-" or not arg.startswith("-"):
                result.extend(args[index:])
                break
            body = arg[2:] if arg.startswith("--") else arg[1:]
            name, has_value, _ = body.partition("=")
            flag = self._flags.get(name)
            if flag is None and name not in _HELP_NAMES:
                raise FlagParseError(f"{self.name}: unrecognized arguments: {arg}")
            if flag is None or has_value:
                result.append(arg)
            elif flag.is_bool:
                result.append(f"{arg}=true")
            elif index + 1 < len(args):
                index += 1
                result.append(f"{arg}={args[index]}")
            else:
                result.append(arg)
            index += 1
        return result

    def _build_parser(self) -> _FlagParser:
        parser = _FlagParser(prog=self.name, add_help=False, allow_abbrev=False)
        for position, flag in enumerate(self._flags.values()):
            parser.add_argument(
                f"-{flag.name}",
                f"--{flag.name}",
                dest=f"flag_{position}",
                action=_FlagAction,
                flag=flag,
                metavar=flag.type_name,
                default=argparse.SUPPRESS,
                help=flag.usage.replace("%", "%%"),
            )
        free = [name for name in _HELP_NAMES if name not in self._flags]
        if free:
            options = [f"-{name}" for name in free] + [f"--{name}" for name in free]
            parser.add_argument(*options, action=_HelpAction, flag_set=self, default=argparse.SUPPRESS)
        parser.add_argument("remainder", nargs=argparse.REMAINDER)
        return parser

    def parse(self, args: Sequence[str]) -> None:
        """Parse ``args`` (program name excluded) into the bound fields."""

        namespace = self._build_parser().parse_args(self._normalise(list(args)))
        remainder = list(getattr(namespace, "remainder", []) or [])
        if remainder[:1] == ["--"]:
            remainder = remainder[1:]
        self.args = remainder

        for flag in self._flags.values():
            try:
                flag.populate()
            except ValueParseError as exc:
                if exc.field is None:
                    exc.field = flag.field.path
                if flag.origin is FlagOrigin.CLI:
                    raise FlagParseError(
                        f"invalid value {flag.raw!r} for flag -{flag.name}: {exc}"
                    ) from exc
                if flag.origin is not FlagOrigin.ENV:
                    raise
                flag.recover_env(exc)
        self.parsed = True
        logger.debug("Parsed %d flag(s); %d positional argument(s)", len(self), len(self.args))

    def format_defaults(self) -> str:
        """Render every flag as ``-name type`` followed by its indented usage."""

        lines: list[str] = []
        for flag in self._flags.values():
            header = f"  -{flag.name}"
            if not flag.is_bool:
                header += f" {flag.type_name}"
            usage = flag.usage.replace("\n", "\n    \t")
            if not flag.has_zero_default():
                shown = flag.default
                if flag.field.kind is FieldKind.STRING:
                    shown = json.dumps(flag.default, ensure_ascii=False)
                usage += f" (default {shown})"
            lines.append(header)
            lines.append(f"    \t{usage}")
        return "\n".join(lines)

    def format_usage(self) -> str:
        return f"Usage of {self.name}:\n{self.format_defaults()}\n"

    def explain(self, name: str) -> str:
        flag = self._flags.get(name)
        if flag is None:
            raise FlagParseError(f"{self.name}: unknown flag: {name}")
        return (
            f"-{flag.name} = {flag.value!r}\n"
            f"field: {flag.field.path}\n"
            f"source: {flag.render_origin()}"
        )


command_line = FlagSet(Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "envbind")


__all__ = ["Flag", "FlagOrigin", "FlagSet", "command_line", "format_default"]
