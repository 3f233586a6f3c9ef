"""Typed environment lookups with caller-supplied defaults."""
from __future__ import annotations

import logging
import os
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, TypeVar

from dotenv import dotenv_values

from envbind.durations import parse_duration
from envbind.errors import EnvParseError, ValueParseError
from envbind.parsing import convert, parse_bool, parse_float, parse_int, parse_uint
from envbind.types import FieldKind, TypeSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EnvErrorPolicy(str, Enum):
    """What a lookup returns when the variable is set but malformed."""

    ZERO = "zero"
    DEFAULT = "default"
    FAIL = "fail"


class EnvStatus(str, Enum):
    """Outcome of one environment lookup."""

    UNSET = "unset"
    OK = "ok"
    INVALID = "invalid"


def load_environ(
    environ: Mapping[str, str] | None = None,
    env_file: Path | str | None = None,
) -> dict[str, str]:
    """Return an immutable-by-convention snapshot of the environment.

    Values from ``env_file`` only fill in keys the process environment lacks.
    """

    snapshot: dict[str, str] = {}
    if env_file is not None:
        path = Path(env_file)
        if path.exists():
            snapshot.update(
                {
                    key: value
                    for key, value in dotenv_values(path, verbose=False).items()
                    if value is not None
                }
            )
        else:
            logger.debug("env file %s not found; skipping", path)
    snapshot.update(os.environ if environ is None else environ)
    return snapshot


def _zero_value(zero: Any, default: Any) -> Any:
    if not callable(zero):
        return zero
    try:
        return zero()
    except TypeError:
        # Custom types whose constructor needs arguments have no zero value.
        return default


def _resolve(
    key: str,
    default: T,
    parse: Callable[[str], T],
    zero: T | Callable[[], T],
    environ: Mapping[str, str] | None,
    on_error: EnvErrorPolicy | str,
) -> tuple[T, EnvStatus]:
    source = os.environ if environ is None else environ
    if key not in source:
        return default, EnvStatus.UNSET
    raw = source[key]
    try:
        return parse(raw), EnvStatus.OK
    except ValueParseError as exc:
        policy = EnvErrorPolicy(on_error)
        if policy is EnvErrorPolicy.FAIL:
            raise EnvParseError(
                f"environment variable {key}={raw!r} is invalid: {exc}",
                text=raw,
                kind=exc.kind,
                field=key,
            ) from exc
        if policy is EnvErrorPolicy.ZERO:
            fallback = _zero_value(zero, default)
        else:
            fallback = default
        logger.warning(
            "Ignoring malformed environment value %s=%r (%s); using %r",
            key,
            raw,
            exc,
            fallback,
        )
        return fallback, EnvStatus.INVALID


def _lookup(
    key: str,
    default: T,
    parse: Callable[[str], T],
    zero: T,
    environ: Mapping[str, str] | None,
    on_error: EnvErrorPolicy | str,
) -> T:
    return _resolve(key, default, parse, zero, environ, on_error)[0]


def lookup_env_or_string(
    key: str,
    default: str,
    *,
    environ: Mapping[str, str] | None = None,
) -> str:
    source = os.environ if environ is None else environ
    return source.get(key, default)


def lookup_env_or_bool(
    key: str,
    default: bool,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> bool:
    return _lookup(key, default, parse_bool, False, environ, on_error)


def lookup_env_or_int(
    key: str,
    default: int,
    bits: int = 64,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> int:
    """Read a signed base-10 integer of ``bits`` width."""

    return _lookup(
        key,
        default,
        lambda raw: parse_int(raw, bits, base=10),
        0,
        environ,
        on_error,
    )


def lookup_env_or_uint(
    key: str,
    default: int,
    bits: int = 64,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> int:
    """Read an unsigned base-10 integer of ``bits`` width."""

    return _lookup(
        key,
        default,
        lambda raw: parse_uint(raw, bits, base=10),
        0,
        environ,
        on_error,
    )


def lookup_env_or_int64(key: str, default: int, **kwargs: Any) -> int:
    return lookup_env_or_int(key, default, 64, **kwargs)


def lookup_env_or_uint8(key: str, default: int, **kwargs: Any) -> int:
    return lookup_env_or_uint(key, default, 8, **kwargs)


def lookup_env_or_uint16(key: str, default: int, **kwargs: Any) -> int:
    return lookup_env_or_uint(key, default, 16, **kwargs)


def lookup_env_or_uint32(key: str, default: int, **kwargs: Any) -> int:
    return lookup_env_or_uint(key, default, 32, **kwargs)


def lookup_env_or_uint64(key: str, default: int, **kwargs: Any) -> int:
    return lookup_env_or_uint(key, default, 64, **kwargs)


def lookup_env_or_float32(
    key: str,
    default: float,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> float:
    return _lookup(
        key, default, lambda raw: parse_float(raw, 32), 0.0, environ, on_error
    )


def lookup_env_or_float64(
    key: str,
    default: float,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> float:
    return _lookup(
        key, default, lambda raw: parse_float(raw, 64), 0.0, environ, on_error
    )


def lookup_env_or_duration(
    key: str,
    default: timedelta,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> timedelta:
    """Read a duration such as ``"5s"`` or ``"2h30m"``."""

    return _lookup(key, default, parse_duration, timedelta(0), environ, on_error)


def resolve_env(
    spec: TypeSpec,
    key: str,
    default: Any,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> tuple[Any, EnvStatus]:
    """Look ``key`` up as a value of ``spec`` and report how it was obtained.

    Sequence and byte fields read the raw text; their elements are converted
    only once command-line parsing has finished. Custom types go through their
    decode capability, decoding into ``default`` when one is given.
    """

    kind = spec.kind
    if kind is FieldKind.BOOL:
        parse: Callable[[str], Any] = parse_bool
    elif kind is FieldKind.INT:
        parse = lambda raw: parse_int(raw, spec.bits, base=10)  # noqa: E731
    elif kind is FieldKind.UINT:
        parse = lambda raw: parse_uint(raw, spec.bits, base=10)  # noqa: E731
    elif kind is FieldKind.FLOAT:
        parse = lambda raw: parse_float(raw, spec.bits)  # noqa: E731
    elif kind is FieldKind.DURATION:
        parse = parse_duration
    elif kind in (FieldKind.STRING, FieldKind.SEQUENCE, FieldKind.BYTES):
        parse = str
    elif kind is FieldKind.CUSTOM:
        parse = lambda raw: convert(raw, spec, default)  # noqa: E731
    else:
        raise ValueError(f"no environment lookup for {spec.type_name} fields")
    return _resolve(key, default, parse, spec.zero, environ, on_error)


def lookup_env_for(
    spec: TypeSpec,
    key: str,
    default: Any,
    *,
    environ: Mapping[str, str] | None = None,
    on_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
) -> Any:
    """Dispatch to the typed lookup matching ``spec``."""

    return resolve_env(spec, key, default, environ=environ, on_error=on_error)[0]


__all__ = [
    "EnvErrorPolicy",
    "EnvStatus",
    "load_environ",
    "lookup_env_for",
    "lookup_env_or_bool",
    "lookup_env_or_duration",
    "lookup_env_or_float32",
    "lookup_env_or_float64",
    "lookup_env_or_int",
    "lookup_env_or_int64",
    "lookup_env_or_string",
    "lookup_env_or_uint",
    "lookup_env_or_uint16",
    "lookup_env_or_uint32",
    "lookup_env_or_uint64",
    "lookup_env_or_uint8",
    "resolve_env",
]
