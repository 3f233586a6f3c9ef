"""Bind schema fields to environment variables and command-line flags."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from envbind.descriptors import FieldDescriptor
from envbind.env import EnvErrorPolicy, EnvStatus, load_environ, resolve_env
from envbind.flags import Flag, FlagOrigin, FlagSet, format_default
from envbind.naming import to_env_style
from envbind.types import FieldKind
from envbind.walker import walk_schema

logger = logging.getLogger(__name__)


def effective_flag_name(field: FieldDescriptor) -> str:
    """Flag override, else display name, else env override, else the key."""

    if field.alt_cli:
        return field.alt_cli
    if field.alt_json:
        return field.alt_json
    if field.alt_env:
        return field.alt_env
    return field.key


def effective_env_name(field: FieldDescriptor) -> str:
    """Env override, else the upper-cased flag or display override, else the key."""

    if field.alt_env:
        return field.alt_env
    if field.alt_cli:
        return to_env_style(field.alt_cli)
    if field.alt_json:
        return to_env_style(field.alt_json)
    return to_env_style(field.key)


def effective_help(field: FieldDescriptor) -> str:
    if field.desc_cli:
        return field.desc_cli
    return f"flag: {effective_flag_name(field)} or env: {effective_env_name(field)}"


def _zero(field: FieldDescriptor) -> Any:
    try:
        return field.spec.zero()
    except TypeError:
        return None


def _seed_default(field: FieldDescriptor, use_declared_defaults: bool) -> Any:
    current = field.get() if use_declared_defaults else None
    if field.spec.deferred:
        return "" if current is None else format_default(current)
    if current is None:
        current = _zero(field)
    if current is None and field.kind is FieldKind.CUSTOM:
        # No zero instance can be built; decode into the declared one.
        current = field.get()
    return current


def bind_field(
    flag_set: FlagSet,
    field: FieldDescriptor,
    *,
    environ: Mapping[str, str],
    on_env_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
    use_declared_defaults: bool = False,
) -> Flag | None:
    """Seed ``field`` from the environment and register its flag.

    Returns ``None`` (registering nothing) for unsupported field types.
    """

    if field.kind in (FieldKind.UNSUPPORTED, FieldKind.RECORD):
        logger.debug("Skipping field %s of unsupported type", field.path)
        return None

    flag_name = effective_flag_name(field)
    env_name = effective_env_name(field)
    usage = effective_help(field)

    default = _seed_default(field, use_declared_defaults)
    seed, status = resolve_env(
        field.spec, env_name, default, environ=environ, on_error=on_env_error
    )

    if status is EnvStatus.OK:
        origin = FlagOrigin.ENV
    elif status is EnvStatus.INVALID:
        origin = FlagOrigin.ENV_INVALID
    else:
        origin = FlagOrigin.DECLARED if use_declared_defaults else FlagOrigin.ZERO

    flag = Flag(
        name=flag_name,
        usage=usage,
        field=field,
        default=format_default(seed),
        origin=origin,
        env_key=env_name,
    )
    if field.spec.deferred:
        flag.raw = seed
        flag.env_policy = EnvErrorPolicy(on_env_error)
        flag.fallback = default
    elif seed is not None or field.kind is not FieldKind.CUSTOM:
        field.set(seed)
    flag_set.add(flag)
    logger.debug(
        "Bound %s to flag -%s (env %s, %s)", field.path, flag_name, env_name, origin.value
    )
    return flag


def bind_fields(
    flag_set: FlagSet,
    fields: Sequence[FieldDescriptor],
    *,
    environ: Mapping[str, str],
    on_env_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
    use_declared_defaults: bool = False,
) -> list[Flag]:
    flags: list[Flag] = []
    for field in fields:
        flag = bind_field(
            flag_set,
            field,
            environ=environ,
            on_env_error=on_env_error,
            use_declared_defaults=use_declared_defaults,
        )
        if flag is not None:
            flags.append(flag)
    return flags


def get_config_flag_set(
    args: Sequence[str],
    schema: Any,
    *,
    environ: Mapping[str, str] | None = None,
    env_file: Path | str | None = None,
    on_env_error: EnvErrorPolicy | str = EnvErrorPolicy.ZERO,
    use_declared_defaults: bool = False,
    name: str = "config",
) -> FlagSet:
    """Resolve ``schema`` from the environment and ``args`` in place.

    Every assignable field gets one flag whose default is seeded from its
    environment variable; ``args`` (program name excluded) then override those
    defaults. The returned flag set can render usage text or explain where
    each value came from.
    """

    fields = walk_schema(schema)
    snapshot = load_environ(environ, env_file)
    flag_set = FlagSet(name)
    bind_fields(
        flag_set,
        fields,
        environ=snapshot,
        on_env_error=on_env_error,
        use_declared_defaults=use_declared_defaults,
    )
    flag_set.parse(args)
    return flag_set


__all__ = [
    "bind_field",
    "bind_fields",
    "effective_env_name",
    "effective_flag_name",
    "effective_help",
    "format_default",
    "get_config_flag_set",
]
