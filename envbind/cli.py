"""``envbind`` command: inspect how a schema resolves against env and flags."""
from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from envbind.binder import get_config_flag_set
from envbind.env import EnvErrorPolicy
from envbind.errors import ConfigError, FlagError, HelpRequested, InvalidSchemaError
from envbind.flags import FlagSet
from envbind.logger import configure_logging, logger


def load_schema(reference: str) -> Any:
    """Import ``module:attribute`` and return a schema instance.

    Classes are instantiated with no arguments (pydantic models without
    validation); anything else is returned as-is.
    """

    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise InvalidSchemaError(f"schema reference must look like module:Class, got {reference!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidSchemaError(f"cannot import schema module {module_name!r}: {exc}") from exc
    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise InvalidSchemaError(f"{module_name} has no attribute {attribute!r}") from exc
    if isinstance(target, type):
        if issubclass(target, BaseModel):
            return target.model_construct()
        try:
            return target()
        except TypeError as exc:
            raise InvalidSchemaError(f"cannot instantiate {attribute}: {exc}") from exc
    return target


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def format_flag_table(flag_set: FlagSet) -> str:
    headers = ["Flag", "Env", "Type", "Default", "Help"]
    lines = ["| " + " | ".join(headers) + " |", "| " + " | ".join(["---"] * len(headers)) + " |"]
    for flag in flag_set:
        row = [
            f"-{flag.name}",
            flag.env_key or "",
            flag.type_name,
            flag.default,
            flag.usage,
        ]
        lines.append("| " + " | ".join(_cell(item) for item in row) + " |")
    return "\n".join(lines)


def resolved_values(flag_set: FlagSet) -> dict[str, Any]:
    return {
        flag.field.path: to_jsonable_python(flag.value, fallback=str) for flag in flag_set
    }


def _split_passthrough(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    argv = list(argv)
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1 :]
    return argv, []


def main(argv: Sequence[str] | None = None) -> int:
    own_args, schema_args = _split_passthrough(sys.argv[1:] if argv is None else argv)

    parser = argparse.ArgumentParser(
        prog="envbind",
        description="Resolve a configuration schema from the environment and flags",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog="Arguments after -- are parsed as the schema's own flags.",
    )
    parser.add_argument("--schema", required=True, metavar="MODULE:CLASS", help="Schema to resolve")
    parser.add_argument("--env-file", type=Path, help="Optional .env file layered under the environment")
    parser.add_argument(
        "--on-env-error",
        choices=[policy.value for policy in EnvErrorPolicy],
        default=EnvErrorPolicy.ZERO.value,
        help="What a malformed environment value resolves to",
    )
    parser.add_argument(
        "--declared-defaults",
        action="store_true",
        help="Use the schema's declared values instead of zero values as defaults",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("--print-flags", action="store_true", help="Print a Markdown table of all flags")
    actions.add_argument("--explain", metavar="FLAG", help="Explain where a flag value originates")
    actions.add_argument("--resolve", action="store_true", help="Print resolved values as JSON")

    args = parser.parse_args(own_args)
    configure_logging(verbose=args.verbose)

    try:
        schema = load_schema(args.schema)
        flag_set = get_config_flag_set(
            schema_args,
            schema,
            environ=None,
            env_file=args.env_file,
            on_env_error=args.on_env_error,
            use_declared_defaults=args.declared_defaults,
            name=args.schema,
        )
        if args.print_flags:
            print(format_flag_table(flag_set))
            return 0
        if args.explain:
            print(flag_set.explain(args.explain.lstrip("-")))
            return 0
        if args.resolve:
            print(json.dumps(resolved_values(flag_set), indent=2, ensure_ascii=False))
            return 0
    except HelpRequested as exc:
        sys.stdout.write(exc.usage)
        return 0
    except FlagError as exc:
        logger.debug("Flag parsing failed: {!r}", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ConfigError as exc:
        logger.debug("Resolution failed: {!r}", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
