"""Exception hierarchy shared by every envbind component."""
from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when configuration binding or resolution fails."""


class InvalidSchemaError(ConfigError, ValueError):
    """Raised when the schema root is not a record instance."""


class CyclicSchemaError(InvalidSchemaError):
    """Raised when nested records refer back to a record already being walked."""


class ValueParseError(ConfigError, ValueError):
    """Raised when text cannot be converted into a field's semantic type."""

    def __init__(
        self,
        message: str,
        *,
        text: str | None = None,
        kind: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.text = text
        self.kind = kind
        self.field = field


class EnvParseError(ValueParseError):
    """Raised for malformed environment values when the policy is ``fail``."""


class TypeMismatchError(ConfigError, TypeError):
    """Raised when a dynamic value slot is read or written with the wrong type."""


class UnknownFieldError(ConfigError, KeyError):
    """Raised when a dynamic configuration has no field with the requested name."""

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


class InvalidOptionError(ConfigError, ValueError):
    """Raised when a dynamic option carries an unsupported default value."""


class FlagError(ConfigError):
    """Base class for command-line flag failures."""


class FlagParseError(FlagError):
    """Raised when command-line arguments cannot be parsed."""


class DuplicateFlagError(FlagError):
    """Raised when a flag name is registered twice on the same flag set."""


class HelpRequested(FlagError):
    """Raised when ``-h``/``-help`` is passed and no such flag is defined."""

    def __init__(self, usage: str) -> None:
        super().__init__("help requested")
        self.usage = usage


__all__ = [
    "ConfigError",
    "CyclicSchemaError",
    "DuplicateFlagError",
    "EnvParseError",
    "FlagError",
    "FlagParseError",
    "HelpRequested",
    "InvalidOptionError",
    "InvalidSchemaError",
    "TypeMismatchError",
    "UnknownFieldError",
    "ValueParseError",
]
