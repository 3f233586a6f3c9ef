"""Bind configuration records to environment variables and command-line flags."""
from __future__ import annotations

from .binder import (
    effective_env_name,
    effective_flag_name,
    effective_help,
    get_config_flag_set,
)
from .descriptors import FieldDescriptor, flag_field, tags
from .dynamic import (
    Configuration,
    Option,
    bool_option,
    build_config,
    float_option,
    int_option,
    option,
    string_option,
)
from .env import (
    EnvErrorPolicy,
    lookup_env_or_bool,
    lookup_env_or_duration,
    lookup_env_or_float32,
    lookup_env_or_float64,
    lookup_env_or_int,
    lookup_env_or_int64,
    lookup_env_or_string,
    lookup_env_or_uint,
    lookup_env_or_uint8,
    lookup_env_or_uint16,
    lookup_env_or_uint32,
    lookup_env_or_uint64,
)
from .errors import (
    ConfigError,
    CyclicSchemaError,
    DuplicateFlagError,
    EnvParseError,
    FlagError,
    FlagParseError,
    HelpRequested,
    InvalidOptionError,
    InvalidSchemaError,
    TypeMismatchError,
    UnknownFieldError,
    ValueParseError,
)
from .flags import Flag, FlagOrigin, FlagSet, command_line
from .naming import to_display_style, to_env_style, to_flag_style
from .parsing import parse_value
from .types import (
    BinaryUnmarshaler,
    BitSize,
    Decoder,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    Setter,
    TextUnmarshaler,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
)
from .walker import walk_schema

__all__ = [
    "BinaryUnmarshaler",
    "BitSize",
    "ConfigError",
    "Configuration",
    "CyclicSchemaError",
    "Decoder",
    "DuplicateFlagError",
    "EnvErrorPolicy",
    "EnvParseError",
    "FieldDescriptor",
    "Flag",
    "FlagError",
    "FlagOrigin",
    "FlagParseError",
    "FlagSet",
    "Float32",
    "Float64",
    "HelpRequested",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "InvalidOptionError",
    "InvalidSchemaError",
    "Option",
    "Setter",
    "TextUnmarshaler",
    "TypeMismatchError",
    "Uint16",
    "Uint32",
    "Uint64",
    "Uint8",
    "UnknownFieldError",
    "ValueParseError",
    "bool_option",
    "build_config",
    "command_line",
    "effective_env_name",
    "effective_flag_name",
    "effective_help",
    "flag_field",
    "float_option",
    "get_config_flag_set",
    "int_option",
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
    "option",
    "parse_value",
    "string_option",
    "tags",
    "to_display_style",
    "to_env_style",
    "to_flag_style",
    "walk_schema",
]

__version__ = "0.1.0"
