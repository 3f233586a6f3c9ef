"""Naming conventions used to derive env, flag and display identifiers."""
from __future__ import annotations


def to_flag_style(name: str) -> str:
    """Replace spaces with underscores, keeping the original case."""

    return name.replace(" ", "_")


def to_env_style(name: str) -> str:
    """Return ``name`` as an ``UPPER_SNAKE`` environment variable name."""

    return to_flag_style(name.strip()).upper()


def to_display_style(name: str) -> str:
    """Return ``name`` in camelCase, splitting on spaces and underscores.

    >>> to_display_style("test_value")
    'testValue'
    >>> to_display_style("Value")
    'value'
    """

    text = to_flag_style(name.strip()).lower()
    if "_" not in text:
        return text

    formatted: list[str] = []
    previous = ""
    for char in text:
        if previous == "_":
            formatted.append(char.upper())
        elif char != "_":
            formatted.append(char)
        previous = char
    return "".join(formatted)


__all__ = ["to_display_style", "to_env_style", "to_flag_style"]
