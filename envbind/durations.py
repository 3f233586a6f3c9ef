"""Human-readable duration strings such as ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``."""
from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from envbind.errors import ValueParseError

_UNIT_NANOSECONDS: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3_600 * 1_000_000_000,
}

_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)([^\d.]+)")
_MAX_NANOSECONDS = 2**63 - 1


def _invalid(text: str, reason: str) -> ValueParseError:
    return ValueParseError(
        f"invalid duration {text!r}: {reason}", text=text, kind="duration"
    )


def parse_duration_ns(text: str) -> int:
    """Parse ``text`` into a signed number of nanoseconds."""

    remaining = text
    negative = False
    if remaining[:1] in ("-", "+"):
        negative = remaining[0] == "-"
        remaining = remaining[1:]
    if remaining == "0":
        return 0
    if not remaining:
        raise _invalid(text, "empty value")

    total = Decimal(0)
    position = 0
    while position < len(remaining):
        match = _COMPONENT.match(remaining, position)
        if match is None:
            if remaining[position].isdigit() or remaining[position] == ".":
                raise _invalid(text, "missing unit")
            raise _invalid(text, "expected a number")
        number, unit = match.groups()
        if unit not in _UNIT_NANOSECONDS:
            raise _invalid(text, f"unknown unit {unit!r}")
        try:
            total += Decimal(number) * _UNIT_NANOSECONDS[unit]
        except InvalidOperation as exc:  # pragma: no cover - regex guards digits
            raise _invalid(text, "malformed number") from exc
        position = match.end()

    nanoseconds = int(total)
    if nanoseconds > _MAX_NANOSECONDS:
        raise _invalid(text, "value out of range")
    return -nanoseconds if negative else nanoseconds


def parse_duration(text: str) -> timedelta:
    """Parse ``text`` into a :class:`~datetime.timedelta` (microsecond precision)."""

    nanoseconds = parse_duration_ns(text)
    return timedelta(microseconds=nanoseconds / 1_000)


def _format_fraction(value: int, scale: int) -> str:
    whole, fraction = divmod(value, scale)
    if not fraction:
        return str(whole)
    digits = str(fraction).rjust(len(str(scale)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(value: timedelta) -> str:
    """Render ``value`` the way :func:`parse_duration` reads it back.

    >>> format_duration(timedelta(hours=2, minutes=30))
    '2h30m0s'
    >>> format_duration(timedelta(milliseconds=1500))
    '1.5s'
    """

    nanoseconds = (value // timedelta(microseconds=1)) * 1_000
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    nanoseconds = abs(nanoseconds)

    if nanoseconds < 1_000:
        return f"{sign}{nanoseconds}ns"
    if nanoseconds < 1_000_000:
        return f"{sign}{_format_fraction(nanoseconds, 1_000)}µs"
    if nanoseconds < 1_000_000_000:
        return f"{sign}{_format_fraction(nanoseconds, 1_000_000)}ms"

    hours, rest = divmod(nanoseconds, _UNIT_NANOSECONDS["h"])
    minutes, rest = divmod(rest, _UNIT_NANOSECONDS["m"])
    seconds = _format_fraction(rest, _UNIT_NANOSECONDS["s"])
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


__all__ = ["format_duration", "parse_duration", "parse_duration_ns"]
