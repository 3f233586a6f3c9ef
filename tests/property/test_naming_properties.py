from __future__ import annotations

import string
from datetime import timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from envbind.durations import format_duration, parse_duration
from envbind.errors import ValueParseError
from envbind.naming import to_display_style, to_env_style, to_flag_style
from envbind.parsing import parse_int, parse_uint

NAME_STRATEGY = st.text(alphabet=string.ascii_letters + string.digits + " _", max_size=30)
WORD_STRATEGY = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=8)


@given(NAME_STRATEGY)
@settings(max_examples=150)
def test_env_style_is_upper_snake_and_idempotent(raw: str) -> None:
    result = to_env_style(raw)
    assert " " not in result
    assert result == result.upper()
    assert to_env_style(result) == result


@given(NAME_STRATEGY)
def test_flag_style_only_replaces_spaces(raw: str) -> None:
    result = to_flag_style(raw)
    assert result.replace("_", " ") == raw.replace("_", " ")
    assert len(result) == len(raw)


@given(st.text(alphabet=string.ascii_lowercase + string.digits, max_size=20))
def test_display_style_keeps_plain_names(raw: str) -> None:
    assert to_display_style(raw) == raw


@given(st.lists(WORD_STRATEGY, min_size=1, max_size=5))
def test_display_style_camel_cases_on_underscores(words: list[str]) -> None:
    expected = words[0] + "".join(word[0].upper() + word[1:] for word in words[1:])
    assert to_display_style("_".join(words)) == expected
    assert to_display_style(" ".join(words)) == expected


@given(st.integers(min_value=-(2**63), max_value=2**63 - 1))
@settings(max_examples=200)
def test_parse_int_accepts_decimal_and_hex(value: int) -> None:
    assert parse_int(str(value)) == value
    assert parse_int(hex(value)) == value


@given(st.sampled_from([8, 16, 32, 64]), st.integers(min_value=0, max_value=2**70))
def test_parse_uint_enforces_width(bits: int, value: int) -> None:
    if value < 2**bits:
        assert parse_uint(str(value), bits) == value
    else:
        with pytest.raises(ValueParseError):
            parse_uint(str(value), bits)


@given(st.integers(min_value=-(10**12), max_value=10**12))
def test_formatted_durations_parse_back(microseconds: int) -> None:
    value = timedelta(microseconds=microseconds)
    assert parse_duration(format_duration(value)) == value
