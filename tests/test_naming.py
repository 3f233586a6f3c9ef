from __future__ import annotations

import pytest

from envbind.naming import to_display_style, to_env_style, to_flag_style


@pytest.mark.parametrize(
    ("raw", "expected"),
    (
        ("test value", "TEST_VALUE"),
        ("  padded name  ", "PADDED_NAME"),
        ("already_SNAKE", "ALREADY_SNAKE"),
        ("Pass", "PASS"),
    ),
)
def test_to_env_style(raw: str, expected: str) -> None:
    assert to_env_style(raw) == expected


def test_to_flag_style_keeps_case() -> None:
    assert to_flag_style("Test Value") == "Test_Value"
    assert to_flag_style("testint") == "testint"


@pytest.mark.parametrize(
    ("raw", "expected"),
    (
        ("test_value", "testValue"),
        ("Test Value", "testValue"),
        ("HTTP_PORT_NUMBER", "httpPortNumber"),
        ("plain", "plain"),
        ("Plain", "plain"),
        ("trailing_", "trailing"),
    ),
)
def test_to_display_style(raw: str, expected: str) -> None:
    assert to_display_style(raw) == expected
