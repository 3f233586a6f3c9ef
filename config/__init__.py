"""Project metadata shared by packaging and the test-suite."""

from __future__ import annotations

from .version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

__all__ = ["PROJECT_VERSION", "PYTHON_REQUIRES_SPECIFIER"]
