"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from unindent.check import check_source
from unindent.errors import Severity, UsageError

# Indented block used across modules, as it would appear inside a function
HELLO_BLOCK = '\n    def foo():\n      print("Hello")\n      print("World")\n  '
HELLO_UNINDENTED = 'def foo():\n  print("Hello")\n  print("World")'


@pytest.fixture
def problems():
    """Return a helper that checks source and returns the findings."""

    def _check(source: str, filename: str = "test.py") -> list[UsageError]:
        return check_source(source, filename)

    return _check


def messages(found: list[UsageError]) -> list[str]:
    """Return the messages of a list of findings."""
    return [p.message for p in found]


def errors_only(found: list[UsageError]) -> list[UsageError]:
    """Return only error-severity findings."""
    return [p for p in found if p.severity is Severity.ERROR]
