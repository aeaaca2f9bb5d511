"""Unindented and folded block text for Python sources."""

from __future__ import annotations

import functools

from unindent.strings import fold, unindent
from unindent.text import TemplateFields, Transform, TransformedText, template_fields

__version__ = "0.1.0"

__all__ = [
    "TemplateFields",
    "Transform",
    "TransformedText",
    "fold",
    "folded_view",
    "make_folded",
    "make_unindented",
    "template_fields",
    "unindent",
    "unindented_view",
]


# Bounded so text computed at runtime cannot grow the cache without limit
_CACHE_SIZE = 1024


@functools.lru_cache(maxsize=_CACHE_SIZE)
def make_unindented(text: str) -> TransformedText:
    """Return block text with its common indentation removed.

    Meant for module-level constants; a literal yields the same value on
    every call while it stays among the most recent _CACHE_SIZE texts.
    """
    return TransformedText(text, Transform.UNINDENT)


@functools.lru_cache(maxsize=_CACHE_SIZE)
def make_folded(text: str) -> TransformedText:
    """Return block text unindented and folded onto one line per paragraph."""
    return TransformedText(text, Transform.FOLD)


def unindented_view(text: str) -> str:
    return make_unindented(text).value


def folded_view(text: str) -> str:
    return make_folded(text).value
