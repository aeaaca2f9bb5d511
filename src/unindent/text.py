"""Immutable transformed-text values and format template inspection."""

from __future__ import annotations

import re
import string
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from unindent.strings import fold, unindent

Editor = Callable[[str], str]


class Transform(Enum):
    """Built-in transformations. Members are callable editors."""

    UNINDENT = "unindent"
    FOLD = "fold"

    def __call__(self, raw: str) -> str:
        if self is Transform.FOLD:
            return fold(raw)
        return unindent(raw)


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class TransformedText:
    """Block text with a transformation applied once at construction.

    Compares, hashes and iterates like its content string. The transform may
    be a Transform member or any callable taking and returning str.
    """

    raw: str
    transform: Editor = Transform.UNINDENT
    value: str = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.raw, str):
            raise TypeError(f"block text must be str, not {type(self.raw).__name__}")
        value = self.transform(self.raw)
        if not isinstance(value, str):
            raise TypeError(
                f"transform {_editor_name(self.transform)} returned "
                f"{type(value).__name__}, expected str"
            )
        object.__setattr__(self, "value", value)

    def format(self, *args: Any, **kwargs: Any) -> str:
        """Substitute args into the content as a str.format template."""
        return self.value.format(*args, **kwargs)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r}, transform={_editor_name(self.transform)})"

    def __format__(self, spec: str) -> str:
        return format(self.value, spec)

    # Comparison: content only, against TransformedText or str

    def __eq__(self, other: object) -> bool:
        content = _content_of(other)
        if content is None:
            return NotImplemented
        return self.value == content

    def __ne__(self, other: object) -> bool:
        content = _content_of(other)
        if content is None:
            return NotImplemented
        return self.value != content

    def __lt__(self, other: object) -> bool:
        content = _content_of(other)
        if content is None:
            return NotImplemented
        return self.value < content

    def __le__(self, other: object) -> bool:
        content = _content_of(other)
        if content is None:
            return NotImplemented
        return self.value <= content

    def __gt__(self, other: object) -> bool:
        content = _content_of(other)
        if content is None:
            return NotImplemented
        return self.value > content

    def __ge__(self, other: object) -> bool:
        content = _content_of(other)
        if content is None:
            return NotImplemented
        return self.value >= content

    def __hash__(self) -> int:
        return hash(self.value)

    # Sequence protocol

    def __iter__(self) -> Iterator[str]:
        return iter(self.value)

    def __reversed__(self) -> Iterator[str]:
        return reversed(self.value)

    def __len__(self) -> int:
        return len(self.value)

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and item in self.value


def _content_of(other: object) -> str | None:
    if isinstance(other, TransformedText):
        return other.value
    if isinstance(other, str):
        return other
    return None


def _editor_name(editor: Editor) -> str:
    if isinstance(editor, Transform):
        return editor.value
    return getattr(editor, "__qualname__", repr(editor))


# ---------------------------------------------------------------------------
# Format template inspection
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TemplateFields:
    """Arguments a str.format template consumes."""

    positional: int
    names: frozenset[str]


_FORMATTER = string.Formatter()
_FIELD_KEY = re.compile(r"[.\[]")

# str.format expands fields nested in a format spec one level deep
_MAX_NESTING = 2


def template_fields(template: str) -> TemplateFields:
    """Report how many positional and which keyword arguments template needs.

    Raises ValueError for templates str.format would reject outright:
    unbalanced braces, mixed automatic and manual numbering, nesting too deep.
    """
    auto = 0
    highest = -1
    names: set[str] = set()
    numbering: str | None = None

    def walk(text: str, depth: int) -> None:
        nonlocal auto, highest, numbering
        if depth > _MAX_NESTING:
            raise ValueError("Max string recursion exceeded")
        for _literal, field_name, spec, _conversion in _FORMATTER.parse(text):
            if field_name is None:
                continue
            key = _FIELD_KEY.split(field_name, maxsplit=1)[0]
            if key == "":
                if numbering == "manual":
                    raise ValueError(
                        "cannot switch from manual field specification "
                        "to automatic field numbering"
                    )
                numbering = "auto"
                auto += 1
            elif key.isdecimal():
                if numbering == "auto":
                    raise ValueError(
                        "cannot switch from automatic field numbering "
                        "to manual field specification"
                    )
                numbering = "manual"
                highest = max(highest, int(key))
            else:
                names.add(key)
            if "{" in spec:
                walk(spec, depth + 1)

    walk(template, 1)
    return TemplateFields(max(auto, highest + 1), frozenset(names))
