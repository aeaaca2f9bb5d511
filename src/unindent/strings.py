"""Indentation stripping and line folding for block text."""

from __future__ import annotations

from collections.abc import Iterable


def unindent(raw: str) -> str:
    """Strip the common leading indentation from a block of text.

    Algorithm:
    1. Discard leading newlines, and trailing spaces/newlines.
    2. Split into lines.
    3. Measure the minimum indent over non-empty lines.
    4. Drop that many characters from every line long enough to hold them.
    5. Rejoin with newline.

    Only spaces count as indentation; tabs are ordinary characters.
    """
    lines = trim(raw).split("\n")
    width = minimum_indent(lines)

    # Empty lines are shorter than any positive indent and stay empty
    stripped = [line[width:] if len(line) >= width else line for line in lines]
    return "\n".join(stripped)


def fold(raw: str) -> str:
    """Unindent, then join single line breaks with a space.

    A run of two or more newlines becomes one newline, so paragraph
    boundaries survive. Newlines pending at the end are dropped.
    """
    out: list[str] = []
    returns = 0

    for ch in unindent(raw):
        if ch == "\n":
            returns += 1
            continue
        if returns > 1:
            out.append("\n")
        elif returns == 1:
            out.append(" ")
        returns = 0
        out.append(ch)

    return "".join(out)


def indent_width(line: str) -> int:
    """Return the number of leading space characters in line."""
    return len(line) - len(line.lstrip(" "))


def minimum_indent(lines: Iterable[str]) -> int:
    """Return the smallest indent over non-empty lines, or 0 if there are none."""
    return min((indent_width(line) for line in lines if line), default=0)


def trim(raw: str) -> str:
    """Discard leading newlines, and trailing spaces and newlines."""
    return raw.lstrip("\n").rstrip(" \n")
