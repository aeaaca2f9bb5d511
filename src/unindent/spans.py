"""Source positions and spans for Python syntax nodes."""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass

# The tokenizer ends lines only at these; str.splitlines also splits on
# form feeds and Unicode separators
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column."""

    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


def node_span(node: ast.expr | ast.stmt, lines: list[str]) -> Span:
    """Return the span of an ast node, with columns counted in characters.

    The ast module reports columns as UTF-8 byte offsets.
    """
    start = Position(node.lineno, _char_column(lines, node.lineno, node.col_offset))
    end_line = node.end_lineno or node.lineno
    end_offset = node.end_col_offset if node.end_col_offset is not None else node.col_offset
    end = Position(end_line, _char_column(lines, end_line, end_offset))
    return Span(start, end)


def _char_column(lines: list[str], line: int, byte_offset: int) -> int:
    if not 0 < line <= len(lines):
        return byte_offset + 1
    encoded = lines[line - 1].encode("utf-8")
    return len(encoded[:byte_offset].decode("utf-8", errors="ignore")) + 1


def source_lines(source: str) -> list[str]:
    """Split source into lines the way Python numbers them."""
    return _LINE_BREAK.split(source)


def utf16_column(line: str, column: int) -> int:
    """Convert a 1-based character column to a 0-based UTF-16 offset."""
    prefix = line[: column - 1]
    # Columns past the end of the line keep their distance from it
    overflow = max(0, column - 1 - len(line))
    return len(prefix.encode("utf-16-le")) // 2 + overflow
