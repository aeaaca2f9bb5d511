"""--debug line layout dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from unindent.strings import indent_width, minimum_indent, trim


def dump_layout(raw: str, *, file: TextIO = sys.stderr) -> None:
    """Print the trimmed lines of raw with their indent widths to *file*.

    Empty lines are marked with '-' since they do not count toward the
    minimum indent.
    """
    lines = trim(raw).split("\n")
    width = minimum_indent(lines)
    file.write(f"Layout: {len(lines)} lines, minimum indent {width}\n")
    for number, line in enumerate(lines, start=1):
        indent = str(indent_width(line)) if line else "-"
        file.write(f"{number:>4} {indent:>3} | {line}\n")
