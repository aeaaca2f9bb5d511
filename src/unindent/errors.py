"""Error types with formatted source context."""

from __future__ import annotations

from enum import Enum

from unindent.spans import Span, source_lines


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class SourceError(Exception):
    """Base for errors tied to a span of source text."""

    severity = Severity.ERROR

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "<string>") -> str:
        lines = source_lines(self.source)
        line_idx = self.span.start.line - 1
        col = self.span.start.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx]
        else:
            source_line = ""

        # Underline the full span when on one line, otherwise to end of line
        if self.span.end.line == self.span.start.line:
            underline_len = max(1, self.span.end.column - col)
        else:
            underline_len = max(1, len(source_line) - col + 1)

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.span.start.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"{self.severity.value}: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.span.start.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class CheckSyntaxError(SourceError):
    """Raised when a Python source handed to the checker does not parse."""


class UsageError(SourceError):
    """A misuse of the block text constructors found by the static checker."""

    def __init__(
        self,
        message: str,
        span: Span,
        source: str,
        severity: Severity = Severity.ERROR,
    ) -> None:
        self.severity = severity
        super().__init__(message, span, source)
