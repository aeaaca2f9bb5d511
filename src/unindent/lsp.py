"""Minimal LSP server for unindent — diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from unindent import __version__
from unindent.check import check_source
from unindent.errors import CheckSyntaxError, Severity, SourceError
from unindent.spans import Position as SpanPosition
from unindent.spans import source_lines, utf16_column

server = LanguageServer(
    "unindent-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)

_SEVERITIES = {
    Severity.ERROR: DiagnosticSeverity.Error,
    Severity.WARNING: DiagnosticSeverity.Warning,
}


def _position(lines: list[str], pos: SpanPosition) -> Position:
    """Convert a 1-based position to LSP's 0-based line and UTF-16 character."""
    line = lines[pos.line - 1] if 0 < pos.line <= len(lines) else ""
    return Position(line=pos.line - 1, character=utf16_column(line, pos.column))


def _diagnostic(exc: SourceError, lines: list[str]) -> Diagnostic:
    return Diagnostic(
        range=Range(
            start=_position(lines, exc.span.start),
            end=_position(lines, exc.span.end),
        ),
        message=exc.message,
        severity=_SEVERITIES[exc.severity],
        source="unindent",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the static checker and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    lines = source_lines(source)

    try:
        problems = check_source(source, filename)
    except CheckSyntaxError as exc:
        diagnostics = [_diagnostic(exc, lines)]
    else:
        diagnostics = [_diagnostic(p, lines) for p in problems]

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
