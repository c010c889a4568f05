"""pasparse Language Server: pygls-based LSP for Pascal sources.

Provides parse diagnostics, document symbols and keyword completion via
stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from pasparse import __version__
from pasparse.ast_nodes import (
    Declaration,
    FunctionDeclaration,
    ProcedureDeclaration,
    Program,
    VariableDeclaration,
)
from pasparse.errors import ParseError, Severity
from pasparse.lexer import Lexer
from pasparse.parser import Parser
from pasparse.source import SourceLocation
from pasparse.tokens import KEYWORDS

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}

_KEYWORD_COMPLETIONS = sorted(KEYWORDS.keys())

# Built-in routines
_BUILTINS = ["write", "writeln", "read", "readln"]


def location_to_range(location: SourceLocation | None) -> lsp.Range:
    """Convert a 1-indexed SourceLocation to a 0-indexed LSP Range."""
    if location is None or location.is_zero:
        return lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    start, end = location.start, location.end
    return lsp.Range(
        start=lsp.Position(line=start.line - 1, character=start.column - 1),
        end=lsp.Position(line=end.line - 1, character=end.column - 1),
    )


def _error_diag(error: ParseError, uri: str) -> lsp.Diagnostic:
    """Convert a ParseError to an LSP Diagnostic."""
    d = error.to_diagnostic(uri)
    return lsp.Diagnostic(
        range=location_to_range(error.location),
        severity=_SEVERITY_MAP[d.severity], source="pasparse",
        code=d.code, message=f"[{d.code}] {d.message}",
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    program: Program | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "pasparse-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str) -> DocumentState:
    """Run Lexer -> Parser, cache results, return state."""
    ds = DocumentState(source=source)
    try:
        ds.program = Parser(Lexer(source)).parse()
    except ParseError as e:
        ds.diagnostics = [_error_diag(e, uri)]
    _state[uri] = ds
    return ds


def _declaration_symbol(decl: Declaration) -> lsp.DocumentSymbol:
    rng = location_to_range(decl.location)
    match decl:
        case VariableDeclaration(name=name, var_type=var_type):
            return lsp.DocumentSymbol(
                name=name, detail=var_type, kind=lsp.SymbolKind.Variable,
                range=rng, selection_range=rng,
            )
        case FunctionDeclaration(name=name, return_type=return_type, body=body):
            children = [_declaration_symbol(d) for d in body.declarations] if body else []
            return lsp.DocumentSymbol(
                name=name, detail=return_type, kind=lsp.SymbolKind.Function,
                range=rng, selection_range=rng, children=children,
            )
        case ProcedureDeclaration(name=name, body=body):
            children = [_declaration_symbol(d) for d in body.declarations] if body else []
            return lsp.DocumentSymbol(
                name=name, kind=lsp.SymbolKind.Method,
                range=rng, selection_range=rng, children=children,
            )


def document_symbols(program: Program) -> list[lsp.DocumentSymbol]:
    rng = location_to_range(program.location)
    return [lsp.DocumentSymbol(
        name=program.name, kind=lsp.SymbolKind.Module,
        range=rng, selection_range=rng,
        children=[_declaration_symbol(d) for d in program.declarations],
    )]


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: take last content change
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.program is None:
        return None
    return document_symbols(ds.program)


def completion_items() -> list[lsp.CompletionItem]:
    items = [
        lsp.CompletionItem(label=kw, kind=lsp.CompletionItemKind.Keyword)
        for kw in _KEYWORD_COMPLETIONS
    ]
    items.extend(
        lsp.CompletionItem(label=name, kind=lsp.CompletionItemKind.Function)
        for name in _BUILTINS
    )
    return items


@server.feature(lsp.TEXT_DOCUMENT_COMPLETION)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    return lsp.CompletionList(is_incomplete=False, items=completion_items())


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the pasparse language server on stdio."""
    server.start_io()
