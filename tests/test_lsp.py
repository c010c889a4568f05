"""Tests for the pasparse LSP server."""

from __future__ import annotations

from lsprotocol import types as lsp

from pasparse.errors import Severity
from pasparse.lsp import (
    _SEVERITY_MAP,
    DocumentState,
    _analyze,
    _state,
    completion_items,
    document_symbols,
    location_to_range,
)
from pasparse.parser import parse
from pasparse.source import ZERO_LOCATION, Position, SourceLocation


def _loc(sl: int, sc: int, el: int, ec: int) -> SourceLocation:
    return SourceLocation(Position(sl, sc, 0), Position(el, ec, 0))


class TestLocationConversion:
    def test_basic(self):
        r = location_to_range(_loc(1, 1, 1, 6))
        assert r.start.line == 0
        assert r.start.character == 0
        assert r.end.line == 0
        assert r.end.character == 5

    def test_multiline(self):
        r = location_to_range(_loc(5, 3, 7, 10))
        assert r.start.line == 4
        assert r.start.character == 2
        assert r.end.line == 6
        assert r.end.character == 9

    def test_zero_location(self):
        r = location_to_range(ZERO_LOCATION)
        assert r.start == lsp.Position(0, 0)
        assert r.end == lsp.Position(0, 0)

    def test_none(self):
        assert location_to_range(None).start == lsp.Position(0, 0)


class TestSeverityMap:
    def test_error_maps(self):
        assert _SEVERITY_MAP[Severity.ERROR] == lsp.DiagnosticSeverity.Error

    def test_warning_maps(self):
        assert _SEVERITY_MAP[Severity.WARNING] == lsp.DiagnosticSeverity.Warning

    def test_note_maps(self):
        assert _SEVERITY_MAP[Severity.NOTE] == lsp.DiagnosticSeverity.Information


class TestAnalyze:
    def test_analyze_valid_source(self):
        ds = _analyze("file:///ok.pas", "program P;\nbegin\n  writeln('hi');\nend.")
        assert ds.program is not None
        assert ds.program.name == "P"
        assert ds.diagnostics == []
        _state.pop("file:///ok.pas", None)

    def test_analyze_syntax_error(self):
        ds = _analyze("file:///bad.pas", "program P;\nbegin\n  writeln('hi')\nend.")
        assert ds.program is None
        (diag,) = ds.diagnostics
        assert diag.severity == lsp.DiagnosticSeverity.Error
        assert diag.code == "E200"
        assert "Expected ';' after statement" in diag.message
        assert diag.range.start == lsp.Position(line=3, character=0)
        assert diag.range.end == lsp.Position(line=3, character=3)
        _state.pop("file:///bad.pas", None)

    def test_analyze_lex_error(self):
        ds = _analyze("file:///lex.pas", "program P; begin $ end.")
        (diag,) = ds.diagnostics
        assert diag.code == "E100"
        assert diag.range.start == lsp.Position(line=0, character=17)
        _state.pop("file:///lex.pas", None)

    def test_analyze_caches_state(self):
        uri = "file:///cache_test.pas"
        ds = _analyze(uri, "program P; begin end.")
        assert _state.get(uri) is ds
        _state.pop(uri, None)


class TestDocumentState:
    def test_default_state(self):
        ds = DocumentState()
        assert ds.source == ""
        assert ds.program is None
        assert ds.diagnostics == []


class TestDocumentSymbols:
    def test_program_and_declarations(self):
        program = parse(
            "program Shapes;\n"
            "var count: integer;\n"
            "function Area(w, h: real): real;\n"
            "var tmp: real;\n"
            "begin Area := w * h; end;\n"
            "procedure Show;\nbegin end;\n"
            "begin end."
        )
        (root,) = document_symbols(program)
        assert root.name == "Shapes"
        assert root.kind == lsp.SymbolKind.Module
        names = [c.name for c in root.children]
        assert names == ["count", "Area", "Show"]
        count, area, show = root.children
        assert count.kind == lsp.SymbolKind.Variable
        assert count.detail == "integer"
        assert area.kind == lsp.SymbolKind.Function
        assert area.detail == "real"
        assert [c.name for c in area.children] == ["tmp"]
        assert show.kind == lsp.SymbolKind.Method


class TestCompletion:
    def test_keywords_and_builtins(self):
        labels = {item.label for item in completion_items()}
        assert {"begin", "end", "program", "downto"} <= labels
        assert "writeln" in labels
