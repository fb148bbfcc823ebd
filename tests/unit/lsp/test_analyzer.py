"""Tests for the bindcheck LSP document analyzer."""

import pytest
from lsprotocol import types

from bindcheck.lsp.analyzer import DocumentAnalyzer

URI = "file:///project/src/Bindings.res"

SOURCE = """\
@module("path") external join: (string, string) => string = "join"
@val external parseFloat: string => float = "parseFloat"
@scope("JSON") @val external stringify: 'a => string = "stringify"

let x = 1
external document: Dom.document = "document"
"""


@pytest.fixture
def analyzer() -> DocumentAnalyzer:
    result = DocumentAnalyzer(SOURCE, URI)
    result.analyze()
    return result


class TestDocumentAnalyzer:
    """Test suite for DocumentAnalyzer."""

    def test_analyze_collects_externals(self, analyzer) -> None:
        assert [e.decl.name for e in analyzer.externals] == [
            "join",
            "parseFloat",
            "stringify",
            "document",
        ]
        assert analyzer.externals[0].typescript == "(arg0: string, arg1: string) => string"

    def test_analyze_collects_diagnostics(self, analyzer) -> None:
        messages = [d.message for d in analyzer.diagnostics]
        assert messages == [
            "stringify: type variable 'a treated as unknown",
            "document: unresolved type Dom.document treated as unknown",
        ]

    def test_external_at(self, analyzer) -> None:
        assert analyzer.external_at(1).decl.name == "parseFloat"
        assert analyzer.external_at(3).decl.name == "stringify"
        assert analyzer.external_at(4) is None

    def test_external_at_before_first(self) -> None:
        analyzer = DocumentAnalyzer('let a = 1\nexternal f: int = "f"', URI)
        analyzer.analyze()
        assert analyzer.external_at(0) is None


class TestHover:
    """Tests for hover content."""

    def test_hover_module_binding(self, analyzer) -> None:
        hover = analyzer.get_hover(0, 30)

        assert hover is not None
        assert hover.contents.kind == types.MarkupKind.Markdown
        value = hover.contents.value
        assert "**external join**" in value
        assert "```typescript\n(arg0: string, arg1: string) => string\n```" in value
        assert 'Binds to `join` from module `"path"`' in value

    def test_hover_scoped_global(self, analyzer) -> None:
        value = analyzer.get_hover(2, 0).contents.value
        assert "Binds to `JSON.stringify` from `globalThis`" in value
        assert "- type variable 'a treated as unknown" in value

    def test_hover_range_is_keyword(self, analyzer) -> None:
        hover = analyzer.get_hover(1, 40)
        assert hover.range.start == types.Position(line=1, character=5)
        assert hover.range.end == types.Position(line=1, character=13)

    def test_hover_outside_externals(self, analyzer) -> None:
        assert analyzer.get_hover(4, 2) is None


class TestDocumentSymbols:
    """Tests for the document outline."""

    def test_symbols(self, analyzer) -> None:
        symbols = analyzer.get_document_symbols()

        assert [s.name for s in symbols] == ["join", "parseFloat", "stringify", "document"]
        assert symbols[0].kind == types.SymbolKind.Function
        assert symbols[3].kind == types.SymbolKind.Variable
        assert symbols[3].detail == "unknown"

    def test_empty_document(self) -> None:
        analyzer = DocumentAnalyzer("", URI)
        analyzer.analyze()
        assert analyzer.get_document_symbols() == []
        assert analyzer.get_hover(0, 0) is None


def test_analyze_scans_document_once(monkeypatch) -> None:
    import bindcheck.lsp.analyzer as analyzer_module
    import bindcheck.lsp.diagnostics as diagnostics_module

    calls = []
    real_scan = analyzer_module.scan_externals

    def _counting_scan(source, filename):
        calls.append(filename)
        return real_scan(source, filename)

    monkeypatch.setattr(analyzer_module, "scan_externals", _counting_scan)
    monkeypatch.setattr(diagnostics_module, "scan_externals", _counting_scan)

    analyzer = DocumentAnalyzer(SOURCE, URI)
    analyzer.analyze()

    assert calls == [URI]
    assert len(analyzer.diagnostics) == 2
