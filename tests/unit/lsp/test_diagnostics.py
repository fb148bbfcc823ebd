"""Tests for the bindcheck LSP diagnostics provider."""

from lsprotocol.types import DiagnosticSeverity

from bindcheck.compiler.externals import scan_externals
from bindcheck.lsp.diagnostics import (
    DIAGNOSTIC_SOURCE,
    DiagnosticProvider,
    get_diagnostics_for_document,
    keyword_range,
)

URI = "file:///project/src/Bindings.res"


class TestDiagnosticProvider:
    """Test suite for DiagnosticProvider."""

    def test_clean_document_has_no_diagnostics(self) -> None:
        source = '@module("path") external join: (string, string) => string = "join"\n'
        assert get_diagnostics_for_document(source, URI) == []

    def test_unknown_type_produces_warning(self) -> None:
        source = 'let x = 1\n@val external body: Dom.element = "document.body"\n'
        diagnostics = get_diagnostics_for_document(source, URI)

        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.severity == DiagnosticSeverity.Warning
        assert diagnostic.source == DIAGNOSTIC_SOURCE
        assert diagnostic.code == "W0101"
        assert diagnostic.message == "body: unresolved type Dom.element treated as unknown"

    def test_warning_range_covers_keyword(self) -> None:
        source = 'let x = 1\n@val external body: Dom.element = "document.body"\n'
        diagnostic = get_diagnostics_for_document(source, URI)[0]

        assert diagnostic.range.start.line == 1
        assert diagnostic.range.start.character == 5
        assert diagnostic.range.end.character == 13

    def test_one_warning_per_problem(self) -> None:
        source = "external pair: ('a, Foo.t) => unit = \"pair\"\n"
        diagnostics = DiagnosticProvider(source, URI).get_diagnostics()
        assert [d.message for d in diagnostics] == [
            "pair: type variable 'a treated as unknown",
            "pair: unresolved type Foo.t treated as unknown",
        ]

    def test_repeated_calls_do_not_accumulate(self) -> None:
        provider = DiagnosticProvider('external x: Foo.t = "x"', URI)
        provider.get_diagnostics()
        assert len(provider.get_diagnostics()) == 1


def test_keyword_range_is_zero_indexed() -> None:
    decl = scan_externals('\n\n  external f: int = "f"', URI)[0]
    rng = keyword_range(decl)
    assert (rng.start.line, rng.start.character) == (2, 2)
    assert (rng.end.line, rng.end.character) == (2, 10)
