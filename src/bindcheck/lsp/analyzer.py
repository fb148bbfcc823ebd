"""
Document analysis for bindcheck LSP.

Scans one open document and answers position-based queries about the
externals it declares: hover shows the TypeScript type a declaration is
checked against, and document symbols list every external for the outline.
"""

from __future__ import annotations

from dataclasses import dataclass

from lsprotocol import types

from bindcheck.compiler.externals import ExternalDecl, scan_externals
from bindcheck.compiler.synthesis import BindingTarget, render_typescript
from bindcheck.compiler.type_nodes import Function
from bindcheck.compiler.type_translator import TranslationResult, TypeTranslator
from bindcheck.lsp.diagnostics import DiagnosticProvider, keyword_range


@dataclass
class AnalyzedExternal:
    """A declaration together with its translated type."""

    decl: ExternalDecl
    translation: TranslationResult

    @property
    def typescript(self) -> str:
        return render_typescript(self.translation.descriptor)


class DocumentAnalyzer:
    """
    Analyzes a ReScript document for LSP features.

    Usage:
        analyzer = DocumentAnalyzer(source, uri)
        analyzer.analyze()
        analyzer.get_hover(3, 10)
    """

    def __init__(self, source: str, uri: str) -> None:
        self.source = source
        self.uri = uri
        self.lines = source.splitlines()

        self.externals: list[AnalyzedExternal] = []
        self.diagnostics: list[types.Diagnostic] = []

    def analyze(self) -> None:
        """Scan the document, translate every type and collect diagnostics."""
        translator = TypeTranslator()
        self.externals = [
            AnalyzedExternal(decl, translator.translate(decl.res_type))
            for decl in scan_externals(self.source, self.uri)
        ]

        provider = DiagnosticProvider(self.source, self.uri)
        for external in self.externals:
            provider.add_translation_warnings(external.decl, external.translation)
        self.diagnostics = provider.diagnostics

    def external_at(self, line: int) -> AnalyzedExternal | None:
        """
        Find the external whose declaration covers a 0-indexed line.

        A declaration covers the lines from its keyword up to, but not
        including, the next declaration's keyword.
        """
        found: AnalyzedExternal | None = None
        for external in self.externals:
            if external.decl.line - 1 > line:
                break
            found = external
        if found is None:
            return None
        if line > found.decl.line - 1 + found.decl.res_type.count("\n") + 1:
            return None
        return found

    def get_hover(self, line: int, character: int) -> types.Hover | None:
        """
        Get hover information at a position.

        Args:
            line: 0-indexed line number
            character: 0-indexed character position

        Returns:
            Hover information or None
        """
        external = self.external_at(line)
        if external is None:
            return None

        decl = external.decl
        target = BindingTarget.from_decl(decl)
        origin = f'module `"{target.module}"`' if target.module else "`globalThis`"
        parts = [
            f"**external {decl.name}**",
            f"```typescript\n{external.typescript}\n```",
            f"Binds to `{'.'.join(target.segments)}` from {origin}",
        ]
        if external.translation.warnings:
            parts.append("\n".join(f"- {message}" for message in external.translation.warnings))

        return types.Hover(
            contents=types.MarkupContent(
                kind=types.MarkupKind.Markdown,
                value="\n\n".join(parts),
            ),
            range=keyword_range(decl),
        )

    def get_document_symbols(self) -> list[types.DocumentSymbol]:
        """List every external as a document symbol."""
        symbols: list[types.DocumentSymbol] = []
        for external in self.externals:
            decl = external.decl
            is_function = isinstance(external.translation.descriptor, Function)
            symbols.append(
                types.DocumentSymbol(
                    name=decl.name,
                    detail=external.typescript,
                    kind=types.SymbolKind.Function if is_function else types.SymbolKind.Variable,
                    range=keyword_range(decl),
                    selection_range=keyword_range(decl),
                )
            )
        return symbols
