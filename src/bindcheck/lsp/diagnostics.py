"""
Diagnostic generation for bindcheck LSP.

Editors get the checks that need nothing but the open document: every
external is scanned and its type translated, and each translation warning
becomes an LSP warning on the ``external`` keyword. Oracle verdicts need
the whole project and the TypeScript compiler, so they stay with the CLI.
"""

from lsprotocol import types

from bindcheck.compiler.externals import ExternalDecl, scan_externals
from bindcheck.compiler.type_translator import TranslationResult, TypeTranslator
from bindcheck.utils.diagnostics import ErrorCode

DIAGNOSTIC_SOURCE = "bindcheck"
KEYWORD_LENGTH = len("external")


def keyword_range(decl: ExternalDecl) -> types.Range:
    """LSP range (0-indexed) of a declaration's ``external`` keyword."""
    line = max(0, decl.line - 1)
    character = max(0, decl.column - 1)
    return types.Range(
        start=types.Position(line=line, character=character),
        end=types.Position(line=line, character=character + KEYWORD_LENGTH),
    )


class DiagnosticProvider:
    """
    Generates LSP diagnostics from ReScript source code.

    Usage:
        provider = DiagnosticProvider(source, "file:///src/Bindings.res")
        diagnostics = provider.get_diagnostics()
    """

    def __init__(self, source: str, uri: str) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The ReScript source code to analyze
            uri: The document URI for location information
        """
        self.source = source
        self.uri = uri
        self._diagnostics: list[types.Diagnostic] = []

    @property
    def diagnostics(self) -> list[types.Diagnostic]:
        """Diagnostics added so far."""
        return list(self._diagnostics)

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the document.

        Returns:
            One warning per translation warning, in declaration order
        """
        self._diagnostics = []
        translator = TypeTranslator()
        for decl in scan_externals(self.source, self.uri):
            self.add_translation_warnings(decl, translator.translate(decl.res_type))
        return self._diagnostics

    def add_translation_warnings(self, decl: ExternalDecl, result: TranslationResult) -> None:
        """Add one LSP warning per translation warning of ``decl``."""
        for message in result.warnings:
            self._diagnostics.append(
                types.Diagnostic(
                    range=keyword_range(decl),
                    message=f"{decl.name}: {message}",
                    severity=types.DiagnosticSeverity.Warning,
                    source=DIAGNOSTIC_SOURCE,
                    code=ErrorCode.W0101,
                )
            )


def get_diagnostics_for_document(source: str, uri: str) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a document.

    Args:
        source: The ReScript source code
        uri: The document URI

    Returns:
        List of LSP diagnostics
    """
    provider = DiagnosticProvider(source, uri)
    return provider.get_diagnostics()
