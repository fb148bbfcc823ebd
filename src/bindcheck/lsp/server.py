"""
bindcheck Language Server Protocol (LSP) Server.

Implements a small LSP server for ReScript binding files using pygls. It
provides:

- Document synchronization (open, change, save, close)
- Diagnostics for types that degrade to unknown
- Hover showing the TypeScript type an external is checked against
- Document symbols (outline of externals)

Usage:
    # Start the server in stdio mode (for IDE integration)
    bindcheck-lsp

    # Start in TCP mode (for debugging)
    bindcheck-lsp --tcp --port 2088
"""

import logging

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from bindcheck import __version__
from bindcheck.lsp.analyzer import DocumentAnalyzer

logger = logging.getLogger("bindcheck-lsp")


class BindCheckLanguageServer(LanguageServer):
    """
    Language Server Protocol implementation for bindcheck.

    Keeps one DocumentAnalyzer per open document and republishes its
    diagnostics whenever the document changes.
    """

    def __init__(self) -> None:
        super().__init__(
            name="bindcheck-lsp",
            version=f"v{__version__}",
        )

        # uri -> analyzer
        self._analyzers: dict[str, DocumentAnalyzer] = {}

        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register all LSP request and notification handlers."""
        server = self

        # Document synchronization
        @self.feature(types.TEXT_DOCUMENT_DID_OPEN)
        def did_open(params: types.DidOpenTextDocumentParams) -> None:
            server._on_did_open(params)

        @self.feature(types.TEXT_DOCUMENT_DID_CHANGE)
        def did_change(params: types.DidChangeTextDocumentParams) -> None:
            server._on_did_change(params)

        @self.feature(types.TEXT_DOCUMENT_DID_SAVE)
        def did_save(params: types.DidSaveTextDocumentParams) -> None:
            server._on_did_save(params)

        @self.feature(types.TEXT_DOCUMENT_DID_CLOSE)
        def did_close(params: types.DidCloseTextDocumentParams) -> None:
            server._on_did_close(params)

        @self.feature(types.TEXT_DOCUMENT_HOVER)
        def hover(params: types.HoverParams) -> types.Hover | None:
            return server._on_hover(params)

        @self.feature(types.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
        def document_symbol(
            params: types.DocumentSymbolParams,
        ) -> list[types.DocumentSymbol] | None:
            return server._on_document_symbol(params)

    def _get_analyzer(self, uri: str) -> DocumentAnalyzer | None:
        return self._analyzers.get(uri)

    def _analyze_document(self, uri: str, text: str) -> DocumentAnalyzer:
        """Analyze a document and cache the result."""
        analyzer = DocumentAnalyzer(text, uri)
        analyzer.analyze()
        self._analyzers[uri] = analyzer
        return analyzer

    def _publish_diagnostics(self, uri: str, diagnostics: list[types.Diagnostic]) -> None:
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    # =========================================================================
    # Document Synchronization
    # =========================================================================

    def _on_did_open(self, params: types.DidOpenTextDocumentParams) -> None:
        """Handle document open notification."""
        document = params.text_document
        logger.info("Document opened: %s", document.uri)

        analyzer = self._analyze_document(document.uri, document.text)
        self._publish_diagnostics(document.uri, analyzer.diagnostics)

    def _on_did_change(self, params: types.DidChangeTextDocumentParams) -> None:
        """Handle document change notification."""
        uri = params.text_document.uri

        doc = self.workspace.get_text_document(uri)
        if doc is None:
            return

        logger.debug("Document changed: %s", uri)

        analyzer = self._analyze_document(uri, doc.source)
        self._publish_diagnostics(uri, analyzer.diagnostics)

    def _on_did_save(self, params: types.DidSaveTextDocumentParams) -> None:
        """Handle document save notification."""
        uri = params.text_document.uri
        logger.info("Document saved: %s", uri)

        doc = self.workspace.get_text_document(uri)
        if doc:
            analyzer = self._analyze_document(uri, doc.source)
            self._publish_diagnostics(uri, analyzer.diagnostics)

    def _on_did_close(self, params: types.DidCloseTextDocumentParams) -> None:
        """Handle document close notification."""
        uri = params.text_document.uri
        logger.info("Document closed: %s", uri)

        self._analyzers.pop(uri, None)
        self._publish_diagnostics(uri, [])

    # =========================================================================
    # Queries
    # =========================================================================

    def _on_hover(self, params: types.HoverParams) -> types.Hover | None:
        """Handle hover request."""
        analyzer = self._get_analyzer(params.text_document.uri)
        if analyzer is None:
            return None
        return analyzer.get_hover(params.position.line, params.position.character)

    def _on_document_symbol(
        self, params: types.DocumentSymbolParams
    ) -> list[types.DocumentSymbol] | None:
        """Handle document symbols request (for outline view)."""
        analyzer = self._get_analyzer(params.text_document.uri)
        if analyzer is None:
            return None
        return analyzer.get_document_symbols()


def create_server() -> BindCheckLanguageServer:
    """Create and configure a bindcheck language server instance."""
    server = BindCheckLanguageServer()

    @server.feature(types.INITIALIZED)
    def on_initialized(
        params: types.InitializedParams,  # noqa: ARG001
    ) -> None:
        logger.info("bindcheck Language Server initialized")

    @server.feature(types.SHUTDOWN)
    def on_shutdown(
        params: None,  # noqa: ARG001
    ) -> None:
        logger.info("Shutting down bindcheck Language Server")

    return server


def main() -> None:
    """
    Main entry point for the bindcheck language server.

    Starts the server in stdio mode for IDE integration.
    """
    import argparse

    parser = argparse.ArgumentParser(
        description="bindcheck Language Server",
        prog="bindcheck-lsp",
    )
    parser.add_argument(
        "--tcp",
        action="store_true",
        help="Start server in TCP mode instead of stdio",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to in TCP mode (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=2088,
        help="Port to listen on in TCP mode (default: 2088)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Logging level (default: info)",
    )

    args = parser.parse_args()

    # stdout carries the protocol in stdio mode, so logs go to stderr.
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    server = create_server()

    if args.tcp:
        logger.info("Starting bindcheck LSP in TCP mode on %s:%s", args.host, args.port)
        server.start_tcp(args.host, args.port)
    else:
        logger.info("Starting bindcheck LSP in stdio mode")
        server.start_io()


if __name__ == "__main__":
    main()
