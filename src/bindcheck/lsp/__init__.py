"""
bindcheck Language Server Protocol (LSP) implementation.

Provides editor support for ReScript binding files:
- Warnings for external types that cannot be checked precisely
- Hover with the TypeScript type each external is checked against
- Document outline of externals

Usage:
    # Start the LSP server (stdio mode)
    bindcheck-lsp

    # Or run as a module
    python -m bindcheck.lsp
"""

from bindcheck.lsp.server import BindCheckLanguageServer, create_server, main

__all__ = [
    "BindCheckLanguageServer",
    "create_server",
    "main",
]
