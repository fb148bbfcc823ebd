"""
Entry point for running the bindcheck LSP server as a module.

Usage:
    python -m bindcheck.lsp
    python -m bindcheck.lsp --tcp --port 2088
"""

from bindcheck.lsp.server import main

if __name__ == "__main__":
    main()
