"""
bindcheck - Verify ReScript external bindings against TypeScript declarations.

bindcheck scans a ReScript project for ``external`` declarations, translates
their declared types into structural descriptors, and asks the TypeScript
compiler whether the runtime values they bind to actually have those types.
"""

from bindcheck.compiler import check_bindings, scan_externals, translate_type
from bindcheck.compiler.lexer import Lexer
from bindcheck.config import CheckOptions

__version__ = "0.1.0"
__all__ = [
    "check_bindings",
    "scan_externals",
    "translate_type",
    "CheckOptions",
    "Lexer",
]
