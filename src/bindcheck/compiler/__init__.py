"""
bindcheck Compiler Package.

This package contains the components that turn ReScript sources into
binding verdicts:
- Lexer: Tokenizes ReScript source code
- ExternalsParser: Extracts attributed external declarations from tokens
- TypeTranslator: Converts ReScript type expressions into TypeDescriptors
- Discovery: Locates the project and the source files to scan
- Synthesis: Prepares oracle requests and the TypeScript probe program
- TscOracle: Delegates assignability decisions to the TypeScript compiler
- check_bindings: Runs the whole pipeline for one project
"""

from bindcheck.compiler.checker import check_bindings, scan_project_files, verify_externals
from bindcheck.compiler.discovery import (
    ProjectConfig,
    collect_external_decls,
    collect_source_files,
    find_project_config,
    list_source_files,
)
from bindcheck.compiler.externals import (
    EMPTY_ATTRIBUTES,
    ExternalAttributes,
    ExternalDecl,
    ExternalsParser,
    scan_externals,
)
from bindcheck.compiler.lexer import Lexer, tokenize
from bindcheck.compiler.oracle import (
    AssignabilityOracle,
    OracleVerdict,
    TscOracle,
)
from bindcheck.compiler.synthesis import (
    BindingTarget,
    OracleRequest,
    TypeScriptRenderer,
    build_requests,
    build_synthetic_program,
    render_typescript,
)
from bindcheck.compiler.tokens import Token, TokenType
from bindcheck.compiler.type_nodes import (
    Function,
    Generic,
    Primitive,
    Record,
    Tuple,
    TypeDescriptor,
    TypeVisitor,
    Unknown,
)
from bindcheck.compiler.type_translator import (
    TranslationResult,
    TypeTranslator,
    translate_type,
)

__all__ = [
    # Lexing and scanning
    "Lexer",
    "tokenize",
    "Token",
    "TokenType",
    "ExternalAttributes",
    "EMPTY_ATTRIBUTES",
    "ExternalDecl",
    "ExternalsParser",
    "scan_externals",
    # Types
    "TypeDescriptor",
    "TypeVisitor",
    "Primitive",
    "Function",
    "Tuple",
    "Record",
    "Generic",
    "Unknown",
    "TranslationResult",
    "TypeTranslator",
    "translate_type",
    # Discovery
    "ProjectConfig",
    "find_project_config",
    "list_source_files",
    "collect_source_files",
    "collect_external_decls",
    # Oracle
    "BindingTarget",
    "OracleRequest",
    "TypeScriptRenderer",
    "render_typescript",
    "build_requests",
    "build_synthetic_program",
    "AssignabilityOracle",
    "OracleVerdict",
    "TscOracle",
    # Orchestration
    "check_bindings",
    "scan_project_files",
    "verify_externals",
]
