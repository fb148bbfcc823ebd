"""
bindcheck Utilities Package.

Common utilities for error handling, source locations, and diagnostics.
"""

from bindcheck.utils.diagnostics import (
    CheckResult,
    CheckSummary,
    Diagnostic,
    DiagnosticLevel,
    ErrorCode,
    summarize_diagnostics,
)
from bindcheck.utils.errors import (
    BindCheckError,
    ConfigError,
    OracleError,
    OracleOutputError,
    SourceLocation,
)

__all__ = [
    # Errors
    "BindCheckError",
    "ConfigError",
    "OracleError",
    "OracleOutputError",
    "SourceLocation",
    # Diagnostics
    "ErrorCode",
    "DiagnosticLevel",
    "Diagnostic",
    "CheckSummary",
    "CheckResult",
    "summarize_diagnostics",
]
