"""
Diagnostics produced while checking external bindings.

A diagnostic is a flat, JSON-friendly record pointing at the `external`
keyword of the declaration it concerns. The record shape is stable so that
editor integrations and CI scripts can consume `--json` output directly:

    {"level": "error", "message": "...", "file": "src/Foo.res",
     "line": 3, "column": 1, "code": "E0301"}

Example pretty output:
    src/Foo.res:3:1 ERROR Type mismatch for bar: expected number, got string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional


# =============================================================================
# Error Codes Catalog
# =============================================================================


class ErrorCode:
    """
    Centralized catalog of diagnostic codes.

    Codes are organized by category:
    - E01xx: Project discovery errors
    - E02xx: Oracle errors
    - E03xx: Binding errors
    - W01xx: Warnings
    """

    # Project errors: E01xx
    E0101 = "E0101"  # rescript.json not found
    E0102 = "E0102"  # rescript.json unreadable
    E0103 = "E0103"  # source file unreadable

    # Oracle errors: E02xx
    E0201 = "E0201"  # oracle unavailable
    E0202 = "E0202"  # oracle output unusable

    # Binding errors: E03xx
    E0301 = "E0301"  # type mismatch
    E0302 = "E0302"  # binding could not be resolved

    # Warnings: W01xx
    W0101 = "W0101"  # type expression degraded to unknown


# =============================================================================
# Diagnostic Types
# =============================================================================


class DiagnosticLevel(Enum):
    """Severity level of a diagnostic message."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def color_code(self) -> str:
        """Get ANSI color code for this level."""
        colors = {
            DiagnosticLevel.ERROR: "\033[91m",  # Red
            DiagnosticLevel.WARNING: "\033[93m",  # Yellow
            DiagnosticLevel.INFO: "\033[96m",  # Cyan
        }
        return colors.get(self, "")


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """
    A single diagnostic attached to a source position.

    Attributes:
        level: Severity level
        message: Human-readable message
        file: Path of the file the diagnostic points into
        line: 1-indexed line number
        column: 1-indexed column number
        code: Optional code from the ErrorCode catalog
    """

    level: DiagnosticLevel
    message: str
    file: str
    line: int = 1
    column: int = 1
    code: Optional[str] = None

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stable JSON record shape."""
        record: dict[str, Any] = {
            "level": self.level.value,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "column": self.column,
        }
        if self.code:
            record["code"] = self.code
        return record

    def render(self, use_color: bool = True, source: Optional[str] = None) -> str:
        """
        Render this diagnostic as a formatted string.

        Args:
            use_color: Whether to use ANSI color codes
            source: The file's source text, used to show the offending line

        Returns:
            A one-line summary, followed by a source excerpt when available
        """
        reset = "\033[0m" if use_color else ""
        bold = "\033[1m" if use_color else ""
        blue = "\033[94m" if use_color else ""
        level_color = self.level.color_code() if use_color else ""

        level_str = self.level.value.upper()
        if self.code:
            level_str = f"{level_str}[{self.code}]"
        lines = [f"{self.location} {level_color}{bold}{level_str}{reset} {self.message}"]

        if source is not None:
            source_lines = source.splitlines()
            if 1 <= self.line <= len(source_lines):
                lines.append(f"{blue}{self.line:4} |{reset} {source_lines[self.line - 1]}")
                padding = " " * (self.column - 1)
                lines.append(f"     {blue}|{reset} {padding}{level_color}^{reset}")

        return "\n".join(lines)


def error(message: str, file: str, line: int = 1, column: int = 1,
          code: Optional[str] = None) -> Diagnostic:
    """Create an error-level diagnostic."""
    return Diagnostic(DiagnosticLevel.ERROR, message, file, line, column, code)


def warning(message: str, file: str, line: int = 1, column: int = 1,
            code: Optional[str] = None) -> Diagnostic:
    """Create a warning-level diagnostic."""
    return Diagnostic(DiagnosticLevel.WARNING, message, file, line, column, code)


# =============================================================================
# Check Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class CheckSummary:
    """Aggregate counts for one check run."""

    externals: int = 0
    errors: int = 0
    warnings: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "externals": self.externals,
            "errors": self.errors,
            "warnings": self.warnings,
        }


@dataclass
class CheckResult:
    """
    The outcome of checking every external in a project.

    Attributes:
        summary: Aggregate counts
        diagnostics: All diagnostics, in declaration order
    """

    summary: CheckSummary
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return self.summary.errors > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def summarize_diagnostics(diagnostics: Iterable[Diagnostic], externals: int) -> CheckSummary:
    """Count error- and warning-level diagnostics."""
    errors = 0
    warnings = 0
    for diagnostic in diagnostics:
        if diagnostic.level == DiagnosticLevel.ERROR:
            errors += 1
        elif diagnostic.level == DiagnosticLevel.WARNING:
            warnings += 1
    return CheckSummary(externals=externals, errors=errors, warnings=warnings)
