"""
Error types and source location tracking for bindcheck.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed character offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class BindCheckError(Exception):
    """Base exception for all bindcheck errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"[{self.location}] {self.message}"
        return self.message


class ConfigError(BindCheckError):
    """Raised when rescript.json exists but cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        config_path: Optional[str] = None,
    ) -> None:
        self.config_path = config_path
        super().__init__(message, location)


class OracleError(BindCheckError):
    """
    Raised when the assignability oracle cannot produce a verdict.

    This error is raised when:
    - The TypeScript compiler executable cannot be found
    - The compiler process exits without producing parsable output
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        command: Optional[list[str]] = None,
        output: str = "",
    ) -> None:
        """
        Initialize the error.

        Args:
            message: Error message
            location: Source location where the error occurred
            command: The oracle command line that failed
            output: Captured process output, if any
        """
        self.command = command or []
        self.output = output
        super().__init__(message, location)

    def _format_message(self) -> str:
        parts = [super()._format_message()]
        if self.command:
            parts.append(f"\n  Command: {' '.join(self.command)}")
        if self.output:
            parts.append(f"\n  Output: {self.output.strip()}")
        return "".join(parts)


class OracleOutputError(OracleError):
    """Raised when the oracle ran but its output says nothing about the bindings."""
