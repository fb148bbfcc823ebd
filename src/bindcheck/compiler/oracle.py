"""
Assignability oracles.

An oracle decides, for each declaration, whether the runtime value named by
its binding target is assignable to the type the declaration claims. The
decision is delegated: TscOracle runs the TypeScript compiler over a
synthetic program and reads its verdicts back from the error output.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shlex
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from bindcheck.compiler.synthesis import (
    LineRole,
    OracleRequest,
    SyntheticProgram,
    build_synthetic_program,
)
from bindcheck.config import DEFAULT_TIMEOUT, TSC_ENV_VAR
from bindcheck.utils.errors import OracleError, OracleOutputError

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".bindcheck-"

DEFAULT_COMPILER_OPTIONS: dict[str, Any] = {
    "target": "ES2022",
    "module": "ESNext",
    "moduleResolution": "Bundler",
    "lib": ["ES2022", "DOM"],
    "strict": True,
    "skipLibCheck": True,
    "esModuleInterop": True,
}

# Always applied on top of the project's own options.
PROBE_COMPILER_OPTIONS: dict[str, Any] = {
    "noEmit": True,
    "noUnusedLocals": False,
    "noUnusedParameters": False,
}

# file(line,col): error TS2322: message
_TSC_ERROR = re.compile(
    r"^(?P<file>.+?)\((?P<line>\d+),(?P<column>\d+)\): error (?P<code>TS\d+): (?P<message>.*)$"
)
_NOT_ASSIGNABLE = re.compile(r"^Type '(?P<actual>.*)' is not assignable to type '(?P<expected>.*)'\.?$")


# =============================================================================
# Verdicts
# =============================================================================


@dataclass(frozen=True, slots=True)
class OracleVerdict:
    """
    The oracle's answer for one declaration.

    Attributes:
        assignable: True when the actual value fits the expected type
        resolved: False when the binding target could not be found at all
        expected: The expected type as the oracle understood it
        actual: The actual type, when the oracle reported one
        detail: The oracle's own explanation of a failure
    """

    assignable: bool
    resolved: bool = True
    expected: Optional[str] = None
    actual: Optional[str] = None
    detail: Optional[str] = None


ASSIGNABLE = OracleVerdict(assignable=True)


class AssignabilityOracle(ABC):
    """Base class for assignability oracles."""

    @abstractmethod
    def check(self, root_dir: Path, requests: Sequence[OracleRequest]) -> list[OracleVerdict]:
        """
        Decide assignability for a batch of declarations.

        Args:
            root_dir: Project root, used to resolve imported modules
            requests: One request per declaration

        Returns:
            One verdict per request, in request order

        Raises:
            OracleError: If no verdicts can be produced at all
        """
        ...


# =============================================================================
# TypeScript Compiler Oracle
# =============================================================================


@dataclass(frozen=True, slots=True)
class CompilerMessage:
    """One error line from tsc output."""

    file: str
    line: int
    column: int
    code: str
    message: str


def parse_tsc_output(output: str) -> list[CompilerMessage]:
    """Pick the error lines out of ``tsc --pretty false`` output."""
    messages: list[CompilerMessage] = []
    for raw_line in output.splitlines():
        match = _TSC_ERROR.match(raw_line.strip())
        if match is None:
            continue
        messages.append(
            CompilerMessage(
                file=match.group("file"),
                line=int(match.group("line")),
                column=int(match.group("column")),
                code=match.group("code"),
                message=match.group("message").strip(),
            )
        )
    return messages


def resolve_tsc_command(root_dir: Path, configured: Optional[str] = None) -> list[str]:
    """
    Work out how to invoke the TypeScript compiler.

    Order: the configured command, ``$BINDCHECK_TSC``, the project's own
    ``node_modules/.bin/tsc``, then ``tsc`` on PATH.

    Raises:
        OracleError: If none of them is available
    """
    command = configured or os.environ.get(TSC_ENV_VAR)
    if command:
        return shlex.split(command)

    local = root_dir / "node_modules" / ".bin" / "tsc"
    if local.is_file():
        return [str(local)]

    found = shutil.which("tsc")
    if found:
        return [found]

    raise OracleError(
        "TypeScript compiler not found. Install typescript in the project "
        f"or set {TSC_ENV_VAR}.",
        command=["tsc"],
    )


class TscOracle(AssignabilityOracle):
    """
    Oracle backed by the TypeScript compiler.

    The synthetic program and a generated tsconfig are written as hidden
    files into the project root so that module specifiers resolve against
    the project's node_modules; both are removed afterwards.

    Usage:
        oracle = TscOracle(tsconfig=Path("tsconfig.json"))
        verdicts = oracle.check(project_root, requests)
    """

    def __init__(
        self,
        command: Optional[str] = None,
        tsconfig: Optional[Path] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the oracle.

        Args:
            command: Compiler command line; resolved automatically when None
            tsconfig: Project tsconfig to extend; defaults to <root>/tsconfig.json
            timeout: Seconds to wait for the compiler
        """
        self.command = command
        self.tsconfig = tsconfig
        self.timeout = timeout

    def check(self, root_dir: Path, requests: Sequence[OracleRequest]) -> list[OracleVerdict]:
        if not requests:
            return []

        program = build_synthetic_program(requests)
        command = resolve_tsc_command(root_dir, self.command)
        output, returncode, program_name = self._run(root_dir, command, program)

        messages = parse_tsc_output(output)
        return self._collect_verdicts(program, program_name, messages, output, returncode, command)

    # -------------------------------------------------------------------------
    # Process handling
    # -------------------------------------------------------------------------

    def _compiler_config(self, root_dir: Path, program_name: str) -> dict[str, Any]:
        config: dict[str, Any] = {
            "files": [program_name],
            "include": [],
        }
        base = self.tsconfig or root_dir / "tsconfig.json"
        if base.is_file():
            config["extends"] = str(base.resolve())
            config["compilerOptions"] = dict(PROBE_COMPILER_OPTIONS)
        else:
            config["compilerOptions"] = {**DEFAULT_COMPILER_OPTIONS, **PROBE_COMPILER_OPTIONS}
        return config

    def _run(
        self, root_dir: Path, command: list[str], program: SyntheticProgram
    ) -> tuple[str, int, str]:
        created: list[Path] = []
        try:
            try:
                program_path = self._write_temp(root_dir, ".ts", program.source_text, created)
                config_text = json.dumps(self._compiler_config(root_dir, program_path.name), indent=2)
                config_path = self._write_temp(root_dir, ".json", config_text, created)
            except OSError as e:
                raise OracleError(f"Cannot write temporary files in {root_dir}: {e}") from e

            full_command = [*command, "-p", str(config_path), "--noEmit", "--pretty", "false"]
            logger.debug("Running %s", " ".join(full_command))
            try:
                completed = subprocess.run(
                    full_command,
                    cwd=root_dir,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise OracleError(
                    f"TypeScript compiler not found: {command[0]}", command=full_command
                ) from e
            except subprocess.TimeoutExpired as e:
                raise OracleError(
                    f"TypeScript compiler timed out after {self.timeout:g}s", command=full_command
                ) from e
        finally:
            for path in created:
                path.unlink(missing_ok=True)

        output = (completed.stdout or "") + (completed.stderr or "")
        return output, completed.returncode, program_path.name

    @staticmethod
    def _write_temp(root_dir: Path, suffix: str, text: str, created: list[Path]) -> Path:
        """Write a hidden temporary file into root_dir, recording it in ``created``."""
        fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=suffix, dir=root_dir)
        path = Path(name)
        created.append(path)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    # -------------------------------------------------------------------------
    # Verdicts
    # -------------------------------------------------------------------------

    def _collect_verdicts(
        self,
        program: SyntheticProgram,
        program_name: str,
        messages: list[CompilerMessage],
        output: str,
        returncode: int,
        command: list[str],
    ) -> list[OracleVerdict]:
        verdicts = [ASSIGNABLE] * len(program.entries)
        mapped = 0

        for message in messages:
            if Path(message.file).name != program_name:
                logger.debug("Ignoring compiler error outside the probe: %s", message.message)
                continue
            located = program.locate(message.line)
            if located is None:
                continue
            index, role = located
            mapped += 1
            entry = program.entries[index]
            current = verdicts[index]

            if not current.resolved or (role == LineRole.PROBE and not current.assignable):
                continue
            if role == LineRole.PROBE:
                mismatch = _NOT_ASSIGNABLE.match(message.message)
                verdicts[index] = OracleVerdict(
                    assignable=False,
                    expected=entry.expected_type,
                    actual=mismatch.group("actual") if mismatch else None,
                    detail=message.message,
                )
            else:
                verdicts[index] = OracleVerdict(
                    assignable=False,
                    resolved=False,
                    expected=entry.expected_type,
                    detail=message.message,
                )

        if returncode != 0 and mapped == 0:
            raise OracleOutputError(
                "TypeScript compiler failed without reporting on the checked bindings",
                command=command,
                output=output,
            )
        return verdicts
