"""
Bindings check orchestration.

Runs the whole pipeline for one project:

    discover -> scan -> translate -> oracle -> diagnostics + summary

Nothing in here raises for problems with the checked project itself. A
missing or broken rescript.json, an unreadable source file, or an oracle
that cannot run all end up as error diagnostics in the returned result.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from bindcheck.compiler.discovery import (
    CONFIG_FILENAMES,
    collect_source_files,
    find_project_config,
    parse_externals_from_file,
)
from bindcheck.compiler.externals import ExternalDecl
from bindcheck.compiler.oracle import AssignabilityOracle, OracleVerdict, TscOracle
from bindcheck.compiler.synthesis import OracleRequest, build_requests
from bindcheck.config import CheckOptions
from bindcheck.utils.diagnostics import (
    CheckResult,
    Diagnostic,
    ErrorCode,
    error,
    summarize_diagnostics,
    warning,
)
from bindcheck.utils.errors import ConfigError, OracleError, OracleOutputError

logger = logging.getLogger(__name__)

CONFIG_NOT_FOUND_MESSAGE = "rescript.json not found in this directory tree."


def check_bindings(
    options: Optional[CheckOptions] = None,
    oracle: Optional[AssignabilityOracle] = None,
) -> CheckResult:
    """
    Check every external declaration of the project containing the start directory.

    Args:
        options: Run options; read from the environment when None
        oracle: Oracle to consult; a TscOracle built from options when None

    Returns:
        Diagnostics in declaration order together with summary counts
    """
    options = options or CheckOptions.from_env()
    start_dir = options.start_dir()

    try:
        config = find_project_config(start_dir)
    except ConfigError as e:
        diagnostic = error(e.message, e.config_path or str(start_dir), code=ErrorCode.E0102)
        return CheckResult(summarize_diagnostics([diagnostic], 0), [diagnostic])

    if config is None:
        logger.info("No %s found above %s", " or ".join(CONFIG_FILENAMES), start_dir)
        diagnostic = error(CONFIG_NOT_FOUND_MESSAGE, str(start_dir), code=ErrorCode.E0101)
        return CheckResult(summarize_diagnostics([diagnostic], 0), [diagnostic])

    logger.info("Checking project %s", config.root_dir)
    externals, diagnostics = scan_project_files(config.source_dirs)

    if oracle is None:
        oracle = TscOracle(command=options.tsc, tsconfig=options.tsconfig, timeout=options.timeout)
    diagnostics.extend(verify_externals(config.root_dir, externals, oracle))

    return CheckResult(summarize_diagnostics(diagnostics, len(externals)), diagnostics)


def scan_project_files(source_dirs: Sequence[Path]) -> tuple[list[ExternalDecl], list[Diagnostic]]:
    """
    Scan the selected source files, reporting unreadable ones.

    Returns:
        The declarations found and one E0103 diagnostic per file that
        could not be read
    """
    externals: list[ExternalDecl] = []
    diagnostics: list[Diagnostic] = []
    for path in collect_source_files(source_dirs):
        try:
            found = parse_externals_from_file(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping %s: %s", path, e)
            diagnostics.append(error(f"Cannot read source file: {e}", str(path), code=ErrorCode.E0103))
            continue
        logger.debug("Scanned %s: %d external(s)", path, len(found))
        externals.extend(found)
    return externals, diagnostics


def verify_externals(
    root_dir: Path,
    externals: Sequence[ExternalDecl],
    oracle: AssignabilityOracle,
) -> list[Diagnostic]:
    """
    Translate each declaration's type and ask the oracle about it.

    Translation warnings come first for each declaration, followed by its
    error if the oracle rejected it. An oracle that cannot run at all is
    reported once, after the warnings.
    """
    if not externals:
        return []

    requests = build_requests(externals)
    try:
        verdicts = oracle.check(root_dir, requests)
    except OracleError as e:
        logger.error("Assignability oracle failed: %s", e)
        reported = [d for request in requests for d in _warning_diagnostics(request)]
        code = ErrorCode.E0202 if isinstance(e, OracleOutputError) else ErrorCode.E0201
        reported.append(error(e.message, str(root_dir), code=code))
        return reported

    diagnostics: list[Diagnostic] = []
    for request, verdict in zip(requests, verdicts):
        diagnostics.extend(_warning_diagnostics(request))
        failure = _verdict_diagnostic(request.decl, verdict)
        if failure is not None:
            diagnostics.append(failure)
    return diagnostics


def _warning_diagnostics(request: OracleRequest) -> list[Diagnostic]:
    decl = request.decl
    return [
        warning(f"{decl.name}: {message}", decl.file, decl.line, decl.column, code=ErrorCode.W0101)
        for message in request.warnings
    ]


def _verdict_diagnostic(decl: ExternalDecl, verdict: OracleVerdict) -> Optional[Diagnostic]:
    if verdict.assignable:
        return None

    if not verdict.resolved:
        message = f"Failed to resolve TypeScript types for external {decl.name}"
        if verdict.detail:
            message = f"{message}: {verdict.detail}"
        return error(message, decl.file, decl.line, decl.column, code=ErrorCode.E0302)

    if verdict.actual is not None:
        message = f"Type mismatch for {decl.name}: expected {verdict.expected}, got {verdict.actual}."
    else:
        message = f"Type mismatch for {decl.name}: {verdict.detail or 'not assignable'}"
    return error(message, decl.file, decl.line, decl.column, code=ErrorCode.E0301)
