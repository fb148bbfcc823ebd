"""
ReScript project discovery.

Locates the project configuration, resolves its source directories and
lists the ReScript files to scan.

The discovery rules are:
- The project root is the nearest ancestor directory (including the start
  directory) holding ``rescript.json`` (or the legacy ``bsconfig.json``)
- ``sources`` may be a string, a ``{"dir": ..., "subdirs": ...}`` object,
  or a list of either; ``subdirs: true`` or ``"recurse"`` pulls in every
  nested directory
- Hidden directories and ``node_modules`` are never entered
- When ``Foo.res`` and ``Foo.resi`` both exist, only the signature file
  ``Foo.resi`` is scanned

Example:
    config = find_project_config(Path.cwd())
    if config is not None:
        externals = collect_external_decls(config.source_dirs)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from bindcheck.compiler.externals import ExternalDecl, scan_externals
from bindcheck.utils.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("rescript.json", "bsconfig.json")
IMPLEMENTATION_EXTENSION = ".res"
SIGNATURE_EXTENSION = ".resi"
SOURCE_EXTENSIONS = (IMPLEMENTATION_EXTENSION, SIGNATURE_EXTENSION)
IGNORED_DIRECTORIES = frozenset({"node_modules"})


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class ProjectConfig:
    """
    A located ReScript project.

    Attributes:
        root_dir: Directory containing the configuration file
        config_path: Absolute path to the configuration file
        source_dirs: Source directories, deduplicated, in declaration order
    """

    root_dir: Path
    config_path: Path
    source_dirs: list[Path] = field(default_factory=list)


def _is_ignored(path: Path) -> bool:
    return path.name.startswith(".") or path.name in IGNORED_DIRECTORIES


# =============================================================================
# Configuration
# =============================================================================


def find_project_config(start_dir: Path | str) -> Optional[ProjectConfig]:
    """
    Walk upward from ``start_dir`` looking for a project configuration.

    Args:
        start_dir: Directory to start searching from

    Returns:
        The located project, or None if the filesystem root is reached

    Raises:
        ConfigError: If a configuration file exists but is not valid JSON
    """
    current = Path(start_dir).resolve()
    while True:
        for filename in CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                logger.debug("Found project configuration %s", candidate)
                return ProjectConfig(
                    root_dir=current,
                    config_path=candidate,
                    source_dirs=read_source_dirs(candidate, current),
                )
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _load_config(config_path: Path) -> dict[str, Any]:
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path.name}: {e}", config_path=str(config_path)) from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"Invalid JSON in {config_path.name}: {e.msg} (line {e.lineno}, column {e.colno})",
            config_path=str(config_path),
        ) from e
    return data if isinstance(data, dict) else {}


def read_source_dirs(config_path: Path, root_dir: Path) -> list[Path]:
    """
    Resolve the ``sources`` entry of a project configuration.

    Args:
        config_path: Path to rescript.json
        root_dir: Directory the source entries are relative to

    Returns:
        Source directories, without duplicates, in first-seen order
    """
    sources = _load_config(config_path).get("sources", [])
    if not isinstance(sources, list):
        sources = [sources]

    dirs: list[Path] = []
    for entry in sources:
        if isinstance(entry, str):
            dirs.append(root_dir / entry)
            continue
        if isinstance(entry, dict) and isinstance(entry.get("dir"), str):
            full_dir = root_dir / entry["dir"]
            dirs.append(full_dir)
            if entry.get("subdirs") in (True, "recurse"):
                dirs.extend(list_subdirs(full_dir))

    return list(dict.fromkeys(dirs))


# =============================================================================
# File System Traversal
# =============================================================================


def list_subdirs(root_dir: Path) -> list[Path]:
    """Every nested directory below ``root_dir``, depth first, hidden ones skipped."""
    if not root_dir.is_dir():
        return []
    results: list[Path] = []
    for entry in sorted(root_dir.iterdir()):
        if not entry.is_dir() or _is_ignored(entry):
            continue
        results.append(entry)
        results.extend(list_subdirs(entry))
    return results


def list_source_files(root_dir: Path) -> list[Path]:
    """
    Recursively list ReScript source files below ``root_dir``.

    A directory that does not exist contributes no files.
    """
    if not root_dir.is_dir():
        logger.debug("Source directory %s does not exist", root_dir)
        return []
    results: list[Path] = []
    for entry in sorted(root_dir.iterdir()):
        if _is_ignored(entry):
            continue
        if entry.is_dir():
            results.extend(list_source_files(entry))
        elif entry.suffix in SOURCE_EXTENSIONS:
            results.append(entry)
    return results


def collect_source_files(source_dirs: Iterable[Path]) -> list[Path]:
    """
    Pick one file per module, preferring the signature file.

    Modules are keyed by path without extension. Order follows the first
    time each module key was seen.
    """
    selected: dict[Path, Path] = {}
    for source_dir in source_dirs:
        for path in list_source_files(Path(source_dir)):
            module_key = path.with_suffix("")
            if module_key not in selected or path.suffix == SIGNATURE_EXTENSION:
                selected[module_key] = path
    return list(selected.values())


def parse_externals_from_file(path: Path) -> list[ExternalDecl]:
    """Read one file and scan it for external declarations."""
    source = path.read_text(encoding="utf-8")
    return scan_externals(source, str(path))


def collect_external_decls(source_dirs: Iterable[Path]) -> list[ExternalDecl]:
    """
    Scan every selected source file.

    Args:
        source_dirs: Directories to search

    Returns:
        Declarations grouped by file, each file's in textual order
    """
    externals: list[ExternalDecl] = []
    for path in collect_source_files(source_dirs):
        found = parse_externals_from_file(path)
        logger.debug("Scanned %s: %d external(s)", path, len(found))
        externals.extend(found)
    return externals
