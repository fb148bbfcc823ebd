"""
Run configuration for a bindings check.

Project-level settings come from rescript.json (see compiler.discovery);
this module only holds the per-run options and their environment
overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from bindcheck.utils.errors import ConfigError

TSC_ENV_VAR = "BINDCHECK_TSC"
TSCONFIG_ENV_VAR = "BINDCHECK_TSCONFIG"
TIMEOUT_ENV_VAR = "BINDCHECK_TIMEOUT"

DEFAULT_TIMEOUT = 120.0


@dataclass(frozen=True)
class CheckOptions:
    """
    Options for one check run.

    Attributes:
        cwd: Base directory; defaults to the process working directory
        directory: Directory to start the project search from, relative to cwd
        tsc: Command line used to invoke the TypeScript compiler
        tsconfig: tsconfig.json the probe program extends
        timeout: Seconds to wait for the compiler
    """

    cwd: Optional[Path] = None
    directory: Optional[Path] = None
    tsc: Optional[str] = None
    tsconfig: Optional[Path] = None
    timeout: float = DEFAULT_TIMEOUT

    def start_dir(self) -> Path:
        base = Path(self.cwd) if self.cwd is not None else Path.cwd()
        if self.directory is not None:
            base = base / self.directory
        return base.resolve()

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: object
    ) -> CheckOptions:
        """
        Build options from environment variables, then apply overrides.

        Overrides that are None are ignored, so CLI flags that were not
        given leave the environment value in place.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get(TSC_ENV_VAR):
            values["tsc"] = env[TSC_ENV_VAR]
        if env.get(TSCONFIG_ENV_VAR):
            values["tsconfig"] = Path(env[TSCONFIG_ENV_VAR])
        if env.get(TIMEOUT_ENV_VAR):
            try:
                values["timeout"] = float(env[TIMEOUT_ENV_VAR])
            except ValueError as e:
                raise ConfigError(
                    f"{TIMEOUT_ENV_VAR} must be a number of seconds, got {env[TIMEOUT_ENV_VAR]!r}"
                ) from e
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]
