"""Base for commands that drive an external executable."""

from __future__ import annotations

import os
from pathlib import Path

from atomic_release.core.result import Err, Ok, Result
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.release.errors import ReleaseError, ReleaseErrorKind, from_process
from atomic_release.sdk.command import Command

_LOCAL_TIMEOUT_SECONDS = 30.0
_NETWORK_TIMEOUT_SECONDS = 3 * 60.0


class ProcessCommand(Command):
    error_kind: ReleaseErrorKind = "git_failed"

    def __init__(
        self,
        *,
        working_directory: Path,
        console: ConsoleProtocol,
        runner: ProcessRunner = run_process,
    ) -> None:
        super().__init__(console=console)
        self.working_directory = working_directory
        self._run = runner

    def _exec(
        self,
        *cmd: str,
        env: dict[str, str] | None = None,
        network: bool = False,
    ) -> Result[str, ReleaseError]:
        full_env = {**os.environ, **env} if env else None
        timeout = _NETWORK_TIMEOUT_SECONDS if network else _LOCAL_TIMEOUT_SECONDS
        result = self._run(list(cmd), cwd=self.working_directory, env=full_env, timeout=timeout)
        if isinstance(result, Err):
            return Err(from_process(result.error, kind=self.error_kind))
        return Ok(result.value)
