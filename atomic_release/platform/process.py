"""Subprocess execution returning ``Result`` values.

All external tools (git, npm) are driven through :func:`run`. Commands
receive it as an injectable :class:`ProcessRunner` so tests can replace
it with a fake.

Usage:
    match run(["git", "rev-parse", "HEAD"], cwd=repo):
        case Ok(stdout):
            head = stdout.strip()
        case Err(error):
            console.error(str(error))
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from atomic_release.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessRunner", "run"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A subprocess that could not start, timed out or exited non-zero.

    Attributes:
        command: The command that was executed.
        returncode: Exit code (-1 when the process never completed).
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        detail = self.stderr.strip().splitlines()
        suffix = f": {detail[-1]}" if detail else ""
        return f"{cmd_str} failed (exit {self.returncode}){suffix}"


class ProcessRunner(Protocol):
    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]: ...


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute ``cmd`` in ``cwd`` and return its stdout.

    Args:
        cmd: Command and arguments.
        cwd: Working directory.
        env: Full environment for the child (inherits when None).
        timeout: Seconds before the process is killed.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)
