from __future__ import annotations

from pathlib import Path

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from ..process_command import ProcessCommand


class GitPushBranchCommand(ProcessCommand):
    """Push ``branch_name`` with upstream tracking.

    Undo deletes the remote branch only when it did not exist before the push.
    """

    def __init__(
        self,
        *,
        branch_name: str,
        working_directory: Path,
        console: ConsoleProtocol,
        remote: str = "origin",
        fail_when_remote_branch_exists: bool = True,
        runner: ProcessRunner = run_process,
    ) -> None:
        super().__init__(working_directory=working_directory, console=console, runner=runner)
        self.branch_name = branch_name
        self.remote = remote
        self.fail_when_remote_branch_exists = fail_when_remote_branch_exists
        self.remote_branch_created = False

    def do(self) -> CommandResult:
        remote_branch = self._exec("git", "ls-remote", self.remote, self.branch_name, network=True)
        if isinstance(remote_branch, Err):
            return remote_branch
        if remote_branch.value.strip() and self.fail_when_remote_branch_exists:
            return Err(
                ReleaseError(
                    kind="branch_exists",
                    message=f"Remote '{self.remote}' already has a branch named '{self.branch_name}'",
                )
            )

        pushed = self._exec("git", "push", "--set-upstream", self.remote, self.branch_name, network=True)
        if isinstance(pushed, Err):
            return pushed
        self.remote_branch_created = not remote_branch.value.strip()
        self.console.info(f"Pushed branch '{self.branch_name}'")
        return Ok(None)

    def undo(self) -> CommandResult:
        if not self.remote_branch_created:
            return Ok(None)
        deleted = self._exec("git", "push", self.remote, "--delete", self.branch_name, network=True)
        if isinstance(deleted, Err):
            return deleted
        self.remote_branch_created = False
        self.console.info(f"Deleted remote branch '{self.branch_name}'")
        return Ok(None)
