from __future__ import annotations

from pathlib import Path

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from ..process_command import ProcessCommand


class GitSwitchBranchCommand(ProcessCommand):
    """Switch to ``branch_name``, creating it when it does not exist.

    Undo switches back to the branch that was checked out before and
    deletes the branch if this command created it.
    """

    def __init__(
        self,
        *,
        branch_name: str,
        working_directory: Path,
        console: ConsoleProtocol,
        runner: ProcessRunner = run_process,
    ) -> None:
        super().__init__(working_directory=working_directory, console=console, runner=runner)
        self.branch_name = branch_name
        self.initial_branch: str | None = None
        self.created_branch = False

    def _switch(self, branch: str, *, create: bool) -> CommandResult:
        args = ["switch", "-c", branch] if create else ["switch", branch]
        switched = self._exec("git", *args)
        if isinstance(switched, Err):
            return switched
        self.console.info(f"Switched to branch '{branch}'")
        return Ok(None)

    def do(self) -> CommandResult:
        if not self.branch_name:
            return Err(ReleaseError(kind="config_invalid", message="Missing branch name"))

        current = self._exec("git", "rev-parse", "--abbrev-ref", "HEAD")
        if isinstance(current, Err):
            return current
        current_branch = current.value.strip()
        if current_branch == self.branch_name:
            return Ok(None)

        exists = isinstance(self._exec("git", "rev-parse", "--verify", f"refs/heads/{self.branch_name}"), Ok)
        switched = self._switch(self.branch_name, create=not exists)
        if isinstance(switched, Err):
            return switched
        self.created_branch = not exists
        self.initial_branch = current_branch
        return Ok(None)

    def undo(self) -> CommandResult:
        if self.initial_branch:
            switched = self._switch(self.initial_branch, create=False)
            if isinstance(switched, Err):
                return switched
            self.initial_branch = None

        if self.created_branch:
            deleted = self._exec("git", "branch", "-D", self.branch_name)
            if isinstance(deleted, Err):
                return deleted
            self.created_branch = False
            self.console.info(f"Deleted branch '{self.branch_name}'")
        return Ok(None)
