from __future__ import annotations

from pathlib import Path

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from ..process_command import ProcessCommand


class GitTagCommand(ProcessCommand):
    """Create a tag locally and push it.

    Undo removes the local tag and the remote tag, each only if this
    command created it.
    """

    def __init__(
        self,
        *,
        name: str,
        working_directory: Path,
        console: ConsoleProtocol,
        remote: str = "origin",
        runner: ProcessRunner = run_process,
    ) -> None:
        super().__init__(working_directory=working_directory, console=console, runner=runner)
        self.tag_name = name
        self.remote = remote
        self.tag_ref = f"refs/tags/{name}"
        self.local_tag_created = False
        self.remote_tag_created = False

    def do(self) -> CommandResult:
        remote_tag = self._exec("git", "ls-remote", self.remote, self.tag_ref, network=True)
        if isinstance(remote_tag, Err):
            return remote_tag
        if remote_tag.value.strip():
            return Err(
                ReleaseError(
                    kind="tag_exists",
                    message=f"A tag named '{self.tag_name}' already exists in remote '{self.remote}'",
                )
            )

        local_tag = self._exec("git", "tag", "--list", self.tag_name)
        if isinstance(local_tag, Err):
            return local_tag
        if local_tag.value.strip():
            return Err(
                ReleaseError(kind="tag_exists", message=f"A local tag named '{self.tag_name}' already exists")
            )

        created = self._exec("git", "tag", self.tag_name)
        if isinstance(created, Err):
            return created
        self.local_tag_created = True
        self.console.info(f"Created a local tag '{self.tag_name}'")

        pushed = self._exec("git", "push", self.remote, self.tag_ref, network=True)
        if isinstance(pushed, Err):
            return pushed
        self.remote_tag_created = True
        self.console.info(f"Pushed tag '{self.tag_name}' to remote '{self.remote}'")
        return Ok(None)

    def undo(self) -> CommandResult:
        if self.local_tag_created:
            deleted = self._exec("git", "tag", "--delete", self.tag_name)
            if isinstance(deleted, Err):
                self.console.error(f"Failed to delete local tag '{self.tag_name}': {deleted.error.message}")
            else:
                self.local_tag_created = False
                self.console.info(f"Deleted local tag '{self.tag_name}'")

        if self.remote_tag_created:
            deleted = self._exec("git", "push", self.remote, "--delete", self.tag_ref, network=True)
            if isinstance(deleted, Err):
                self.console.error(f"Failed to delete remote tag '{self.tag_name}': {deleted.error.message}")
            else:
                self.remote_tag_created = False
                self.console.info(f"Deleted remote tag '{self.tag_name}'")
        return Ok(None)
