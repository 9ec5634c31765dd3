from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from atomic_release.core.result import Err, Ok, Result
from atomic_release.git.model import Person
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from ..process_command import ProcessCommand

_ACTOR_RE = re.compile(r"^\s*([^<>]+?)\s*<([^<>\s]+@[^<>\s]+)>\s*$")


def parse_actor(actor: str) -> Result[Person, ReleaseError]:
    """Split ``"Name <email>"``."""
    m = _ACTOR_RE.match(actor)
    if m is None:
        return Err(ReleaseError(kind="config_invalid", message='actor must follow "name <email>" format'))
    return Ok(Person(name=m.group(1), email=m.group(2)))


class GitCommitCommand(ProcessCommand):
    """Stage ``file_paths`` and commit them; undo drops the commit with ``git reset HEAD~``."""

    def __init__(
        self,
        *,
        commit_message: str,
        file_paths: Iterable[str],
        working_directory: Path,
        console: ConsoleProtocol,
        actor: str | None = None,
        runner: ProcessRunner = run_process,
    ) -> None:
        super().__init__(working_directory=working_directory, console=console, runner=runner)
        self.commit_message = commit_message
        self.file_paths = tuple(dict.fromkeys(file_paths))
        self.actor = actor
        self.committed = False

    def do(self) -> CommandResult:
        env: dict[str, str] = {}
        if self.actor:
            person = parse_actor(self.actor)
            if isinstance(person, Err):
                return person
            env = {
                "GIT_COMMITTER_NAME": person.value.name,
                "GIT_COMMITTER_EMAIL": person.value.email,
                "GIT_AUTHOR_NAME": person.value.name,
                "GIT_AUTHOR_EMAIL": person.value.email,
            }

        added = self._exec("git", "add", *self.file_paths)
        if isinstance(added, Err):
            return added
        committed = self._exec("git", "commit", "-m", self.commit_message, env=env or None)
        if isinstance(committed, Err):
            return committed

        self.committed = True
        self.console.info(f"Committed files {', '.join(self.file_paths)}")
        return Ok(None)

    def undo(self) -> CommandResult:
        if not self.committed:
            return Ok(None)
        reset = self._exec("git", "reset", "HEAD~")
        if isinstance(reset, Err):
            return reset
        self.committed = False
        self.console.info("Reverted last commit")
        return Ok(None)
