from __future__ import annotations

from abc import ABC
from collections.abc import Callable

from atomic_release.core.result import Err, Ok, Result
from atomic_release.git.client import GitClient
from atomic_release.output.console import ConsoleProtocol
from atomic_release.release.contracts import Release
from atomic_release.release.errors import ReleaseError, from_git
from atomic_release.sdk.strategy import Strategy

IsReleaseBranch = Callable[[str], bool]


def any_branch(branch: str) -> bool:
    del branch
    return True


class GitStrategy(Strategy, ABC):
    """Strategy that only runs on a release branch in sync with its remote.

    Comparing the local and remote hashes keeps two concurrent pipelines on
    the same branch from both releasing: only the one built from the
    remote tip proceeds.
    """

    def __init__(
        self,
        release: Release,
        git: GitClient,
        *,
        console: ConsoleProtocol,
        is_release_branch: IsReleaseBranch = any_branch,
    ) -> None:
        super().__init__(release, console=console)
        self.git = git
        self.is_release_branch = is_release_branch
        self._branch: Result[str, ReleaseError] | None = None

    def branch_name(self) -> Result[str, ReleaseError]:
        if self._branch is None:
            self._branch = self.git.ref_name("HEAD").map_err(from_git)
        return self._branch

    def should_run(self) -> Result[bool, ReleaseError]:
        branch = self.branch_name()
        if isinstance(branch, Err):
            return branch
        if not self.is_release_branch(branch.value):
            self.console.info(f"Branch '{branch.value}' is not a release branch")
            return Ok(False)

        local_hash = self.git.ref_hash(branch.value)
        if isinstance(local_hash, Err):
            return Err(from_git(local_hash.error))
        remote_hash = self.git.remote_branch_hash(branch.value)
        if isinstance(remote_hash, Err):
            return Err(from_git(remote_hash.error))

        self.console.info(f"Local branch hash is {local_hash.value}")
        self.console.info(f"Remote branch hash is {remote_hash.value}")
        if local_hash.value != remote_hash.value:
            self.console.info("Local branch hash is not the same as its remote counterpart")
            return Ok(False)
        return Ok(True)
