"""Raw commit sources and per-instance memoization shared by the release engines."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol, cast

from atomic_release.core.result import Err, Ok, Result
from atomic_release.git.client import GitClient
from atomic_release.git.model import Commit

from .errors import ReleaseError, from_git


@dataclass(frozen=True, slots=True)
class RawCommit:
    hash: str
    raw: str


class RawCommitFetcher(Protocol):
    def __call__(self, range_: str) -> Result[list[RawCommit], ReleaseError]: ...


def format_raw_commit(commit: Commit) -> str:
    committed = datetime.fromtimestamp(commit.committed_timestamp / 1000, tz=UTC)
    lines = [
        commit.subject,
        commit.body,
        "-hash-",
        commit.hash,
        "-gitTags-",
        ",".join(commit.tags),
        "-committerDate-",
        committed.isoformat(),
    ]
    return "\n".join(lines)


def git_raw_commits(git: GitClient) -> RawCommitFetcher:
    """Fetcher reading commits of a range from ``git`` in the parser's raw format."""

    def fetch(range_: str) -> Result[list[RawCommit], ReleaseError]:
        commits = git.commits(range_)
        if isinstance(commits, Err):
            return Err(from_git(commits.error))
        return Ok([RawCommit(hash=c.hash, raw=format_raw_commit(c)) for c in commits.value])

    return fetch


class Memo:
    """Cache of computed results, errors included, for one engine instance."""

    def __init__(self) -> None:
        self._values: dict[Hashable, object] = {}

    def get[T](self, key: Hashable, compute: Callable[[], T]) -> T:
        if key not in self._values:
            self._values[key] = compute()
        return cast(T, self._values[key])
