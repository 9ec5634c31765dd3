"""Release engine for trunk-based delivery.

Every commit on the trunk is a release and its version is the short
commit hash. There are no tags, branches or "already released" checks.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from enum import Enum, auto

from atomic_release.core.result import Err, Ok, Result, collect
from atomic_release.git.client import GitClient
from atomic_release.output.console import ConsoleProtocol

from .changelog import WriterContext, WriterOptions, render_changelog
from .conventional import ConventionalCommit, ParserOptions, parse_commit
from .errors import ReleaseError, from_git
from .semantic import mentioned_issues
from .sources import Memo, RawCommitFetcher, git_raw_commits

__all__ = ["GitTrunkRelease", "TrunkReleaseOptions"]

_MAX_LOOKUP_WORKERS = 8


def _accept_all(commit: ConventionalCommit) -> bool:
    del commit
    return True


@dataclass(frozen=True, slots=True)
class TrunkReleaseOptions:
    changelog_commit_filter: Callable[[ConventionalCommit], bool] = _accept_all
    raw_commits: RawCommitFetcher | None = None
    parser_options: ParserOptions = field(default_factory=ParserOptions)
    writer_context: WriterContext | None = None
    writer_options: WriterOptions = field(default_factory=WriterOptions)


class _Cached(Enum):
    COMMITS = auto()
    VERSION_COMMITS = auto()
    VERSIONS = auto()
    PREVIOUS_VERSION = auto()
    CHANGELOG = auto()
    CHANGELOG_BY_VERSION = auto()
    MENTIONED_ISSUES = auto()


class GitTrunkRelease:
    """Trunk release engine. Use :meth:`create`, which resolves ``HEAD`` up front."""

    def __init__(
        self,
        git: GitClient,
        head_hash: str,
        options: TrunkReleaseOptions,
        *,
        console: ConsoleProtocol,
    ) -> None:
        self._git = git
        self._head_hash = head_hash
        self._console = console.named("GitTrunkRelease")
        if options.raw_commits is None:
            options = replace(options, raw_commits=git_raw_commits(git))
        self.options = options
        self._memo = Memo()

    @classmethod
    def create(
        cls,
        git: GitClient,
        options: TrunkReleaseOptions | None = None,
        *,
        console: ConsoleProtocol,
    ) -> Result[GitTrunkRelease, ReleaseError]:
        head = git.ref_hash("HEAD")
        if isinstance(head, Err):
            return Err(from_git(head.error))
        return Ok(cls(git, head.value, options or TrunkReleaseOptions(), console=console))

    def _parse_filtered(self, raw: str) -> list[ConventionalCommit]:
        commit = parse_commit(raw, self.options.parser_options)
        return [commit] if self.options.changelog_commit_filter(commit) else []

    def _fetch_one(self, range_: str) -> Result[list[ConventionalCommit], ReleaseError]:
        fetch = self.options.raw_commits
        assert fetch is not None
        raw = fetch(range_)
        if isinstance(raw, Err):
            return raw
        commits: list[ConventionalCommit] = []
        for raw_commit in raw.value:
            commits.extend(self._parse_filtered(raw_commit.raw))
        return Ok(commits)

    def _conventional_commits(self) -> Result[list[ConventionalCommit], ReleaseError]:
        return self._memo.get(_Cached.COMMITS, lambda: self._fetch_one("-1"))

    def _history_hashes(self) -> Result[list[str], ReleaseError]:
        commits = self._git.commits("HEAD")
        if isinstance(commits, Err):
            return Err(from_git(commits.error))
        return Ok([c.hash for c in commits.value[1:]])

    def _version_commits(self) -> Result[dict[str, list[ConventionalCommit]], ReleaseError]:
        def compute() -> Result[dict[str, list[ConventionalCommit]], ReleaseError]:
            hashes = self._history_hashes()
            if isinstance(hashes, Err):
                return hashes
            if not hashes.value:
                return Ok({})

            workers = min(_MAX_LOOKUP_WORKERS, len(hashes.value))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(lambda h: self._fetch_one(f"{h} -1"), hashes.value))
            collected = collect(results)
            if isinstance(collected, Err):
                return collected
            return Ok({h[:7]: commits for h, commits in zip(hashes.value, collected.value)})

        return self._memo.get(_Cached.VERSION_COMMITS, compute)

    def _render(self, version: str, commits: list[ConventionalCommit]) -> Result[str | None, ReleaseError]:
        if not commits:
            return Ok(None)
        context = self.options.writer_context
        if context is None:
            return Err(
                ReleaseError(
                    kind="config_missing",
                    message="conventional changelog writer context is missing",
                )
            )
        return Ok(render_changelog(context, version, commits, self.options.writer_options))

    def get_versions(self) -> Result[list[str], ReleaseError]:
        def compute() -> Result[list[str], ReleaseError]:
            return self._history_hashes().map(lambda hashes: [h[:7] for h in hashes])

        return self._memo.get(_Cached.VERSIONS, compute)

    def get_next_version(self) -> Result[str, ReleaseError]:
        return Ok(self._head_hash[:7])

    def get_previous_version(self) -> Result[str, ReleaseError]:
        def compute() -> Result[str, ReleaseError]:
            versions = self.get_versions()
            if isinstance(versions, Err):
                return versions
            if versions.value:
                return Ok(versions.value[0])
            short = self._head_hash[:7]
            self._console.info(f"Could not find a previous version. Will use {short} as initial version")
            return Ok(short)

        return self._memo.get(_Cached.PREVIOUS_VERSION, compute)

    def get_changelog(self) -> Result[str | None, ReleaseError]:
        def compute() -> Result[str | None, ReleaseError]:
            commits = self._conventional_commits()
            if isinstance(commits, Err):
                return commits
            return self._render(self._head_hash[:7], commits.value)

        return self._memo.get(_Cached.CHANGELOG, compute)

    def get_changelog_by_version(self, version: str) -> Result[str | None, ReleaseError]:
        def compute() -> Result[str | None, ReleaseError]:
            by_version = self._version_commits()
            if isinstance(by_version, Err):
                return by_version
            commits = by_version.value.get(version)
            if commits is None:
                return Err(
                    ReleaseError(kind="not_found", message=f"Could not find commits for version '{version}'")
                )
            return self._render(version, commits)

        return self._memo.get((_Cached.CHANGELOG_BY_VERSION, version), compute)

    def get_mentioned_issues(self) -> Result[set[str], ReleaseError]:
        def compute() -> Result[set[str], ReleaseError]:
            return self._conventional_commits().map(mentioned_issues)

        return self._memo.get(_Cached.MENTIONED_ISSUES, compute)
