"""Release engine deriving versions from semver tags and conventional commits.

Versions come from tags merged into ``HEAD``. On the stable branch only
stable tags count; on a configured pre-release branch, tags carrying that
branch's pre-release id come first. The next version is the previous one
bumped according to the release commits since the newest relevant tag.

Every public getter is memoized for the lifetime of the instance, errors
included, so repeated calls never re-query git.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from functools import cmp_to_key

from atomic_release.core.result import Err, Ok, Result
from atomic_release.git.client import GitClient
from atomic_release.git.model import MergedTag
from atomic_release.output.console import ConsoleProtocol

from . import semver
from .changelog import WriterContext, WriterOptions, render_changelog
from .conventional import ConventionalCommit, ParserOptions, parse_commit
from .errors import ClassificationError, ReleaseError, from_git
from .semver import ReleaseBump
from .sources import Memo, RawCommit, RawCommitFetcher, git_raw_commits

__all__ = [
    "GitSemanticRelease",
    "SemanticReleaseOptions",
    "default_is_release_commit",
    "mentioned_issues",
    "what_bump",
]

_RELEASE_TYPES_RE = re.compile(r"feat|fix|perf")


def default_is_release_commit(commit: ConventionalCommit) -> bool:
    """``feat``, ``fix`` and ``perf`` commits trigger a release.

    Raises:
        ClassificationError: If the parser configuration does not produce a ``type`` field.
    """
    if not commit.has_field("type"):
        raise ClassificationError("Non supported conventional commit. Provide a custom filter.")
    if commit.type is None:
        return False
    return _RELEASE_TYPES_RE.search(commit.type) is not None


def what_bump(commits: list[ConventionalCommit]) -> tuple[ReleaseBump, str]:
    """Bump level for ``commits`` and a human-readable reason."""
    level: ReleaseBump = "patch"
    breakings = 0
    features = 0
    for commit in commits:
        if commit.notes:
            breakings += len(commit.notes)
            level = "major"
        elif commit.type in ("feat", "feature"):
            features += 1
            if level == "patch":
                level = "minor"

    if breakings == 1:
        reason = f"There is {breakings} BREAKING CHANGE and {features} features"
    else:
        reason = f"There are {breakings} BREAKING CHANGES and {features} features"
    return level, reason


@dataclass(frozen=True, slots=True)
class SemanticReleaseOptions:
    stable_branch: str | None
    prerelease_branches: Mapping[str, str] = field(default_factory=dict[str, str])
    initial_version: str = "0.0.0"
    is_release_commit: Callable[[ConventionalCommit], bool] = default_is_release_commit
    raw_commits: RawCommitFetcher | None = None
    parser_options: ParserOptions = field(default_factory=ParserOptions)
    writer_context: WriterContext | None = None
    writer_options: WriterOptions = field(default_factory=WriterOptions)


class _Cached(Enum):
    BRANCH_NAME = auto()
    PRERELEASE_ID = auto()
    TAGS = auto()
    COMMITS = auto()
    VERSION_COMMITS = auto()
    VERSIONS = auto()
    NEXT_VERSION = auto()
    PREVIOUS_VERSION = auto()
    CHANGELOG = auto()
    CHANGELOG_BY_VERSION = auto()
    MENTIONED_ISSUES = auto()


class GitSemanticRelease:
    def __init__(
        self,
        git: GitClient,
        options: SemanticReleaseOptions,
        *,
        console: ConsoleProtocol,
    ) -> None:
        self._git = git
        self._console = console.named("GitSemanticRelease")
        if options.raw_commits is None:
            options = replace(options, raw_commits=git_raw_commits(git))
        self.options = options
        self._memo = Memo()

    # Private helpers
    # ===============

    def _fetch(self, range_: str) -> Result[list[RawCommit], ReleaseError]:
        fetch = self.options.raw_commits
        assert fetch is not None
        return fetch(range_)

    def _branch_name(self) -> Result[str, ReleaseError]:
        def compute() -> Result[str, ReleaseError]:
            return self._git.ref_name("HEAD").map_err(from_git)

        return self._memo.get(_Cached.BRANCH_NAME, compute)

    def _prerelease_id(self) -> Result[str | None, ReleaseError]:
        def compute() -> Result[str | None, ReleaseError]:
            stable = self.options.stable_branch
            if not stable:
                return Err(ReleaseError(kind="config_missing", message="Stable branch name is missing"))
            branch = self._branch_name()
            if isinstance(branch, Err):
                return branch
            if branch.value == stable:
                return Ok(None)
            pre_id = self.options.prerelease_branches.get(branch.value)
            if pre_id:
                return Ok(pre_id)
            return Err(
                ReleaseError(
                    kind="config_missing",
                    message=f"Could not find pre release id for branch '{branch.value}'",
                    hint="Add the branch to [release.prerelease_branches].",
                )
            )

        return self._memo.get(_Cached.PRERELEASE_ID, compute)

    def _merged_tags(self) -> Result[list[MergedTag], ReleaseError]:
        def compute() -> Result[list[MergedTag], ReleaseError]:
            merged = self._git.merged_tags("HEAD")
            if isinstance(merged, Err):
                return Err(from_git(merged.error))
            pre_id = self._prerelease_id()
            if isinstance(pre_id, Err):
                return pre_id

            stable_tags: list[MergedTag] = []
            branch_tags: list[MergedTag] = []
            filtered = 0
            for tag in merged.value:
                version = semver.parse(tag.name)
                if version is None:
                    self._console.debug(
                        f"Filtered tag '{tag.name}'. Tag name is not a valid semantic version"
                    )
                    filtered += 1
                elif version.prerelease_id is None:
                    stable_tags.append(tag)
                elif pre_id.value and version.prerelease_id == pre_id.value:
                    branch_tags.append(tag)

            if filtered:
                self._console.info(f"Filtered {filtered} tags")

            return Ok(_sorted_desc(branch_tags) + _sorted_desc(stable_tags))

        return self._memo.get(_Cached.TAGS, compute)

    def _parse(self, raw: str) -> ConventionalCommit:
        return parse_commit(raw, self.options.parser_options)

    def _conventional_commits(self) -> Result[list[ConventionalCommit], ReleaseError]:
        def compute() -> Result[list[ConventionalCommit], ReleaseError]:
            tags = self._merged_tags()
            if isinstance(tags, Err):
                return tags
            head = self._git.ref_hash("HEAD")
            if isinstance(head, Err):
                return Err(from_git(head.error))

            since = tags.value[0].hash if tags.value else None
            range_ = f"{since}.." if since else head.value
            raw = self._fetch(range_)
            if isinstance(raw, Err):
                return raw

            if since:
                self._console.info(f"Retrieving commits since {since}")
            else:
                self._console.info(f"Retrieving commits until {head.value}")
            return Ok([self._parse(c.raw) for c in raw.value])

        return self._memo.get(_Cached.COMMITS, compute)

    def _version_commits(self) -> Result[dict[str, list[ConventionalCommit]], ReleaseError]:
        def compute() -> Result[dict[str, list[ConventionalCommit]], ReleaseError]:
            tags = self._merged_tags()
            if isinstance(tags, Err):
                return tags
            by_version: dict[str, list[ConventionalCommit]] = {}
            if not tags.value:
                return Ok(by_version)

            raw = self._fetch(tags.value[0].hash)
            if isinstance(raw, Err):
                return raw
            index = {c.hash: i for i, c in enumerate(raw.value)}

            taken: set[str] = set()
            for tag in reversed(tags.value):
                start = index.get(tag.hash)
                if start is None:
                    return Err(
                        ReleaseError(
                            kind="not_found",
                            message=f"Could not find commit {tag.hash} of tag '{tag.name}'",
                        )
                    )
                commits: list[ConventionalCommit] = []
                for raw_commit in raw.value[start:]:
                    if raw_commit.hash not in taken:
                        commits.append(self._parse(raw_commit.raw))
                        taken.add(raw_commit.hash)
                by_version[semver.clean(tag.name) or tag.name] = commits
            return Ok(by_version)

        return self._memo.get(_Cached.VERSION_COMMITS, compute)

    def _writer_context(self) -> Result[WriterContext, ReleaseError]:
        context = self.options.writer_context
        if context is None:
            return Err(
                ReleaseError(
                    kind="config_missing",
                    message="conventional changelog writer context is missing",
                    hint="Set host, owner and repository under [changelog].",
                )
            )
        return Ok(context)

    def _render(self, version: str, commits: list[ConventionalCommit]) -> Result[str, ReleaseError]:
        context = self._writer_context()
        if isinstance(context, Err):
            return context
        return Ok(render_changelog(context.value, version, commits, self.options.writer_options))

    # Release
    # =======

    def get_versions(self) -> Result[list[str], ReleaseError]:
        def compute() -> Result[list[str], ReleaseError]:
            tags = self._merged_tags()
            if isinstance(tags, Err):
                return tags
            return Ok([semver.clean(t.name) or t.name for t in tags.value])

        return self._memo.get(_Cached.VERSIONS, compute)

    def get_previous_version(self) -> Result[str, ReleaseError]:
        def compute() -> Result[str, ReleaseError]:
            versions = self.get_versions()
            if isinstance(versions, Err):
                return versions
            if versions.value:
                return Ok(versions.value[0])

            initial = self.options.initial_version
            self._console.info(
                f"Could not find a previous version. Will use {initial} as initial version"
            )
            if semver.valid(initial) is None:
                return Err(ReleaseError(kind="config_invalid", message=f"{initial} is not a semantic version"))
            return Ok(initial)

        return self._memo.get(_Cached.PREVIOUS_VERSION, compute)

    def get_next_version(self) -> Result[str, ReleaseError]:
        return self._memo.get(_Cached.NEXT_VERSION, self._compute_next_version)

    def _compute_next_version(self) -> Result[str, ReleaseError]:
        previous = self.get_previous_version()
        if isinstance(previous, Err):
            return previous
        commits = self._conventional_commits()
        if isinstance(commits, Err):
            return commits

        try:
            release_commits = [c for c in commits.value if self.options.is_release_commit(c)]
        except ClassificationError as e:
            return Err(ReleaseError(kind="unsupported_commit", message=str(e)))

        total_filtered = len(commits.value) - len(release_commits)
        self._console.info(f"Found {len(commits.value)} new commits")
        if total_filtered:
            self._console.info(f"Filtered {total_filtered} commit{'s' if total_filtered > 1 else ''}")

        if not release_commits:
            return Ok(previous.value)

        pre_id = self._prerelease_id()
        if isinstance(pre_id, Err):
            return pre_id
        bump, reason = what_bump(release_commits)
        next_version = semver.inc(previous.value, bump, pre_id.value)
        if next_version is None:
            return Err(
                ReleaseError(
                    kind="config_invalid",
                    message=f"semantic version '{previous.value}' is not valid",
                )
            )

        name = f"v{next_version}"
        remote_hash = self._git.remote_tag_hash(name)
        if isinstance(remote_hash, Err):
            return Err(from_git(remote_hash.error))

        self._console.info(reason)

        if remote_hash.value:
            self._console.warning(f"Version {next_version} was already released. (tag: {name})")
            self._console.warning(f"You can fix this by branching from {remote_hash.value}")
            return Err(
                ReleaseError(
                    kind="version_exists",
                    message=(
                        f"A tag for version '{next_version}' already exists "
                        f"(tag hash: {remote_hash.value})"
                    ),
                )
            )
        return Ok(next_version)

    def get_changelog(self) -> Result[str | None, ReleaseError]:
        def compute() -> Result[str | None, ReleaseError]:
            next_version = self.get_next_version()
            if isinstance(next_version, Err):
                return next_version
            commits = self._conventional_commits()
            if isinstance(commits, Err):
                return commits
            return self._render(next_version.value, commits.value)

        return self._memo.get(_Cached.CHANGELOG, compute)

    def get_changelog_by_version(self, version: str) -> Result[str | None, ReleaseError]:
        def compute() -> Result[str | None, ReleaseError]:
            by_version = self._version_commits()
            if isinstance(by_version, Err):
                return by_version
            commits = by_version.value.get(version)
            if commits is None:
                return Err(
                    ReleaseError(
                        kind="not_found",
                        message=f"Could not find version {version} conventional commits",
                    )
                )
            return self._render(version, commits)

        return self._memo.get((_Cached.CHANGELOG_BY_VERSION, version), compute)

    def get_mentioned_issues(self) -> Result[set[str], ReleaseError]:
        def compute() -> Result[set[str], ReleaseError]:
            commits = self._conventional_commits()
            if isinstance(commits, Err):
                return commits
            return Ok(mentioned_issues(commits.value))

        return self._memo.get(_Cached.MENTIONED_ISSUES, compute)


def mentioned_issues(commits: list[ConventionalCommit]) -> set[str]:
    return {ref.issue for commit in commits for ref in commit.references if ref.issue}


def _sorted_desc(tags: list[MergedTag]) -> list[MergedTag]:
    return sorted(tags, key=cmp_to_key(lambda a, b: semver.compare(a.name, b.name)), reverse=True)
