"""Release an npm package hosted on GitHub.

The strategy tags the next version, commits the changelog and the bumped
``package.json`` on a temporary branch, opens a pull request back to the
release branch, creates the GitHub release, comments on every mentioned
issue and finally publishes the package. Every step is a reversible
command so a failure anywhere unwinds the ones before it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from atomic_release.commands import (
    FileWriterCommand,
    GitCommitCommand,
    GitPushBranchCommand,
    GitSwitchBranchCommand,
    GitTagCommand,
    GithubCreateIssueCommentsCommand,
    GithubCreatePullRequestCommand,
    GithubCreateReleaseCommand,
    NpmBumpPackageVersionCommand,
    NpmPublishPackageCommand,
)
from atomic_release.commands.github import IssueComment
from atomic_release.commands.github.api import auth_headers
from atomic_release.core.result import Err, Ok, Result
from atomic_release.git.client import GitClient
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.http import HttpClient
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.release.contracts import Release
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import Command

from .git_strategy import GitStrategy, IsReleaseBranch, any_branch

__all__ = [
    "GithubNpmPackageOptions",
    "GithubNpmPackageStrategy",
    "GithubOptions",
    "NpmBranchConfig",
]


@dataclass(frozen=True, slots=True)
class GithubOptions:
    owner: str
    repo: str
    personal_access_token: str


@dataclass(frozen=True, slots=True)
class NpmBranchConfig:
    npm_dist_tag: str | None = None
    is_stable_github_release: bool = False


@dataclass(frozen=True, slots=True)
class GithubNpmPackageOptions:
    working_directory: Path
    github: GithubOptions
    branch_config: Mapping[str, NpmBranchConfig] = field(default_factory=dict)
    remote: str = "origin"
    git_actor: str | None = None
    package_root: Path | None = None
    changelog_path: Path | None = None
    regenerate_changelog: bool = True
    npm_registry: str | None = None
    is_release_branch: IsReleaseBranch = any_branch


@dataclass(frozen=True, slots=True)
class _ResolvedRelease:
    branch: str
    next_version: str
    changelog: str
    release_notes: str | None
    issues: tuple[int, ...]
    is_stable: bool
    dist_tag: str


class GithubNpmPackageStrategy(GitStrategy):
    def __init__(
        self,
        release: Release,
        git: GitClient,
        options: GithubNpmPackageOptions,
        *,
        console: ConsoleProtocol,
        runner: ProcessRunner = run_process,
        http: HttpClient | None = None,
    ) -> None:
        super().__init__(release, git, console=console, is_release_branch=options.is_release_branch)
        wd = options.working_directory
        self.options = replace(
            options,
            package_root=options.package_root or wd,
            changelog_path=options.changelog_path or wd / "CHANGELOG.md",
        )
        self.runner = runner
        self.http = http

    @property
    def package_root(self) -> Path:
        assert self.options.package_root is not None
        return self.options.package_root

    @property
    def changelog_path(self) -> Path:
        assert self.options.changelog_path is not None
        return self.options.changelog_path

    def _changelog_content(self, release_notes: str | None) -> Result[str, ReleaseError]:
        """File content: the next changelog, followed by every past one when regenerating."""
        parts = [release_notes]

        if self.options.regenerate_changelog:
            versions = self.release.get_versions()
            if isinstance(versions, Err):
                return versions
            for version in versions.value:
                past = self.release.get_changelog_by_version(version)
                if isinstance(past, Err):
                    return past
                parts.append(past.value)

        return Ok("\n".join(part for part in parts if part))

    def _resolve(self) -> Result[_ResolvedRelease, ReleaseError]:
        branch = self.branch_name()
        if isinstance(branch, Err):
            return branch
        config = self.options.branch_config.get(branch.value)
        if config is None:
            return Err(ReleaseError(kind="config_missing", message=f"Branch '{branch.value}' is missing config"))
        if not config.npm_dist_tag:
            return Err(
                ReleaseError(
                    kind="config_missing",
                    message=f"Branch '{branch.value}' registry dist tag is missing",
                    hint=f"Set npm_dist_tag in [branches.{branch.value}]",
                )
            )

        next_version = self.release.get_next_version()
        if isinstance(next_version, Err):
            return next_version
        release_notes = self.release.get_changelog()
        if isinstance(release_notes, Err):
            return release_notes
        changelog = self._changelog_content(release_notes.value)
        if isinstance(changelog, Err):
            return changelog
        issues = self.release.get_mentioned_issues()
        if isinstance(issues, Err):
            return issues

        return Ok(
            _ResolvedRelease(
                branch=branch.value,
                next_version=next_version.value,
                changelog=changelog.value,
                release_notes=release_notes.value,
                issues=tuple(sorted(int(i) for i in issues.value if i.isdigit())),
                is_stable=config.is_stable_github_release,
                dist_tag=config.npm_dist_tag,
            )
        )

    def get_commands(self) -> Result[list[Command], ReleaseError]:
        resolved = self._resolve()
        if isinstance(resolved, Err):
            return resolved
        r = resolved.value
        opts = self.options
        console = self._root_console
        wd = opts.working_directory
        tag_name = f"v{r.next_version}"
        temp_branch = r.next_version
        github = {
            "owner": opts.github.owner,
            "repo": opts.github.repo,
            "headers": auth_headers(opts.github.personal_access_token),
            "http": self.http,
            "console": console,
        }
        git = {"working_directory": wd, "console": console, "runner": self.runner}

        commands: list[Command] = [
            GitTagCommand(name=tag_name, remote=opts.remote, **git),
            GitSwitchBranchCommand(branch_name=temp_branch, **git),
        ]
        committed = [str(self.package_root / "package.json")]
        if r.changelog:
            commands.append(
                FileWriterCommand(
                    content=r.changelog,
                    path=self.changelog_path,
                    create=True,
                    mode="replace" if opts.regenerate_changelog else "prepend",
                    console=console,
                )
            )
            committed.insert(0, str(self.changelog_path))

        release_url = f"https://github.com/{opts.github.owner}/{opts.github.repo}/releases/tag/{tag_name}"
        comment = f":mailbox: &nbsp; This issue was mentioned in release [{tag_name}]({release_url})"

        commands += [
            NpmBumpPackageVersionCommand(
                version=r.next_version,
                working_directory=self.package_root,
                console=console,
                runner=self.runner,
            ),
            GitCommitCommand(
                commit_message=f"docs(changelog): Adding version {r.next_version} change log",
                file_paths=committed,
                actor=opts.git_actor,
                **git,
            ),
            GitPushBranchCommand(branch_name=temp_branch, remote=opts.remote, **git),
            GitSwitchBranchCommand(branch_name=r.branch, **git),
            GithubCreatePullRequestCommand(
                head=temp_branch,
                base=r.branch,
                title=f"Adding files affected by version {r.next_version} release",
                **github,
            ),
            GithubCreateReleaseCommand(
                tag_name=tag_name,
                name=tag_name,
                body=r.release_notes,
                is_stable=r.is_stable,
                **github,
            ),
            GithubCreateIssueCommentsCommand(
                issue_comments=[IssueComment(issue_number=n, comment_body=comment) for n in r.issues],
                **github,
            ),
            NpmPublishPackageCommand(
                working_directory=self.package_root,
                tag=r.dist_tag,
                registry=opts.npm_registry,
                console=console,
                runner=self.runner,
            ),
        ]
        return Ok(commands)
