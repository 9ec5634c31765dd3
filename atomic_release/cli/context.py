from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from atomic_release.core.config import DEFAULT_CONFIG_FILE, ReleaseConfig, load_config
from atomic_release.core.errors import ErrorCode
from atomic_release.core.result import Err
from atomic_release.git.client import GitCliClient, GitClient
from atomic_release.output.console import ConsoleProtocol, RichConsole, log_level_from_env
from atomic_release.release.changelog import WriterContext
from atomic_release.release.contracts import Release
from atomic_release.release.semantic import GitSemanticRelease, SemanticReleaseOptions
from atomic_release.release.trunk import GitTrunkRelease, TrunkReleaseOptions

from .commands.release_common import exit_release, release_error_code

CONFIG_ENV = "ATOMIC_RELEASE_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    console: ConsoleProtocol
    git: GitClient
    release: Release


def config_path() -> tuple[Path, bool]:
    """Return the config path and whether it was given explicitly."""
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser().resolve(), True
    return Path.cwd().resolve() / DEFAULT_CONFIG_FILE, False


def _load(path: Path, explicit: bool) -> ReleaseConfig:
    if not explicit and not path.exists():
        return ReleaseConfig()
    result = load_config(path)
    if isinstance(result, Err):
        exit_release(result.error.message, code=ErrorCode.CONFIG_ERROR)
    return result.value


def writer_context(config: ReleaseConfig) -> WriterContext | None:
    c = config.changelog
    if c.host is None or c.owner is None or c.repository is None:
        return None
    return WriterContext(
        host=c.host,
        owner=c.owner,
        repository=c.repository,
        repo_url=c.repo_url,
        date=date.today().isoformat(),
    )


def build_release(config: ReleaseConfig, git: GitClient, console: ConsoleProtocol) -> Release:
    if config.mode == "trunk":
        created = GitTrunkRelease.create(
            git,
            TrunkReleaseOptions(writer_context=writer_context(config)),
            console=console,
        )
        if isinstance(created, Err):
            exit_release(created.error.message, code=release_error_code(created.error.kind))
        return created.value

    return GitSemanticRelease(
        git,
        SemanticReleaseOptions(
            stable_branch=config.stable_branch,
            prerelease_branches=config.prerelease_branches,
            initial_version=config.initial_version,
            writer_context=writer_context(config),
        ),
        console=console,
    )


def build_context() -> CLIContext:
    level = log_level_from_env()
    if isinstance(level, Err):
        exit_release(level.error, code=ErrorCode.CONFIG_ERROR)

    path, explicit = config_path()
    config = _load(path, explicit)
    root = path.parent
    console = RichConsole(level.value)
    git = GitCliClient(root, remote=config.remote)

    return CLIContext(
        root=root,
        config=config,
        console=console,
        git=git,
        release=build_release(config, git, console),
    )
