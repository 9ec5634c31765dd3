"""Typed loading of ``atomic-release.toml``.

Example:

    [release]
    mode = "semantic"
    stable_branch = "main"
    initial_version = "0.0.0"
    remote = "origin"

    [release.prerelease_branches]
    beta = "beta"

    [changelog]
    host = "https://github.com"
    owner = "acme"
    repository = "widgets"
    path = "CHANGELOG.md"

    [github]
    owner = "acme"
    repo = "widgets"
    token_env = "GITHUB_TOKEN"

    [git]
    actor = "Release Bot <bot@acme.dev>"

    [branches.main]
    github_release_stable = true
    npm_dist_tag = "latest"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_table

__all__ = [
    "BranchConfig",
    "ChangelogConfig",
    "ConfigError",
    "DEFAULT_CONFIG_FILE",
    "GithubConfig",
    "ReleaseConfig",
    "ReleaseMode",
    "load_config",
]

DEFAULT_CONFIG_FILE = "atomic-release.toml"

ReleaseMode = Literal["semantic", "trunk"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    host: str | None = None
    owner: str | None = None
    repository: str | None = None
    repo_url: str | None = None
    path: str = "CHANGELOG.md"
    regenerate: bool = True


@dataclass(frozen=True, slots=True)
class GithubConfig:
    owner: str | None = None
    repo: str | None = None
    token_env: str = "GITHUB_TOKEN"


@dataclass(frozen=True, slots=True)
class BranchConfig:
    """Per release branch publishing options."""

    github_release_stable: bool = False
    npm_dist_tag: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    mode: ReleaseMode = "semantic"
    stable_branch: str | None = None
    prerelease_branches: dict[str, str] = field(default_factory=dict[str, str])
    initial_version: str = "0.0.0"
    remote: str = "origin"
    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    github: GithubConfig = field(default_factory=GithubConfig)
    git_actor: str | None = None
    package_root: str = "."
    npm_registry: str | None = None
    branches: dict[str, BranchConfig] = field(default_factory=dict[str, BranchConfig])

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML).

        Raises:
            ValueError: On values that parse but make no sense.
        """
        release: StrDict = get_table(data, "release") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        github: StrDict = get_table(data, "github") or {}
        git: StrDict = get_table(data, "git") or {}
        npm: StrDict = get_table(data, "npm") or {}

        mode = get_str(release, "mode") or "semantic"
        if mode not in ("semantic", "trunk"):
            raise ValueError(f"release.mode must be 'semantic' or 'trunk', got '{mode}'")

        prerelease: dict[str, str] = {}
        for branch, pre_id in (get_table(release, "prerelease_branches") or {}).items():
            if not isinstance(pre_id, str) or not pre_id.strip():
                raise ValueError(f"pre release id for branch '{branch}' must be a string")
            prerelease[branch] = pre_id.strip()

        branches: dict[str, BranchConfig] = {}
        for branch, raw in (get_table(data, "branches") or {}).items():
            table = as_str_dict(raw)
            if table is None:
                raise ValueError(f"branches.{branch} must be a table")
            branches[branch] = BranchConfig(
                github_release_stable=bool(get_bool(table, "github_release_stable")),
                npm_dist_tag=get_str(table, "npm_dist_tag"),
            )

        regenerate = get_bool(changelog, "regenerate")
        return cls(
            mode="trunk" if mode == "trunk" else "semantic",
            stable_branch=get_str(release, "stable_branch"),
            prerelease_branches=prerelease,
            initial_version=get_str(release, "initial_version") or "0.0.0",
            remote=get_str(release, "remote") or "origin",
            changelog=ChangelogConfig(
                host=get_str(changelog, "host"),
                owner=get_str(changelog, "owner"),
                repository=get_str(changelog, "repository"),
                repo_url=get_str(changelog, "repo_url"),
                path=get_str(changelog, "path") or "CHANGELOG.md",
                regenerate=True if regenerate is None else regenerate,
            ),
            github=GithubConfig(
                owner=get_str(github, "owner"),
                repo=get_str(github, "repo"),
                token_env=get_str(github, "token_env") or "GITHUB_TOKEN",
            ),
            git_actor=get_str(git, "actor"),
            package_root=get_str(npm, "package_root") or ".",
            npm_registry=get_str(npm, "registry"),
            branches=branches,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and validate configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
