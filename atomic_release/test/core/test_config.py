"""Tests for atomic_release.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from atomic_release.core.config import (
    BranchConfig,
    ChangelogConfig,
    ConfigError,
    GithubConfig,
    ReleaseConfig,
    load_config,
)
from atomic_release.core.result import Err, Ok


class TestDefaults:
    def test_release_config_defaults(self) -> None:
        config = ReleaseConfig()
        assert config.mode == "semantic"
        assert config.stable_branch is None
        assert config.prerelease_branches == {}
        assert config.initial_version == "0.0.0"
        assert config.remote == "origin"
        assert config.package_root == "."
        assert config.branches == {}

    def test_nested_defaults(self) -> None:
        assert ChangelogConfig().path == "CHANGELOG.md"
        assert ChangelogConfig().regenerate is True
        assert GithubConfig().token_env == "GITHUB_TOKEN"
        assert BranchConfig().npm_dist_tag is None

    def test_frozen(self) -> None:
        config = ReleaseConfig()
        with pytest.raises(AttributeError):
            config.remote = "upstream"  # type: ignore[misc]


class TestFromDict:
    def test_full(self) -> None:
        config = ReleaseConfig.from_dict(
            {
                "release": {
                    "mode": "semantic",
                    "stable_branch": "main",
                    "initial_version": "1.0.0",
                    "remote": "upstream",
                    "prerelease_branches": {"next": "beta"},
                },
                "changelog": {
                    "host": "https://github.com",
                    "owner": "acme",
                    "repository": "widgets",
                    "regenerate": False,
                },
                "github": {"owner": "acme", "repo": "widgets", "token_env": "GH_TOKEN"},
                "git": {"actor": "Bot <bot@acme.dev>"},
                "npm": {"package_root": "packages/core", "registry": "https://npm.acme.dev"},
                "branches": {"main": {"github_release_stable": True, "npm_dist_tag": "latest"}},
            }
        )
        assert config.stable_branch == "main"
        assert config.prerelease_branches == {"next": "beta"}
        assert config.initial_version == "1.0.0"
        assert config.remote == "upstream"
        assert config.changelog.owner == "acme"
        assert config.changelog.regenerate is False
        assert config.github.token_env == "GH_TOKEN"
        assert config.git_actor == "Bot <bot@acme.dev>"
        assert config.package_root == "packages/core"
        assert config.npm_registry == "https://npm.acme.dev"
        assert config.branches["main"] == BranchConfig(github_release_stable=True, npm_dist_tag="latest")

    def test_trunk_mode(self) -> None:
        assert ReleaseConfig.from_dict({"release": {"mode": "trunk"}}).mode == "trunk"

    def test_unknown_mode_raises(self) -> None:
        with pytest.raises(ValueError, match="release.mode"):
            ReleaseConfig.from_dict({"release": {"mode": "calendar"}})

    def test_blank_prerelease_id_raises(self) -> None:
        with pytest.raises(ValueError, match="pre release id"):
            ReleaseConfig.from_dict({"release": {"prerelease_branches": {"next": " "}}})

    def test_branch_must_be_table(self) -> None:
        with pytest.raises(ValueError, match="branches.main"):
            ReleaseConfig.from_dict({"branches": {"main": "latest"}})


class TestLoadConfig:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "atomic-release.toml"
        path.write_text(
            '[release]\nstable_branch = "main"\n\n[branches.main]\nnpm_dist_tag = "latest"\n',
            encoding="utf-8",
        )
        result = load_config(path)
        assert isinstance(result, Ok)
        assert result.value.stable_branch == "main"
        assert result.value.branches["main"].npm_dist_tag == "latest"

    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "missing.toml"
        result = load_config(path)
        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "not found" in result.error.message
        assert result.error.path == path

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "atomic-release.toml"
        path.write_text("[release\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "atomic-release.toml"
        path.write_text('[release]\nmode = "nope"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message
