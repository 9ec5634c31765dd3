from __future__ import annotations

from pathlib import Path

import pytest
import typer

from atomic_release.cli.context import CONFIG_ENV, build_context, config_path, writer_context
from atomic_release.core.config import ChangelogConfig, ReleaseConfig
from atomic_release.core.errors import ErrorCode
from atomic_release.output.console import LOG_LEVEL_ENV
from atomic_release.release.semantic import GitSemanticRelease


def test_config_path_defaults_to_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    assert config_path() == (tmp_path.resolve() / "atomic-release.toml", False)


def test_config_path_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "release.toml"))
    assert config_path() == ((tmp_path / "release.toml").resolve(), True)


def test_writer_context_needs_repository_coordinates() -> None:
    assert writer_context(ReleaseConfig()) is None
    partial = ReleaseConfig(changelog=ChangelogConfig(host="https://github.com", owner="acme"))
    assert writer_context(partial) is None

    full = ReleaseConfig(
        changelog=ChangelogConfig(host="https://github.com", owner="acme", repository="widgets")
    )
    ctx = writer_context(full)
    assert ctx is not None
    assert (ctx.host, ctx.owner, ctx.repository) == ("https://github.com", "acme", "widgets")
    assert ctx.date is not None


class TestBuildContext:
    def test_missing_default_config_uses_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        monkeypatch.chdir(tmp_path)

        ctx = build_context()

        assert ctx.root == tmp_path.resolve()
        assert ctx.config == ReleaseConfig()
        assert isinstance(ctx.release, GitSemanticRelease)

    def test_loads_explicit_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "release.toml"
        path.write_text('[release]\nstable_branch = "main"\nremote = "upstream"\n', encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV, str(path))
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)

        ctx = build_context()

        assert ctx.config.stable_branch == "main"
        assert ctx.config.remote == "upstream"

    def test_missing_explicit_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "nope.toml"))

        with pytest.raises(typer.Exit) as exc:
            build_context()

        assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)

    def test_bad_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")

        with pytest.raises(typer.Exit) as exc:
            build_context()

        assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)
