from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest

from atomic_release.core.result import Err, Ok
from atomic_release.platform import process
from atomic_release.platform.process import ProcessError, run


def _completed(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_run_returns_stdout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []

    def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append({"cmd": cmd, **kwargs})
        return _completed(0, stdout="abc123\n")

    monkeypatch.setattr(process.subprocess, "run", fake_run)

    result = run(["git", "rev-parse", "HEAD"], cwd=tmp_path, timeout=5)

    assert result == Ok("abc123\n")
    assert calls[0]["cmd"] == ["git", "rev-parse", "HEAD"]
    assert calls[0]["cwd"] == str(tmp_path)
    assert calls[0]["timeout"] == 5


def test_run_non_zero_exit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        process.subprocess,
        "run",
        lambda cmd, **_: _completed(128, stderr="fatal: not a git repository\n"),
    )

    result = run(["git", "status"], cwd=tmp_path)

    assert isinstance(result, Err)
    assert result.error.returncode == 128
    assert str(result.error) == "git status failed (exit 128): fatal: not a git repository"


def test_run_timeout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd: list[str], **_: Any) -> subprocess.CompletedProcess[str]:
        raise subprocess.TimeoutExpired(cmd, 30)

    monkeypatch.setattr(process.subprocess, "run", fake_run)

    result = run(["git", "fetch"], cwd=tmp_path, timeout=30)

    assert isinstance(result, Err)
    assert result.error.returncode == -1
    assert "timed out" in result.error.stderr


def test_run_missing_executable(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd: list[str], **_: Any) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError("npm")

    monkeypatch.setattr(process.subprocess, "run", fake_run)

    result = run(["npm", "publish"], cwd=tmp_path)

    assert isinstance(result, Err)
    assert result.error.command == ("npm", "publish")


def test_process_error_str_truncates_long_commands() -> None:
    error = ProcessError(command=("git", "push", "origin", "--delete", "v1"), returncode=1, stdout="", stderr="")
    assert str(error) == "git push origin ... failed (exit 1)"
