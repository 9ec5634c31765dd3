"""Tests for atomic_release.core.errors module."""

from atomic_release.core.errors import ErrorCode


def test_exit_codes_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.CONFIG_ERROR) == 2
    assert int(ErrorCode.CONFLICT) == 3
    assert int(ErrorCode.EXTERNAL_ERROR) == 4
    assert int(ErrorCode.IO_ERROR) == 5


def test_str() -> None:
    assert str(ErrorCode.CONFIG_ERROR) == "config error"

