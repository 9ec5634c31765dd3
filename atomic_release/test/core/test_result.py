"""Tests for atomic_release.core.result module."""

import pytest

from atomic_release.core.result import Err, Ok, Result, collect


class TestOk:
    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_map_err_is_identity(self) -> None:
        assert Ok(42).map_err(lambda e: f"error: {e}") == Ok(42)

    def test_repr(self) -> None:
        assert repr(Ok("v1")) == "Ok('v1')"


class TestErr:
    def test_err_map_is_identity(self) -> None:
        assert Err("boom").map(lambda x: x) == Err("boom")

    def test_err_map_err(self) -> None:
        assert Err("boom").map_err(str.upper) == Err("BOOM")


def test_pattern_matching() -> None:
    result: Result[int, str] = Ok(3)
    match result:
        case Ok(value):
            assert value == 3
        case Err(_):
            pytest.fail("expected Ok")


class TestCollect:
    def test_all_ok(self) -> None:
        assert collect([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])

    def test_empty(self) -> None:
        assert collect([]) == Ok([])

    def test_first_error_wins(self) -> None:
        results: list[Result[int, str]] = [Ok(1), Err("first"), Ok(3), Err("second")]
        assert collect(results) == Err("first")

    def test_consumes_every_item(self) -> None:
        seen: list[int] = []

        def gen():
            for i in range(4):
                seen.append(i)
                yield Err(i) if i == 1 else Ok(i)

        assert collect(gen()) == Err(1)
        assert seen == [0, 1, 2, 3]
