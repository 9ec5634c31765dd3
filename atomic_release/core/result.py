"""Explicit success/failure values.

Fallible operations across the release engine, git facade and commands
return ``Result[T, E]`` instead of raising. Callers branch with
``isinstance`` or structural pattern matching:

    match release.get_next_version():
        case Ok(version):
            console.info(f"next: {version}")
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def map_err[F](self, f: Callable[[object], F]) -> Ok[T]:
        del f
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def map[U](self, f: Callable[[object], U]) -> Err[E]:
        del f
        return self

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def collect[T, E](results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Gather values from ``results``, returning the first error seen.

    Every item is consumed even after an error so that fan-out work
    finishes before the caller reports.
    """
    values: list[T] = []
    first_error: Err[E] | None = None
    for result in results:
        if isinstance(result, Err):
            if first_error is None:
                first_error = result
            continue
        values.append(result.value)
    if first_error is not None:
        return first_error
    return Ok(values)
