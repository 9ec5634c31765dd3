"""Reversible release step.

A command performs one externally visible side effect in :meth:`do` and
records exactly what it did so that :meth:`undo` reverts only that.
Both return ``Result`` values; a command never raises for an expected
failure.

Subclasses get their capabilities (process runner, HTTP client) injected
at construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from atomic_release.core.result import Ok, Result
from atomic_release.output.console import ConsoleProtocol
from atomic_release.release.errors import ReleaseError

__all__ = ["Command", "CommandResult"]

type CommandResult = Result[None, ReleaseError]


class Command(ABC):
    def __init__(self, *, console: ConsoleProtocol) -> None:
        self.console = console.named(self.name)

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def do(self) -> CommandResult:
        """Apply the side effect."""

    def undo(self) -> CommandResult:
        """Revert whatever :meth:`do` recorded. No-op by default."""
        return Ok(None)

    def cleanup(self) -> CommandResult:
        """Release resources once the run is over, whatever its outcome."""
        return Ok(None)
