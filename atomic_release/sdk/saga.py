"""Ordered execution of reversible commands with compensation.

Commands run strictly in order. When one fails, it is undone first, then
every command that completed before it is undone in reverse order.
Failures while undoing are logged and never stop the sweep; the run
reports the original error.

    NOT_STARTED -> RUNNING -> COMPLETED
                           -> FAILING -> FAILED
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum, auto

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.output.timer import Timer

from .command import Command, CommandResult

__all__ = ["Saga", "SagaState"]


class SagaState(Enum):
    NOT_STARTED = auto()
    RUNNING = auto()
    COMPLETED = auto()
    FAILING = auto()
    FAILED = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Saga:
    """Single-use executor for one list of commands."""

    def __init__(self, commands: Sequence[Command], *, console: ConsoleProtocol) -> None:
        self.commands = tuple(commands)
        self.console = console
        self.state = SagaState.NOT_STARTED
        self.completed: list[Command] = []
        self._attempted: list[Command] = []

    def execute(self) -> CommandResult:
        """Run every command; compensate on the first failure.

        Raises:
            RuntimeError: If the saga was already executed.
            Exception: Whatever a command's ``do`` raised, after compensation.
        """
        if self.state != SagaState.NOT_STARTED:
            raise RuntimeError(f"saga already {self.state}")
        self.state = SagaState.RUNNING
        try:
            return self._run()
        finally:
            self._cleanup()

    def _run(self) -> CommandResult:
        for command in self.commands:
            timer = Timer()
            self.console.debug(f"Executing command '{command.name}'")
            self._attempted.append(command)
            try:
                result = command.do()
            except Exception:
                self.console.warning(f"An error occurred while executing command '{command.name}'")
                self._compensate(command)
                raise
            self.console.debug(f"Executing command '{command.name}' completed in ~{timer}")

            if isinstance(result, Err):
                self.console.warning(f"An error occurred while executing command '{command.name}'")
                self.console.error(result.error.message)
                self._compensate(command)
                return result
            self.completed.append(command)

        self.state = SagaState.COMPLETED
        return Ok(None)

    def _compensate(self, failed: Command) -> None:
        self.state = SagaState.FAILING
        self._undo(failed)
        while self.completed:
            self._undo(self.completed.pop())
        self.state = SagaState.FAILED

    def _undo(self, command: Command) -> None:
        try:
            result = command.undo()
        except Exception as e:  # noqa: BLE001
            self.console.warning(f"An error occurred while undoing command '{command.name}'")
            self.console.error(str(e))
            return
        if isinstance(result, Err):
            self.console.warning(f"An error occurred while undoing command '{command.name}'")
            self.console.error(result.error.message)

    def _cleanup(self) -> None:
        for command in reversed(self._attempted):
            try:
                result = command.cleanup()
            except Exception as e:  # noqa: BLE001
                self.console.warning(f"Cleanup of command '{command.name}' failed: {e}")
                continue
            if isinstance(result, Err):
                self.console.warning(f"Cleanup of command '{command.name}' failed: {result.error.message}")
