from __future__ import annotations

import pytest

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import MockConsole
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import Command, CommandResult
from atomic_release.sdk.saga import Saga, SagaState


class Recorder(Command):
    def __init__(
        self,
        label: str,
        journal: list[str],
        *,
        console: MockConsole,
        fail: bool = False,
        raise_on_do: bool = False,
        fail_undo: bool = False,
    ) -> None:
        super().__init__(console=console)
        self.label = label
        self.journal = journal
        self.fail = fail
        self.raise_on_do = raise_on_do
        self.fail_undo = fail_undo

    def do(self) -> CommandResult:
        self.journal.append(f"do {self.label}")
        if self.raise_on_do:
            raise RuntimeError(f"{self.label} exploded")
        if self.fail:
            return Err(ReleaseError(kind="git_failed", message=f"{self.label} failed"))
        return Ok(None)

    def undo(self) -> CommandResult:
        self.journal.append(f"undo {self.label}")
        if self.fail_undo:
            return Err(ReleaseError(kind="git_failed", message=f"undo {self.label} failed"))
        return Ok(None)

    def cleanup(self) -> CommandResult:
        self.journal.append(f"cleanup {self.label}")
        return Ok(None)


def _commands(journal: list[str], console: MockConsole, n: int, **flags: dict[str, bool]) -> list[Command]:
    return [Recorder(str(i), journal, console=console, **flags.get(str(i), {})) for i in range(1, n + 1)]


def test_all_commands_succeed() -> None:
    journal: list[str] = []
    console = MockConsole()
    saga = Saga(_commands(journal, console, 3), console=console)

    assert saga.execute() == Ok(None)
    assert saga.state == SagaState.COMPLETED
    assert journal == ["do 1", "do 2", "do 3", "cleanup 3", "cleanup 2", "cleanup 1"]


def test_failure_undoes_failed_then_completed_in_reverse() -> None:
    journal: list[str] = []
    console = MockConsole()
    saga = Saga(_commands(journal, console, 5, **{"3": {"fail": True}}), console=console)

    result = saga.execute()

    assert isinstance(result, Err)
    assert result.error.message == "3 failed"
    assert saga.state == SagaState.FAILED
    assert journal == [
        "do 1",
        "do 2",
        "do 3",
        "undo 3",
        "undo 2",
        "undo 1",
        "cleanup 3",
        "cleanup 2",
        "cleanup 1",
    ]
    assert console.find("An error occurred while executing command 'Recorder'")


def test_undo_failures_are_logged_and_do_not_stop_compensation() -> None:
    journal: list[str] = []
    console = MockConsole()
    commands = _commands(journal, console, 3, **{"2": {"fail_undo": True}, "3": {"fail": True}})

    result = Saga(commands, console=console).execute()

    assert isinstance(result, Err)
    assert result.error.message == "3 failed"
    assert [j for j in journal if j.startswith("undo")] == ["undo 3", "undo 2", "undo 1"]
    assert console.find("undo 2 failed")


def test_exception_in_do_is_compensated_then_raised() -> None:
    journal: list[str] = []
    console = MockConsole()
    saga = Saga(_commands(journal, console, 3, **{"2": {"raise_on_do": True}}), console=console)

    with pytest.raises(RuntimeError, match="2 exploded"):
        saga.execute()

    assert journal == ["do 1", "do 2", "undo 2", "undo 1", "cleanup 2", "cleanup 1"]
    assert saga.state == SagaState.FAILED


def test_saga_is_single_use() -> None:
    console = MockConsole()
    saga = Saga([], console=console)
    saga.execute()

    with pytest.raises(RuntimeError, match="saga already completed"):
        saga.execute()


def test_command_console_is_named_after_class() -> None:
    console = MockConsole()
    command = Recorder("1", [], console=console)

    command.console.info("hello")

    assert command.name == "Recorder"
    assert console.outputs[0].source == "Recorder"
