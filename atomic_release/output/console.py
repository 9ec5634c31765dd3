"""Leveled console output.

Every component (release engine, commands, strategies) logs through
:class:`ConsoleProtocol`. The production backend is Rich; tests use
:class:`MockConsole` to capture what would have been printed.

The verbosity comes from ``ATOMIC_RELEASE_LOG_LEVEL`` (ERROR, WARN, INFO,
DEBUG; default INFO). Messages below the active level are dropped.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol

from atomic_release.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "LOG_LEVEL_ENV",
    "ConsoleProtocol",
    "LogLevel",
    "MockConsole",
    "RichConsole",
    "log_level_from_env",
]

LOG_LEVEL_ENV = "ATOMIC_RELEASE_LOG_LEVEL"


class LogLevel(IntEnum):
    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3

    @classmethod
    def parse(cls, name: str) -> Result[LogLevel, str]:
        try:
            return Ok(cls[name.strip().upper()])
        except KeyError:
            return Err(f"Unknown log level '{name}'")


def log_level_from_env(env: dict[str, str] | None = None) -> Result[LogLevel, str]:
    """Resolve the active level from ``ATOMIC_RELEASE_LOG_LEVEL``."""
    source = os.environ if env is None else env
    return LogLevel.parse(source.get(LOG_LEVEL_ENV, "INFO"))


class ConsoleProtocol(Protocol):
    """Output sink shared by every component.

    ``named`` returns a console tagged with a component name so that each
    line says where it came from.
    """

    def print(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def named(self, name: str) -> ConsoleProtocol: ...


class RichConsole:
    """Rich-backed console writing ``[HH:MM:SS] [atomic-release] [name] LEVEL > message``."""

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        *,
        name: str = "atomic-release",
        console: Console | None = None,
    ) -> None:
        from rich.console import Console

        self.level = level
        self.name = name
        self._console = console if console is not None else Console(highlight=False)

    def named(self, name: str) -> RichConsole:
        return RichConsole(self.level, name=name, console=self._console)

    def _log(self, level: LogLevel, label: str, message: str) -> None:
        if level > self.level:
            return
        stamp = datetime.now().strftime("%H:%M:%S")
        prefix = f"[dim]\\[{stamp}] \\[atomic-release] \\[{self.name}][/dim]"
        self._console.print(f"{prefix} {label} [dim]›[/dim] ", end="")
        self._console.print(message, markup=False)

    def print(self, message: str) -> None:
        self._console.print(message, markup=False)

    def error(self, message: str) -> None:
        self._log(LogLevel.ERROR, "[red bold]ERROR[/red bold]", message)

    def warning(self, message: str) -> None:
        self._log(LogLevel.WARN, "[yellow]WARN[/yellow]", message)

    def info(self, message: str) -> None:
        self._log(LogLevel.INFO, "[blue]INFO[/blue]", message)

    def debug(self, message: str) -> None:
        self._log(LogLevel.DEBUG, "[magenta]DEBUG[/magenta]", message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole; ``level`` is None for plain prints."""

    message: str
    level: LogLevel | None
    source: str = ""


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for assertions.

    Consoles returned by :meth:`named` share the same ``outputs`` list, so
    a test can hand one MockConsole to a whole object graph and inspect
    everything afterwards. All levels are captured.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    source: str = ""

    def named(self, name: str) -> MockConsole:
        return MockConsole(outputs=self.outputs, source=name)

    def _add(self, message: str, level: LogLevel | None) -> None:
        self.outputs.append(OutputRecord(message, level, self.source))

    def print(self, message: str) -> None:
        self._add(message, None)

    def error(self, message: str) -> None:
        self._add(f"error: {message}", LogLevel.ERROR)

    def warning(self, message: str) -> None:
        self._add(f"warning: {message}", LogLevel.WARN)

    def info(self, message: str) -> None:
        self._add(f"info: {message}", LogLevel.INFO)

    def debug(self, message: str) -> None:
        self._add(f"debug: {message}", LogLevel.DEBUG)

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return self.count(LogLevel.ERROR) > 0

    def has_warning(self) -> bool:
        return self.count(LogLevel.WARN) > 0

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, level: LogLevel) -> int:
        return sum(1 for o in self.outputs if o.level == level)
