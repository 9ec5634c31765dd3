"""Release policy: decides whether to run and which commands to run.

Subclasses implement :meth:`should_run` and :meth:`get_commands`; commands
are built fresh on every :meth:`run` from the current release data.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from atomic_release.core.result import Err, Ok, Result
from atomic_release.output.console import ConsoleProtocol
from atomic_release.output.timer import Timer
from atomic_release.release.contracts import Release
from atomic_release.release.errors import ReleaseError

from .command import Command
from .saga import Saga

__all__ = ["Strategy"]


class Strategy(ABC):
    def __init__(self, release: Release, *, console: ConsoleProtocol) -> None:
        self.release = release
        self._root_console = console
        self.console = console.named(self.name)

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def should_run(self) -> Result[bool, ReleaseError]: ...

    @abstractmethod
    def get_commands(self) -> Result[list[Command], ReleaseError]: ...

    def run(self) -> Result[None, ReleaseError]:
        """Gate, build commands and execute them as one saga.

        Returns:
            Ok(None) when skipped or when every command succeeded, the first
            error otherwise (after compensation).
        """
        should_run = self.should_run()
        if isinstance(should_run, Err):
            return should_run
        if not should_run.value:
            self.console.info("All done...")
            return Ok(None)

        commands = self.get_commands()
        if isinstance(commands, Err):
            return commands
        next_version = self.release.get_next_version()
        if isinstance(next_version, Err):
            return next_version
        previous_version = self.release.get_previous_version()
        if isinstance(previous_version, Err):
            return previous_version

        self.console.info(f"Next version is {next_version.value}")
        self.console.info(f"Previous version is {previous_version.value}")
        self.console.debug(f"Executing {len(commands.value)} commands")

        if not commands.value:
            self.console.warning(f"Strategy {self.name} has no commands")
        else:
            timer = Timer()
            result = Saga(commands.value, console=self.console).execute()
            if isinstance(result, Err):
                return result
            self.console.info(f"Execution completed in ~{timer}")

        self.console.info("All done...")
        return Ok(None)
