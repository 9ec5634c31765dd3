"""Console output and timing."""

from .console import ConsoleProtocol, LogLevel, MockConsole, RichConsole

__all__ = [
    "ConsoleProtocol",
    "LogLevel",
    "MockConsole",
    "RichConsole",
]
