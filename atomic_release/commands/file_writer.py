"""Write, prepend or append text to a file and restore it on undo.

    FileWriterCommand(
        content="## 1.2.0\\n",
        path=Path("CHANGELOG.md"),
        mode="prepend",
        create=True,
        console=console,
    )
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.files import atomic_write_text, read_text_or_none
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import Command, CommandResult

WriteMode = Literal["append", "prepend", "replace"]


class FileWriterCommand(Command):
    def __init__(
        self,
        *,
        content: str,
        path: Path,
        console: ConsoleProtocol,
        create: bool = False,
        mode: WriteMode = "append",
    ) -> None:
        super().__init__(console=console)
        self.content = content
        self.path = path
        self.create = create
        self.mode = mode
        self.created = False
        self.original_content: str | None = None

    def _io_error(self, action: str, e: OSError) -> CommandResult:
        return Err(ReleaseError(kind="io_failed", message=f"Failed to {action} {self.path}: {e}"))

    def do(self) -> CommandResult:
        if self.mode not in ("append", "prepend", "replace"):
            return Err(ReleaseError(kind="config_invalid", message=f"Unknown mode '{self.mode}'"))

        try:
            self.console.debug(f"Reading file {self.path}")
            original = read_text_or_none(self.path)
        except OSError as e:
            return self._io_error("read", e)

        if original is None:
            if not self.create:
                return Ok(None)
            try:
                atomic_write_text(self.path, self.content)
            except OSError as e:
                return self._io_error("create", e)
            self.created = True
            self.console.info(f"Created file {self.path}")
            return Ok(None)

        self.original_content = original
        match self.mode:
            case "replace":
                new_content, verb = self.content, "Replaced content of"
            case "prepend":
                new_content, verb = self.content + original, "Prepended content to"
            case _:
                new_content, verb = original + self.content, "Appended content to"
        try:
            atomic_write_text(self.path, new_content)
        except OSError as e:
            return self._io_error("write", e)
        self.console.info(f"{verb} file {self.path}")
        return Ok(None)

    def undo(self) -> CommandResult:
        try:
            if self.created:
                self.path.unlink(missing_ok=True)
                self.console.info(f"Deleted file {self.path}")
            elif self.original_content is not None:
                atomic_write_text(self.path, self.original_content)
                self.console.info(f"Reverted file {self.path}")
        except OSError as e:
            return self._io_error("revert", e)
        return Ok(None)
