from __future__ import annotations

from pathlib import Path

import pytest

from atomic_release.commands.file_writer import FileWriterCommand, WriteMode
from atomic_release.core.result import Err, Ok
from atomic_release.output.console import MockConsole


def _writer(path: Path, mode: WriteMode = "append", *, create: bool = False) -> FileWriterCommand:
    return FileWriterCommand(content="NEW\n", path=path, mode=mode, create=create, console=MockConsole())


@pytest.mark.parametrize(
    ("mode", "expected"),
    [("append", "OLD\nNEW\n"), ("prepend", "NEW\nOLD\n"), ("replace", "NEW\n")],
)
def test_modes_and_undo(tmp_path: Path, mode: WriteMode, expected: str) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.write_text("OLD\n", encoding="utf-8")
    command = _writer(path, mode)

    assert command.do() == Ok(None)
    assert path.read_text(encoding="utf-8") == expected

    assert command.undo() == Ok(None)
    assert path.read_text(encoding="utf-8") == "OLD\n"


def test_missing_file_without_create_is_a_no_op(tmp_path: Path) -> None:
    path = tmp_path / "CHANGELOG.md"
    command = _writer(path)

    assert command.do() == Ok(None)
    assert not path.exists()
    assert command.undo() == Ok(None)


def test_create_then_undo_deletes(tmp_path: Path) -> None:
    path = tmp_path / "docs" / "CHANGELOG.md"
    command = _writer(path, "prepend", create=True)

    command.do()
    assert path.read_text(encoding="utf-8") == "NEW\n"

    command.undo()
    assert not path.exists()


def test_empty_original_content_is_restored(tmp_path: Path) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.write_text("", encoding="utf-8")
    command = _writer(path, "replace")

    command.do()
    command.undo()

    assert path.read_text(encoding="utf-8") == ""


def test_unknown_mode(tmp_path: Path) -> None:
    command = _writer(tmp_path / "x", "sideways")  # type: ignore[arg-type]

    result = command.do()

    assert isinstance(result, Err)
    assert result.error.kind == "config_invalid"


def test_write_error(tmp_path: Path) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.mkdir()

    result = _writer(path, "replace").do()

    assert isinstance(result, Err)
    assert result.error.kind == "io_failed"
