from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[2]

# Lower layers must not import higher ones.
LAYERS = ("core", "platform", "output", "git", "release", "sdk", "commands", "strategies", "cli")


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def _source_files() -> list[Path]:
    files: list[Path] = []
    for path in sorted(PACKAGE_ROOT.rglob("*.py")):
        rel = path.relative_to(PACKAGE_ROOT)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def _tree(path: Path) -> ast.AST:
    return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))


def _imports(path: Path) -> list[ImportRef]:
    imports: list[ImportRef] = []
    for node in ast.walk(_tree(path)):
        if isinstance(node, ast.Import):
            imports.extend(ImportRef(alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and not node.level and node.module:
            imports.append(ImportRef(node.module, node.lineno))
    return imports


def _matches(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")


def test_rich_is_only_used_by_the_console() -> None:
    offenders = [
        f"{path.relative_to(PACKAGE_ROOT)}:{ref.line}: {ref.module}"
        for path in _source_files()
        if path.relative_to(PACKAGE_ROOT).as_posix() != "output/console.py"
        for ref in _imports(path)
        if _matches(ref.module, "rich")
    ]
    assert not offenders, "Direct rich usage:\n" + "\n".join(offenders)


def test_subprocess_is_only_called_by_the_process_runner() -> None:
    offenders: list[str] = []
    for path in _source_files():
        rel = path.relative_to(PACKAGE_ROOT).as_posix()
        if rel == "platform/process.py":
            continue
        for node in ast.walk(_tree(path)):
            if (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and isinstance(node.func.value, ast.Name)
                and node.func.value.id == "subprocess"
            ):
                offenders.append(f"{rel}:{node.lineno}: subprocess.{node.func.attr}")
    assert not offenders, "Direct subprocess calls:\n" + "\n".join(offenders)


@pytest.mark.parametrize("layer", LAYERS)
def test_layers_only_import_downwards(layer: str) -> None:
    forbidden = LAYERS[LAYERS.index(layer) + 1 :]
    offenders = [
        f"{path.relative_to(PACKAGE_ROOT)}:{ref.line}: {ref.module}"
        for path in _source_files()
        if path.relative_to(PACKAGE_ROOT).parts[0] == layer
        for ref in _imports(path)
        if any(_matches(ref.module, f"atomic_release.{upper}") for upper in forbidden)
    ]
    assert not offenders, f"{layer} imports a higher layer:\n" + "\n".join(offenders)
