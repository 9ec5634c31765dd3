from __future__ import annotations

import os
from pathlib import Path

import typer

from atomic_release import __version__
from atomic_release.cli.commands.inspect_cmd import changelog, issues, next_version, versions
from atomic_release.cli.commands.run_cmd import run
from atomic_release.cli.context import CONFIG_ENV
from atomic_release.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(versions)
app.command("next")(next_version)
app.command()(changelog)
app.command()(issues)
app.command()(run)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", callback=_print_version, is_eager=True
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to atomic-release.toml (default: ./atomic-release.toml)",
    ),
) -> None:
    del version
    if config is not None:
        try:
            path = config.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --config: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not path.is_file():
            typer.echo(f"error: config file not found: {path}", err=True)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

        os.environ[CONFIG_ENV] = str(path)


def main() -> None:
    app()
