from __future__ import annotations

from typing import NoReturn

import typer

from atomic_release.core.errors import ErrorCode
from atomic_release.core.result import Err, Result
from atomic_release.release.errors import ReleaseError


def exit_release(err: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=int(code))


def release_error_code(kind: str) -> ErrorCode:
    if kind in {"config_missing", "config_invalid"}:
        return ErrorCode.CONFIG_ERROR
    if kind in {"version_exists", "tag_exists", "branch_exists"}:
        return ErrorCode.CONFLICT
    if kind in {"git_failed", "npm_failed", "http_failed"}:
        return ErrorCode.EXTERNAL_ERROR
    if kind in {"io_failed"}:
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def unwrap_or_exit[T](result: Result[T, ReleaseError]) -> T:
    if isinstance(result, Err):
        err = result.error
        if err.hint:
            typer.echo(f"hint: {err.hint}", err=True)
        exit_release(err.message, code=release_error_code(err.kind))
    return result.value
