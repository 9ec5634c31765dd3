from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from atomic_release.git.client import GitError
from atomic_release.platform.process import ProcessError

ReleaseErrorKind = Literal[
    "config_missing",
    "config_invalid",
    "version_exists",
    "tag_exists",
    "branch_exists",
    "unsupported_commit",
    "not_found",
    "git_failed",
    "npm_failed",
    "http_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        return self.message


class ClassificationError(Exception):
    """Raised by a release-commit predicate that cannot classify a commit."""


def from_git(error: GitError) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=f"{error.command}: {error.message}")


def from_process(error: ProcessError, *, kind: ReleaseErrorKind = "git_failed") -> ReleaseError:
    return ReleaseError(kind=kind, message=str(error))
