"""Read-only git queries used by the release engines.

Usage:
    git = GitCliClient(Path("."), remote="origin")

    match git.merged_tags("HEAD"):
        case Ok(tags):
            for tag in tags:
                print(tag.name, tag.hash)
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from atomic_release.core.result import Err, Ok, Result
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process

from .model import Commit, MergedTag, Person

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

LOG_DELIMITER = ":++:"
_FIELD_DELIMITER = ":<>:"
# https://git-scm.com/docs/pretty-formats
_COMMIT_FORMATS = ("%H", "%s", "%b", "%N", "%D", "%ct", "%an", "%ae", "%cn", "%ce")
_TAG_REF_RE = re.compile(r"tag: (.*)")
_MIN_MERGED_TAGS_VERSION = (2, 7, 0)

__all__ = [
    "GitClient",
    "GitCliClient",
    "GitError",
    "LOG_DELIMITER",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class GitClient(Protocol):
    """Git queries needed to derive versions and changelogs."""

    def log(self, range_: str, format_: str) -> Result[list[str], GitError]: ...

    def ref_hash(self, ref: str) -> Result[str, GitError]: ...

    def ref_name(self, ref: str) -> Result[str, GitError]: ...

    def commits(self, range_: str) -> Result[list[Commit], GitError]: ...

    def merged_tags(self, ref: str) -> Result[list[MergedTag], GitError]: ...

    def remote_tag_hash(self, tag_name: str) -> Result[str | None, GitError]: ...

    def remote_branch_hash(self, branch_name: str | None = None) -> Result[str | None, GitError]: ...


def _parse_version(text: str) -> tuple[int, ...]:
    parts: list[int] = []
    for piece in text.split(".")[:3]:
        m = re.match(r"\d+", piece)
        if m is None:
            break
        parts.append(int(m.group(0)))
    return tuple(parts)


def _first_field(stdout: str) -> str | None:
    line = stdout.strip()
    if not line:
        return None
    return line.split("\t")[0]


class GitCliClient:
    """:class:`GitClient` backed by the ``git`` executable.

    Ranges are split on whitespace so callers can pass ``"<hash> -1"``.
    """

    def __init__(
        self,
        working_directory: Path,
        *,
        remote: str = "origin",
        runner: ProcessRunner = run_process,
    ) -> None:
        self.working_directory = working_directory
        self.remote = remote
        self._run = runner

    def _git(self, *args: str, network: bool = False) -> Result[str, GitError]:
        timeout = _GIT_NETWORK_TIMEOUT_SECONDS if network else _GIT_TIMEOUT_SECONDS
        result = self._run(["git", *args], cwd=self.working_directory, timeout=timeout)
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=f"git {' '.join(args)}",
                    message=e.stderr.strip() or str(e),
                    returncode=e.returncode,
                )
            )
        return Ok(result.value)

    def log(self, range_: str, format_: str) -> Result[list[str], GitError]:
        """Entries of ``git log <range>`` rendered with ``format_``."""
        out = self._git("log", *range_.split(), f"--pretty=format:{format_}{LOG_DELIMITER}")
        if isinstance(out, Err):
            return out
        entries: list[str] = []
        for entry in out.value.split(LOG_DELIMITER):
            if entry.startswith("\n"):
                entry = entry[1:]
            if entry:
                entries.append(entry)
        return Ok(entries)

    def cli_version(self) -> Result[str, GitError]:
        out = self._git("--version")
        if isinstance(out, Err):
            return out
        words = out.value.strip().split(" ")
        return Ok(words[2] if len(words) > 2 else "")

    def ref_hash(self, ref: str) -> Result[str, GitError]:
        return self._git("rev-parse", ref).map(str.strip)

    def ref_name(self, ref: str) -> Result[str, GitError]:
        return self._git("rev-parse", "--abbrev-ref", ref).map(str.strip)

    def commits(self, range_: str) -> Result[list[Commit], GitError]:
        """Commits in ``range_`` (``"<hash>.."`` for since, ``"<hash>"`` for until)."""
        raw = self.log(range_, _FIELD_DELIMITER.join(_COMMIT_FORMATS))
        if isinstance(raw, Err):
            return raw

        commits: list[Commit] = []
        for entry in raw.value:
            fields = entry.split(_FIELD_DELIMITER)
            if len(fields) < len(_COMMIT_FORMATS):
                fields += [""] * (len(_COMMIT_FORMATS) - len(fields))
            tags: list[str] = []
            for ref in fields[4].split(","):
                m = _TAG_REF_RE.search(ref.strip())
                if m is not None:
                    tags.append(m.group(1))
            timestamp = fields[5].strip()
            commits.append(
                Commit(
                    hash=fields[0],
                    subject=fields[1],
                    body=fields[2],
                    notes=fields[3],
                    tags=tuple(tags),
                    committed_timestamp=int(timestamp) * 1000 if timestamp.isdigit() else 0,
                    author=Person(fields[6], fields[7]),
                    committer=Person(fields[8], fields[9]),
                )
            )
        return Ok(commits)

    def merged_tags(self, ref: str) -> Result[list[MergedTag], GitError]:
        """Tags reachable from ``ref``. Requires git >= 2.7.0."""
        version = self.cli_version()
        if isinstance(version, Err):
            return version
        if _parse_version(version.value) < _MIN_MERGED_TAGS_VERSION:
            return Err(
                GitError(
                    command="git --version",
                    message=f"Git version >= 2.7.0 is required. Found {version.value}.",
                )
            )

        out = self._git(
            "tag",
            f"--merged={ref}",
            # annotated tags peel to their commit through %(*objectname)
            f"--format=%(refname:strip=2){LOG_DELIMITER}%(objectname){LOG_DELIMITER}%(*objectname)",
        )
        if isinstance(out, Err):
            return out

        tags: list[MergedTag] = []
        for line in out.value.splitlines():
            if not line:
                continue
            name, _, rest = line.partition(LOG_DELIMITER)
            obj, _, peeled = rest.partition(LOG_DELIMITER)
            tags.append(MergedTag(name=name, hash=peeled or obj))
        return Ok(tags)

    def remote_tag_hash(self, tag_name: str) -> Result[str | None, GitError]:
        out = self._git("ls-remote", self.remote, "-t", f"refs/tags/{tag_name}", network=True)
        return out.map(_first_field)

    def remote_branch_hash(self, branch_name: str | None = None) -> Result[str | None, GitError]:
        if branch_name is None:
            current = self.ref_name("HEAD")
            if isinstance(current, Err):
                return current
            branch_name = current.value
        out = self._git("ls-remote", self.remote, "-h", f"refs/heads/{branch_name}", network=True)
        return out.map(_first_field)
