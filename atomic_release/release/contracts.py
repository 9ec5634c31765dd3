from __future__ import annotations

from typing import Protocol

from atomic_release.core.result import Result

from .errors import ReleaseError


class Release(Protocol):
    """Version and changelog source consumed by strategies.

    Implementations memoize every answer for the lifetime of the instance.
    """

    def get_versions(self) -> Result[list[str], ReleaseError]: ...

    def get_next_version(self) -> Result[str, ReleaseError]: ...

    def get_previous_version(self) -> Result[str, ReleaseError]: ...

    def get_changelog(self) -> Result[str | None, ReleaseError]: ...

    def get_changelog_by_version(self, version: str) -> Result[str | None, ReleaseError]: ...

    def get_mentioned_issues(self) -> Result[set[str], ReleaseError]: ...
