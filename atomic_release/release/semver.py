"""Semantic version parsing, precedence and increments.

Tag names may carry a leading ``v`` or ``=``; everything else follows
semver 2.0.0. Increment rules match the npm ``semver`` package so that
versions computed here agree with ``npm version``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Literal

ReleaseBump = Literal["major", "minor", "patch"]
Identifier = int | str

_NUM = r"0|[1-9]\d*"
_PRE_ID = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][a-zA-Z0-9-]*)"
_SEMVER_RE = re.compile(
    rf"^[v=\s]*({_NUM})\.({_NUM})\.({_NUM})"
    rf"(?:-({_PRE_ID}(?:\.{_PRE_ID})*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def _identifier(raw: str) -> Identifier:
    return int(raw) if raw.isdigit() else raw


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[Identifier, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(p) for p in self.prerelease)
        return text

    @property
    def prerelease_id(self) -> str | None:
        """First pre-release identifier (``beta`` in ``1.0.0-beta.2``)."""
        if not self.prerelease:
            return None
        return str(self.prerelease[0])

    def bump(self, kind: ReleaseBump) -> SemVer:
        match kind:
            case "major":
                keep = bool(self.prerelease) and self.minor == 0 and self.patch == 0
                return SemVer(self.major if keep else self.major + 1, 0, 0)
            case "minor":
                keep = bool(self.prerelease) and self.patch == 0
                return SemVer(self.major, self.minor if keep else self.minor + 1, 0)
            case "patch":
                keep = bool(self.prerelease)
                return SemVer(self.major, self.minor, self.patch if keep else self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def bump_prerelease(self, identifier: str | None = None) -> SemVer:
        """Next pre-release, e.g. ``2.0.0 -> 2.0.1-beta.0`` and ``0.1.0-beta.0 -> 0.1.0-beta.1``."""
        base = self if self.prerelease else replace(self, patch=self.patch + 1, build=())

        parts: list[Identifier]
        if not base.prerelease:
            parts = [0]
        else:
            parts = list(base.prerelease)
            for i in range(len(parts) - 1, -1, -1):
                part = parts[i]
                if isinstance(part, int):
                    parts[i] = part + 1
                    break
            else:
                parts.append(0)

        if identifier:
            if parts[0] != identifier or len(parts) < 2 or not isinstance(parts[1], int):
                parts = [identifier, 0]

        return SemVer(base.major, base.minor, base.patch, tuple(parts))


def parse(text: str) -> SemVer | None:
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    prerelease = tuple(_identifier(p) for p in m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)


def valid(text: str) -> str | None:
    """Normalized version string, or None when ``text`` is not a version."""
    v = parse(text)
    return None if v is None else str(v)


def clean(text: str) -> str | None:
    return valid(text)


def _compare_identifiers(a: Identifier, b: Identifier) -> int:
    if isinstance(a, int) and isinstance(b, int):
        return (a > b) - (a < b)
    if isinstance(a, int):
        return -1
    if isinstance(b, int):
        return 1
    return (a > b) - (a < b)


def compare_versions(a: SemVer, b: SemVer) -> int:
    main_a = (a.major, a.minor, a.patch)
    main_b = (b.major, b.minor, b.patch)
    if main_a != main_b:
        return 1 if main_a > main_b else -1

    if not a.prerelease and not b.prerelease:
        return 0
    if not a.prerelease:
        return 1
    if not b.prerelease:
        return -1

    for x, y in zip(a.prerelease, b.prerelease):
        c = _compare_identifiers(x, y)
        if c:
            return c
    return (len(a.prerelease) > len(b.prerelease)) - (len(a.prerelease) < len(b.prerelease))


def compare(a: str, b: str) -> int:
    """Precedence of two version strings.

    Raises:
        ValueError: If either string is not a version.
    """
    va, vb = parse(a), parse(b)
    if va is None or vb is None:
        raise ValueError(f"cannot compare '{a}' and '{b}'")
    return compare_versions(va, vb)


def inc(version: str, bump: ReleaseBump, prerelease_id: str | None = None) -> str | None:
    """Increment ``version``; a pre-release id switches to a pre-release increment."""
    v = parse(version)
    if v is None:
        return None
    if prerelease_id:
        return str(v.bump_prerelease(prerelease_id))
    return str(v.bump(bump))
