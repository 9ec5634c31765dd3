"""Read-only release queries: versions, next version, changelog, issues."""

from __future__ import annotations

import typer

from atomic_release.cli.context import build_context

from .release_common import unwrap_or_exit


def versions() -> None:
    """List released versions, newest first."""
    ctx = build_context()
    for version in unwrap_or_exit(ctx.release.get_versions()):
        ctx.console.print(version)


def next_version() -> None:
    """Print the version the next release would get."""
    ctx = build_context()
    ctx.console.print(unwrap_or_exit(ctx.release.get_next_version()))


def changelog(
    version: str | None = typer.Option(
        None, "--version", "-v", help="Released version (default: the unreleased changes)."
    ),
) -> None:
    """Render the changelog of the next release or of a past version."""
    ctx = build_context()
    if version is None:
        text = unwrap_or_exit(ctx.release.get_changelog())
    else:
        text = unwrap_or_exit(ctx.release.get_changelog_by_version(version))
    if text:
        ctx.console.print(text)


def issues() -> None:
    """List issues mentioned by unreleased commits."""
    ctx = build_context()
    mentioned = unwrap_or_exit(ctx.release.get_mentioned_issues())
    for issue in sorted(mentioned, key=lambda i: (len(i), i)):
        ctx.console.print(issue)
