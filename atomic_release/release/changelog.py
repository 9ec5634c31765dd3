"""Markdown changelog rendering.

Commits are grouped into sections by type and rendered with a jinja2
template in the conventional-commits layout:

    ## 1.2.0 (2024-03-01)

    ### ⚠ BREAKING CHANGES

    * **api:** drop v1

    ### Features

    * **api:** drop v1 ([abc1234](https://github.com/acme/widgets/commit/abc1234...)), closes [#12](...)

Patch releases use a third-level heading.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as date_cls
from typing import Any

from jinja2 import Environment, StrictUndefined

from . import semver
from .conventional import ConventionalCommit

__all__ = ["WriterContext", "WriterOptions", "render_changelog"]

_DEFAULT_SECTIONS: tuple[tuple[str, str], ...] = (
    ("feat", "Features"),
    ("feature", "Features"),
    ("fix", "Bug Fixes"),
    ("perf", "Performance Improvements"),
    ("revert", "Reverts"),
)

_TEMPLATE = """\
{{ "###" if is_patch else "##" }} {{ version }}{% if date %} ({{ date }}){% endif %}

{% if breaking %}

### ⚠ BREAKING CHANGES

{% for note in breaking %}
* {% if note.scope %}**{{ note.scope }}:** {% endif %}{{ note.text }}
{% endfor %}
{% endif %}
{% for group in groups %}

### {{ group.title }}

{% for c in group.commits %}
* {% if c.scope %}**{{ c.scope }}:** {% endif %}{{ c.subject }}\
{% if c.hash %} ([{{ c.short_hash }}]({{ c.commit_url }})){% endif %}\
{% if c.issues %}, closes {% for issue in c.issues %}[#{{ issue.number }}]({{ issue.url }}){{ ", " if not loop.last else "" }}{% endfor %}{% endif %}

{% endfor %}
{% endfor %}
"""


@dataclass(frozen=True, slots=True)
class WriterContext:
    """Repository coordinates used to build commit and issue links.

    ``repo_url`` defaults to ``host/owner/repository``.
    """

    host: str
    owner: str
    repository: str
    repo_url: str | None = None
    date: str | None = None

    @property
    def base_url(self) -> str:
        if self.repo_url:
            return self.repo_url.rstrip("/")
        return f"{self.host.rstrip('/')}/{self.owner}/{self.repository}"


@dataclass(frozen=True, slots=True)
class WriterOptions:
    sections: tuple[tuple[str, str], ...] = _DEFAULT_SECTIONS
    template: str = _TEMPLATE
    extra: dict[str, Any] = field(default_factory=dict[str, Any])


def _environment() -> Environment:
    return Environment(
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )


def _commit_view(commit: ConventionalCommit, base_url: str) -> dict[str, Any]:
    issues = [
        {"number": r.issue, "url": f"{base_url}/issues/{r.issue}"}
        for r in commit.references
        if r.action is not None and r.owner is None
    ]
    return {
        "scope": commit.scope,
        "subject": commit.subject or commit.header,
        "hash": commit.hash,
        "short_hash": commit.short_hash,
        "commit_url": f"{base_url}/commit/{commit.hash}",
        "issues": issues,
    }


def render_changelog(
    context: WriterContext,
    version: str,
    commits: list[ConventionalCommit],
    options: WriterOptions | None = None,
) -> str:
    """Render the changelog section for ``version``."""
    opts = options or WriterOptions()
    base_url = context.base_url
    titles = dict(opts.sections)

    grouped: dict[str, list[dict[str, Any]]] = {}
    breaking: list[dict[str, Any]] = []
    for commit in commits:
        for note in commit.notes:
            breaking.append({"scope": commit.scope, "text": note.text})
        kind = "revert" if commit.revert is not None and commit.type is None else commit.type
        title = titles.get(kind or "")
        if title is None:
            continue
        grouped.setdefault(title, []).append(_commit_view(commit, base_url))

    order: list[str] = []
    for _, title in opts.sections:
        if title not in order:
            order.append(title)
    groups = [{"title": t, "commits": grouped[t]} for t in order if t in grouped]

    parsed = semver.parse(version)
    is_patch = parsed is not None and parsed.patch != 0

    template = _environment().from_string(opts.template)
    rendered = template.render(
        version=version,
        date=context.date or date_cls.today().isoformat(),
        is_patch=is_patch,
        breaking=breaking,
        groups=groups,
        context=context,
        **opts.extra,
    )
    return rendered.strip() + "\n"
