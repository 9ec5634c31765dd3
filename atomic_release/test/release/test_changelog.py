from __future__ import annotations

from atomic_release.release.changelog import WriterContext, WriterOptions, render_changelog
from atomic_release.release.conventional import parse_commit

CONTEXT = WriterContext(host="https://github.com", owner="acme", repository="widgets", date="2024-03-01")
BASE = "https://github.com/acme/widgets"


def _raw(message: str, hash_: str) -> str:
    return f"{message}\n\n-hash-\n{hash_}\n"


def test_heading_for_minor_and_patch_versions() -> None:
    commits = [parse_commit(_raw("feat: add widgets", "a" * 40))]

    assert render_changelog(CONTEXT, "1.2.0", commits).startswith("## 1.2.0 (2024-03-01)\n")
    assert render_changelog(CONTEXT, "1.2.1", commits).startswith("### 1.2.1 (2024-03-01)\n")


def test_sections_and_links() -> None:
    commits = [
        parse_commit(_raw("feat(api): add widgets\n\nCloses #12", "a" * 40)),
        parse_commit(_raw("fix: handle empty list", "b" * 40)),
        parse_commit(_raw("chore: bump deps", "c" * 40)),
    ]

    text = render_changelog(CONTEXT, "1.2.0", commits)

    assert "### Features" in text
    assert "### Bug Fixes" in text
    assert text.index("### Features") < text.index("### Bug Fixes")
    assert f"* **api:** add widgets ([aaaaaaa]({BASE}/commit/{'a' * 40})), closes [#12]({BASE}/issues/12)" in text
    assert f"* handle empty list ([bbbbbbb]({BASE}/commit/{'b' * 40}))" in text
    assert "bump deps" not in text


def test_breaking_changes_come_first() -> None:
    commits = [
        parse_commit(_raw("fix: tidy", "b" * 40)),
        parse_commit(_raw("feat(core)!: drop v1 api", "a" * 40)),
    ]

    text = render_changelog(CONTEXT, "2.0.0", commits)

    assert text.index("### ⚠ BREAKING CHANGES") < text.index("### Features")
    assert "* **core:** drop v1 api" in text


def test_references_without_action_or_to_other_repos_are_not_linked() -> None:
    commits = [parse_commit(_raw("fix: crash\n\nSee #4\nCloses acme/other#9", "a" * 40))]

    text = render_changelog(CONTEXT, "1.0.1", commits)

    assert "issues/4" not in text
    assert "issues/9" not in text


def test_repo_url_overrides_host() -> None:
    context = WriterContext(
        host="https://github.com",
        owner="acme",
        repository="widgets",
        repo_url="https://git.acme.dev/widgets/",
        date="2024-03-01",
    )
    assert context.base_url == "https://git.acme.dev/widgets"


def test_custom_sections_and_template() -> None:
    options = WriterOptions(
        sections=(("docs", "Documentation"),),
        template="{{ version }}:{% for g in groups %}{{ g.title }}{% endfor %}:{{ tagline }}",
        extra={"tagline": "hi"},
    )
    commits = [parse_commit(_raw("docs: explain sagas", "a" * 40))]

    assert render_changelog(CONTEXT, "1.0.0", commits, options) == "1.0.0:Documentation:hi\n"
