from __future__ import annotations

from pathlib import Path

from atomic_release.commands.github import (
    GithubCreateIssueCommentsCommand,
    GithubCreatePullRequestCommand,
    GithubCreateReleaseCommand,
    IssueComment,
    ReleaseAsset,
)
from atomic_release.commands.github.api import auth_headers, expand_url
from atomic_release.core.result import Err, Ok
from atomic_release.output.console import MockConsole
from atomic_release.platform.http import MockHttpClient

REPO = "https://api.github.com/repos/acme/widgets"
UPLOAD = "https://uploads.github.com/repos/acme/widgets/releases/1/assets{?name,label}"


def _common(http: MockHttpClient, console: MockConsole | None = None) -> dict[str, object]:
    return {
        "owner": "acme",
        "repo": "widgets",
        "headers": auth_headers("s3cret"),
        "http": http,
        "console": console or MockConsole(),
    }


def test_expand_url() -> None:
    assert expand_url(UPLOAD, {"name": "app v1.zip", "label": None}) == (
        "https://uploads.github.com/repos/acme/widgets/releases/1/assets?name=app%20v1.zip"
    )
    assert expand_url("/issues/{number}", {"number": 4}) == "/issues/4"


class TestPullRequest:
    def test_create_and_close(self) -> None:
        http = MockHttpClient()
        http.add("POST", f"{REPO}/pulls", 201, {"id": 1, "number": 7, "html_url": "https://github.com/acme/widgets/pull/7"})
        http.add("PATCH", f"{REPO}/pulls/7", 200, {})
        command = GithubCreatePullRequestCommand(head="1.1.0", base="main", title="t", **_common(http))  # type: ignore[arg-type]

        assert command.do() == Ok(None)
        request = http.calls("POST")[0]
        assert request.json() == {"head": "1.1.0", "base": "main", "title": "t"}
        assert request.headers["Authorization"] == "token s3cret"
        assert request.headers["Accept"] == "application/vnd.github.v3+json"

        assert command.undo() == Ok(None)
        assert http.calls("PATCH")[0].json() == {"state": "closed"}

    def test_unexpected_status(self) -> None:
        http = MockHttpClient()
        http.add("POST", f"{REPO}/pulls", 422, {"message": "Validation Failed"})
        command = GithubCreatePullRequestCommand(head="1.1.0", base="main", title="t", **_common(http))  # type: ignore[arg-type]

        result = command.do()

        assert isinstance(result, Err)
        assert result.error.message == "Failed to create pull request. Status code is 422"
        assert command.undo() == Ok(None)
        assert http.calls("PATCH") == []

    def test_close_failure_is_a_warning(self) -> None:
        http = MockHttpClient()
        console = MockConsole()
        http.add("POST", f"{REPO}/pulls", 201, {"number": 7, "html_url": "u"})
        http.add("PATCH", f"{REPO}/pulls/7", 500)
        command = GithubCreatePullRequestCommand(head="h", base="b", title="t", **_common(http, console))  # type: ignore[arg-type]
        command.do()

        assert command.undo() == Ok(None)
        assert console.find("Failed to close pull request u. Status code is 500")


class TestRelease:
    def test_create_without_assets(self) -> None:
        http = MockHttpClient()
        http.add("POST", f"{REPO}/releases", 201, {"id": 1, "html_url": "h", "url": f"{REPO}/releases/1"})
        command = GithubCreateReleaseCommand(tag_name="v1.1.0", name="v1.1.0", body="notes", **_common(http))  # type: ignore[arg-type]

        assert command.do() == Ok(None)
        assert http.calls("POST")[0].json() == {
            "tag_name": "v1.1.0",
            "name": "v1.1.0",
            "body": "notes",
            "draft": False,
            "prerelease": True,
        }

    def test_assets_are_uploaded_then_published(self, tmp_path: Path) -> None:
        (tmp_path / "app.zip").write_bytes(b"zip")
        (tmp_path / "notes.txt").write_text("n", encoding="utf-8")
        http = MockHttpClient()
        console = MockConsole()
        http.add(
            "POST",
            f"{REPO}/releases",
            201,
            {"id": 1, "html_url": "h", "url": f"{REPO}/releases/1", "upload_url": UPLOAD},
        )
        upload_base = "https://uploads.github.com/repos/acme/widgets/releases/1/assets"
        http.add("POST", f"{upload_base}?name=app.zip", 201, {})
        http.add("POST", f"{upload_base}?name=release-notes.txt&label=Notes", 201, {})
        http.add("PATCH", f"{REPO}/releases/1", 200, {"id": 1, "html_url": "h"})
        command = GithubCreateReleaseCommand(
            tag_name="v1.1.0",
            name="v1.1.0",
            is_stable=True,
            assets=[
                ReleaseAsset(tmp_path / "app.zip"),
                ReleaseAsset(tmp_path / "notes.txt", name="release-notes.txt", label="Notes"),
                ReleaseAsset(tmp_path / "app.zip"),
            ],
            **_common(http, console),  # type: ignore[arg-type]
        )

        assert command.do() == Ok(None)
        created = http.calls("POST")[0].json()
        assert created["draft"] is True
        assert created["prerelease"] is False
        uploads = [r for r in http.calls("POST") if r.url.startswith(upload_base)]
        assert len(uploads) == 2
        assert {r.headers["Content-Type"] for r in uploads} == {"application/zip", "text/plain"}
        assert http.calls("PATCH")[0].json() == {"draft": False}
        assert console.find("An asset named 'app.zip' already exists")

    def test_missing_asset_file(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.add("POST", f"{REPO}/releases", 201, {"id": 1, "upload_url": UPLOAD, "url": f"{REPO}/releases/1"})
        command = GithubCreateReleaseCommand(
            tag_name="v1", name="v1", assets=[ReleaseAsset(tmp_path / "nope.zip")], **_common(http)  # type: ignore[arg-type]
        )

        result = command.do()

        assert isinstance(result, Err)
        assert result.error.kind == "io_failed"
        assert http.calls("PATCH") == []

    def test_undo_deletes_release(self) -> None:
        http = MockHttpClient()
        http.add("POST", f"{REPO}/releases", 201, {"id": 1, "html_url": "h"})
        http.add("DELETE", f"{REPO}/releases/1", 204)
        command = GithubCreateReleaseCommand(tag_name="v1", name="v1", **_common(http))  # type: ignore[arg-type]
        command.do()

        assert command.undo() == Ok(None)
        assert command.created is None
        assert len(http.calls("DELETE")) == 1

    def test_create_failure(self) -> None:
        http = MockHttpClient()
        http.add("POST", f"{REPO}/releases", 404)
        command = GithubCreateReleaseCommand(tag_name="v1", name="v1", **_common(http))  # type: ignore[arg-type]

        result = command.do()

        assert isinstance(result, Err)
        assert result.error.message == "Failed to create release. Status code is 404"

    def test_transport_failure(self) -> None:
        http = MockHttpClient()
        http.fail("POST", f"{REPO}/releases", "connection reset")
        command = GithubCreateReleaseCommand(tag_name="v1", name="v1", **_common(http))  # type: ignore[arg-type]

        result = command.do()

        assert isinstance(result, Err)
        assert result.error.kind == "http_failed"
        assert "connection reset" in result.error.message


class TestIssueComments:
    def test_creates_comments_and_skips_missing_issues(self) -> None:
        http = MockHttpClient()
        console = MockConsole()
        http.add("POST", f"{REPO}/issues/3/comments", 201, {"id": 30, "html_url": "c3"})
        http.add("POST", f"{REPO}/issues/4/comments", 404)
        http.add("POST", f"{REPO}/issues/5/comments", 410)
        command = GithubCreateIssueCommentsCommand(
            issue_comments=[IssueComment(n, "released") for n in (3, 4, 5)],
            **_common(http, console),  # type: ignore[arg-type]
        )

        assert command.do() == Ok(None)
        assert [c["id"] for c in command.created] == [30]
        assert console.find("Could not find issue '4'. Comment was not created.")
        assert console.find("Could not find issue '5'. Comment was not created.")

    def test_other_failures_fail_but_keep_created_for_undo(self) -> None:
        http = MockHttpClient()
        http.add("POST", f"{REPO}/issues/3/comments", 201, {"id": 30, "html_url": "c3"})
        http.add("POST", f"{REPO}/issues/4/comments", 500)
        http.add("DELETE", f"{REPO}/issues/comments/30", 204)
        command = GithubCreateIssueCommentsCommand(
            issue_comments=[IssueComment(3, "x"), IssueComment(4, "x")],
            **_common(http),  # type: ignore[arg-type]
        )

        result = command.do()

        assert isinstance(result, Err)
        assert result.error.message == "Failed to create a comment in issue '4'. Status code is 500"
        assert len(command.created) == 1

        assert command.undo() == Ok(None)
        assert [r.url for r in http.calls("DELETE")] == [f"{REPO}/issues/comments/30"]
        assert command.created == []

    def test_no_comments(self) -> None:
        http = MockHttpClient()
        command = GithubCreateIssueCommentsCommand(issue_comments=[], **_common(http))  # type: ignore[arg-type]
        assert command.do() == Ok(None)
        assert http.requests == []
