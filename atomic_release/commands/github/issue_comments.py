from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from atomic_release.core.result import Err, Ok, Result, collect
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.http import HttpClient
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from .api import GithubCommand

_MAX_COMMENT_WORKERS = 8
_GONE_STATUSES = (404, 410)


@dataclass(frozen=True, slots=True)
class IssueComment:
    issue_number: int
    comment_body: str


class GithubCreateIssueCommentsCommand(GithubCommand):
    """Comment on several issues at once.

    Missing issues (404/410) are skipped. Any other failure fails the
    command; comments created by the other requests are still recorded so
    undo can delete them.
    """

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        issue_comments: list[IssueComment],
        console: ConsoleProtocol,
        headers: dict[str, str] | None = None,
        http: HttpClient | None = None,
    ) -> None:
        super().__init__(owner=owner, repo=repo, console=console, headers=headers, http=http)
        self.issue_comments = list(issue_comments)
        self.created: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def _create(self, comment: IssueComment) -> Result[None, ReleaseError]:
        url = self.repo_url(f"/issues/{comment.issue_number}/comments")
        response = self._send("POST", url, json_body={"body": comment.comment_body})
        if isinstance(response, Err):
            return response
        status = response.value.status
        if status in _GONE_STATUSES:
            self.console.info(f"Could not find issue '{comment.issue_number}'. Comment was not created.")
            return Ok(None)
        if status != 201:
            return Err(
                ReleaseError(
                    kind="http_failed",
                    message=(
                        f"Failed to create a comment in issue '{comment.issue_number}'. "
                        f"Status code is {status}"
                    ),
                )
            )
        resource = response.value.json()
        with self._lock:
            self.created.append(resource)
        self.console.info(f"Created comment: {resource.get('html_url')} (id: {resource.get('id')})")
        return Ok(None)

    def _delete(self, resource: dict[str, Any]) -> None:
        html_url = resource.get("html_url")
        response = self._send("DELETE", self.repo_url(f"/issues/comments/{resource.get('id')}"))
        if isinstance(response, Err):
            self.console.warning(f"Failed to delete comment '{html_url}': {response.error.message}")
        elif response.value.status == 204:
            self.console.info(f"Deleted comment: {html_url}")
        else:
            self.console.warning(
                f"Failed to delete comment '{html_url}'. Status code is {response.value.status}"
            )

    def do(self) -> CommandResult:
        if not self.issue_comments:
            return Ok(None)
        workers = min(_MAX_COMMENT_WORKERS, len(self.issue_comments))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self._create, self.issue_comments))
        return collect(results).map(lambda _: None)

    def undo(self) -> CommandResult:
        created, self.created = self.created, []
        if not created:
            return Ok(None)
        with ThreadPoolExecutor(max_workers=min(_MAX_COMMENT_WORKERS, len(created))) as pool:
            list(pool.map(self._delete, created))
        return Ok(None)
