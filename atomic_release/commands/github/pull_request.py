from __future__ import annotations

from typing import Any

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.http import HttpClient
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from .api import GithubCommand


class GithubCreatePullRequestCommand(GithubCommand):
    """Open a pull request from ``head`` into ``base``.

    Pull requests cannot be deleted, so undo closes it.
    """

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        head: str,
        base: str,
        title: str,
        console: ConsoleProtocol,
        body: str | None = None,
        headers: dict[str, str] | None = None,
        http: HttpClient | None = None,
    ) -> None:
        super().__init__(owner=owner, repo=repo, console=console, headers=headers, http=http)
        self.head = head
        self.base = base
        self.title = title
        self.body = body
        self.created: dict[str, Any] | None = None

    def do(self) -> CommandResult:
        payload: dict[str, Any] = {"head": self.head, "base": self.base, "title": self.title}
        if self.body is not None:
            payload["body"] = self.body
        response = self._send("POST", self.repo_url("/pulls"), json_body=payload)
        if isinstance(response, Err):
            return response
        if response.value.status != 201:
            return Err(
                ReleaseError(
                    kind="http_failed",
                    message=f"Failed to create pull request. Status code is {response.value.status}",
                )
            )
        self.created = response.value.json()
        self.console.info(f"Created pull request: {self.created.get('html_url')} (id: {self.created.get('id')})")
        return Ok(None)

    def undo(self) -> CommandResult:
        if self.created is None:
            return Ok(None)
        html_url = self.created.get("html_url")
        response = self._send(
            "PATCH",
            self.repo_url(f"/pulls/{self.created.get('number')}"),
            json_body={"state": "closed"},
        )
        if isinstance(response, Err):
            return response
        if response.value.status == 200:
            self.console.info(f"Closed pull request: {html_url}")
            self.created = None
        else:
            self.console.warning(
                f"Failed to close pull request {html_url}. Status code is {response.value.status}"
            )
        return Ok(None)
