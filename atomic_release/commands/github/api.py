"""Shared plumbing for commands calling the GitHub REST API."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

from atomic_release.core.result import Err, Ok, Result
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.http import HttpClient, HttpResponse, RealHttpClient
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import Command

API_URL = "https://api.github.com"
V3_MEDIA_TYPE = "application/vnd.github.v3+json"

_TEMPLATE_EXPR_RE = re.compile(r"\{([?&]?)([^}]+)\}")


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"token {token}"}


def expand_url(template: str, params: dict[str, object]) -> str:
    """Expand the RFC 6570 subset GitHub uses (``{name}`` and ``{?a,b}``).

    Parameters that are None are left out.
    """

    def expand(m: re.Match[str]) -> str:
        operator, names = m.group(1), m.group(2).split(",")
        if not operator:
            return "".join(quote(str(params[n]), safe="") for n in names if params.get(n) is not None)
        pairs = [f"{n}={quote(str(params[n]), safe='')}" for n in names if params.get(n) is not None]
        if not pairs:
            return ""
        return operator + "&".join(pairs)

    return _TEMPLATE_EXPR_RE.sub(expand, template)


class GithubCommand(Command):
    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        console: ConsoleProtocol,
        headers: dict[str, str] | None = None,
        http: HttpClient | None = None,
    ) -> None:
        super().__init__(console=console)
        self.owner = owner
        self.repo = repo
        self.headers = {"Accept": V3_MEDIA_TYPE, **(headers or {})}
        self.http = http if http is not None else RealHttpClient()

    def repo_url(self, path: str) -> str:
        return f"{API_URL}/repos/{self.owner}/{self.repo}{path}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        json_body: dict[str, Any] | None = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> Result[HttpResponse, ReleaseError]:
        result = self.http.request(
            method,
            url,
            headers={**self.headers, **(headers or {})},
            json_body=json_body,
            data=data,
        )
        if isinstance(result, Err):
            return Err(ReleaseError(kind="http_failed", message=str(result.error)))
        return Ok(result.value)
