"""HTTP client abstraction for the GitHub REST commands.

This module provides:
- HttpClient: Protocol for HTTP requests (injectable for tests)
- RealHttpClient: urllib implementation
- MockHttpClient: scripted responses for tests

Unlike a download helper, GitHub commands must see non-2xx status codes
(404 on a missing issue, 422 on a duplicate pull request). Those come back
as ``Ok(HttpResponse)``; ``Err(HttpError)`` is reserved for transport
failures where no status exists.
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Protocol, cast, runtime_checkable

from atomic_release import __version__
from atomic_release.core.result import Err, Ok, Result
from atomic_release.core.structured import as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpRequest",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """Transport failure (DNS, TLS, timeout).

    Attributes:
        url: The URL that failed
        message: Human-readable error message
    """

    url: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: bytes = b""

    def json(self) -> dict[str, Any]:
        """Body decoded as a JSON object; empty dict when it is not one."""
        if not self.body:
            return {}
        try:
            data = as_str_dict(json.loads(self.body.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {}
        return cast(dict[str, Any], data) if data is not None else {}


@dataclass(frozen=True, slots=True)
class HttpRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None

    def json(self) -> dict[str, Any]:
        if not self.body:
            return {}
        return cast(dict[str, Any], json.loads(self.body.decode("utf-8")))


@runtime_checkable
class HttpClient(Protocol):
    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send a request.

        Args:
            method: HTTP verb
            url: Absolute URL
            headers: Extra request headers
            json_body: Serialized as JSON with a matching Content-Type
            data: Raw body (used when json_body is None)

        Returns:
            Ok with the response whatever its status, or Err on transport failure
        """
        ...


def _encode_body(
    headers: dict[str, str], json_body: dict[str, Any] | None, data: bytes | None
) -> bytes | None:
    if json_body is not None:
        headers.setdefault("Content-Type", "application/json")
        return json.dumps(json_body).encode("utf-8")
    return data


class RealHttpClient:
    """HTTP client backed by urllib with system certificates."""

    def __init__(
        self, timeout: float = 30.0, user_agent: str = f"atomic-release/{__version__}"
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        body = _encode_body(all_headers, json_body, data)
        req = urllib.request.Request(url, data=body, headers=all_headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout, context=self._ssl_context) as response:
                return Ok(HttpResponse(status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            return Ok(HttpResponse(status=e.code, body=e.read() or b""))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, message=str(e)))


def _empty_requests() -> list[HttpRequest]:
    return []


def _empty_routes() -> dict[tuple[str, str], deque[HttpResponse | HttpError]]:
    return {}


@dataclass
class MockHttpClient:
    """HTTP client returning scripted responses.

    Responses are queued per ``(method, url)``; the last queued response
    repeats once the queue has a single entry left. Unrouted requests get
    a 404.

    Usage:
        client = MockHttpClient()
        client.add("POST", "https://api.github.com/repos/o/r/pulls", 201, {"number": 7})
        client.request("POST", "https://api.github.com/repos/o/r/pulls", json_body={})
    """

    requests: list[HttpRequest] = field(default_factory=_empty_requests)
    _routes: dict[tuple[str, str], deque[HttpResponse | HttpError]] = field(
        default_factory=_empty_routes
    )

    def add(
        self, method: str, url: str, status: int, payload: dict[str, Any] | None = None
    ) -> None:
        body = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self._routes.setdefault((method, url), deque()).append(HttpResponse(status, body))

    def fail(self, method: str, url: str, message: str) -> None:
        self._routes.setdefault((method, url), deque()).append(HttpError(url, message))

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = dict(headers or {})
        body = _encode_body(all_headers, json_body, data)
        self.requests.append(HttpRequest(method, url, all_headers, body))

        queue = self._routes.get((method, url))
        if not queue:
            return Ok(HttpResponse(status=404))
        response = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def calls(self, method: str | None = None) -> list[HttpRequest]:
        return [r for r in self.requests if method is None or r.method == method]
