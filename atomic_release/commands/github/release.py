from __future__ import annotations

import mimetypes
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from atomic_release.core.result import Err, Ok, Result, collect
from atomic_release.output.console import ConsoleProtocol
from atomic_release.output.timer import Timer
from atomic_release.platform.http import HttpClient
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from .api import GithubCommand, expand_url

_MAX_UPLOAD_WORKERS = 4


@dataclass(frozen=True, slots=True)
class ReleaseAsset:
    """A file attached to a release; ``name`` defaults to the file name."""

    path: Path
    name: str | None = None
    label: str | None = None

    @property
    def asset_name(self) -> str:
        return self.name or self.path.name


class GithubCreateReleaseCommand(GithubCommand):
    """Create a GitHub release for an existing remote tag.

    With assets the release starts as a draft, the assets upload in
    parallel, and the release is then published. Undo deletes it.
    """

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        tag_name: str,
        name: str,
        console: ConsoleProtocol,
        body: str | None = None,
        is_stable: bool = False,
        assets: list[ReleaseAsset] | None = None,
        headers: dict[str, str] | None = None,
        http: HttpClient | None = None,
    ) -> None:
        super().__init__(owner=owner, repo=repo, console=console, headers=headers, http=http)
        self.tag_name = tag_name
        self.release_name = name
        self.body = body
        self.is_stable = is_stable
        self.assets = list(assets or [])
        self.created: dict[str, Any] | None = None

    def _unique_assets(self) -> list[ReleaseAsset]:
        unique: dict[str, ReleaseAsset] = {}
        for asset in self.assets:
            if asset.asset_name in unique:
                self.console.warning(f"An asset named '{asset.asset_name}' already exists")
                self.console.warning("Duplicate asset will be filtered out")
                continue
            unique[asset.asset_name] = asset
        return list(unique.values())

    def _upload(self, upload_url: str, asset: ReleaseAsset) -> Result[None, ReleaseError]:
        timer = Timer()
        try:
            content = asset.path.read_bytes()
        except OSError:
            return Err(
                ReleaseError(kind="io_failed", message=f"File '{asset.path}' does not exist or is not a file")
            )
        mime_type = mimetypes.guess_type(asset.path.name)[0] or "application/octet-stream"
        url = expand_url(upload_url, {"name": asset.asset_name, "label": asset.label})
        response = self._send(
            "POST",
            url,
            data=content,
            headers={"Content-Type": mime_type, "Content-Length": str(len(content))},
        )
        if isinstance(response, Err):
            return response
        if response.value.status != 201:
            return Err(
                ReleaseError(
                    kind="http_failed",
                    message=f"Failed to upload asset '{asset.path}'. Status code is {response.value.status}",
                )
            )
        self.console.info(f"Asset: {asset.path} was uploaded in {timer}")
        return Ok(None)

    def _publish(self) -> CommandResult:
        assert self.created is not None
        response = self._send("PATCH", str(self.created.get("url")), json_body={"draft": False})
        if isinstance(response, Err):
            return response
        if response.value.status != 200:
            return Err(
                ReleaseError(
                    kind="http_failed",
                    message=(
                        "Failed to take release out of draft mode. "
                        f"Status code is {response.value.status}"
                    ),
                )
            )
        self.created = response.value.json() or self.created
        return Ok(None)

    def do(self) -> CommandResult:
        assets = self._unique_assets()
        payload = {
            "tag_name": self.tag_name,
            "name": self.release_name,
            "body": self.body,
            "draft": bool(assets),
            "prerelease": not self.is_stable,
        }
        response = self._send("POST", self.repo_url("/releases"), json_body=payload)
        if isinstance(response, Err):
            return response
        if response.value.status != 201:
            return Err(
                ReleaseError(
                    kind="http_failed",
                    message=f"Failed to create release. Status code is {response.value.status}",
                )
            )
        self.created = response.value.json()

        if assets:
            upload_url = str(self.created.get("upload_url"))
            for asset in assets:
                self.console.info(f"Uploading asset named: {asset.asset_name} (src: {asset.path})")
            with ThreadPoolExecutor(max_workers=min(_MAX_UPLOAD_WORKERS, len(assets))) as pool:
                uploads = list(pool.map(lambda a: self._upload(upload_url, a), assets))
            uploaded = collect(uploads)
            if isinstance(uploaded, Err):
                return uploaded
            published = self._publish()
            if isinstance(published, Err):
                return published

        self.console.info(f"Created release: {self.created.get('html_url')} (id: {self.created.get('id')})")
        return Ok(None)

    def undo(self) -> CommandResult:
        if self.created is None:
            return Ok(None)
        html_url = self.created.get("html_url")
        response = self._send("DELETE", self.repo_url(f"/releases/{self.created.get('id')}"))
        if isinstance(response, Err):
            return response
        if response.value.status == 204:
            self.console.info(f"Deleted release: {html_url}")
            self.created = None
        else:
            self.console.warning(f"Failed to delete release '{html_url}'. Status code is {response.value.status}")
        return Ok(None)
