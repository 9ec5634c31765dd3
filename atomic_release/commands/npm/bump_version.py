from __future__ import annotations

from pathlib import Path

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.release.errors import ReleaseError
from atomic_release.sdk.command import CommandResult

from .package import NpmCommand


class NpmBumpPackageVersionCommand(NpmCommand):
    """Set the ``package.json`` version with ``npm version``.

    With ``pre_release_id`` the version is then moved to the next
    pre-release of that id. Undo restores the version found before.
    """

    def __init__(
        self,
        *,
        version: str,
        working_directory: Path,
        console: ConsoleProtocol,
        pre_release_id: str | None = None,
        runner: ProcessRunner = run_process,
    ) -> None:
        super().__init__(working_directory=working_directory, console=console, runner=runner)
        self.version = version
        self.pre_release_id = pre_release_id
        self.initial_version: str | None = None
        self.version_changed = False

    def _npm_version(self, *args: str) -> CommandResult:
        result = self._exec("npm", "version", *args, "--no-git-tag-version")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def do(self) -> CommandResult:
        package = self._package_json()
        if isinstance(package, Err):
            return package
        name = package.value.get("name")
        version = package.value.get("version")
        if not name or not version:
            return Err(
                ReleaseError(
                    kind="config_invalid",
                    message=f"Package {self.package_json_path} 'version' or 'name' properties are missing",
                )
            )
        self.initial_version = str(version)

        bumped = self._npm_version(self.version)
        if isinstance(bumped, Err):
            return bumped
        self.version_changed = True
        if self.pre_release_id:
            bumped = self._npm_version("prerelease", f"--preid={self.pre_release_id}")
            if isinstance(bumped, Err):
                return bumped

        updated = self._package_json()
        new_version = updated.value.get("version") if isinstance(updated, Ok) else self.version
        self.console.info(f"Changed package '{name}' version to '{new_version}'")
        return Ok(None)

    def undo(self) -> CommandResult:
        if not self.version_changed or self.initial_version is None:
            return Ok(None)
        package = self._package_json()
        if isinstance(package, Err):
            return package
        if package.value.get("version") != self.initial_version:
            reverted = self._npm_version(self.initial_version)
            if isinstance(reverted, Err):
                return reverted
        self.version_changed = False
        self.console.info(f"Reverted '{package.value.get('name')}' version back to '{self.initial_version}'")
        return Ok(None)
