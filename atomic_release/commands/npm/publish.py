from __future__ import annotations

from pathlib import Path

from atomic_release.core.result import Err, Ok
from atomic_release.output.console import ConsoleProtocol
from atomic_release.platform.process import ProcessRunner
from atomic_release.platform.process import run as run_process
from atomic_release.sdk.command import CommandResult

from .package import NpmCommand


class NpmPublishPackageCommand(NpmCommand):
    """Publish the package; private packages are skipped.

    Most registries refuse to republish a version even after an unpublish,
    so undo only unpublishes when ``undo_publish`` is set. Keep this
    command last in a release.
    """

    def __init__(
        self,
        *,
        working_directory: Path,
        console: ConsoleProtocol,
        tag: str | None = None,
        registry: str | None = None,
        undo_publish: bool = False,
        runner: ProcessRunner = run_process,
    ) -> None:
        super().__init__(working_directory=working_directory, console=console, runner=runner)
        self.tag = tag
        self.registry = registry
        self.undo_publish = undo_publish
        self.published_package: str | None = None

    def do(self) -> CommandResult:
        package = self._package_json()
        if isinstance(package, Err):
            return package
        name = package.value.get("name")
        version = package.value.get("version")

        if package.value.get("private") is True:
            self.console.info(f"Skipping publish. Package '{name}' private property is true.")
            return Ok(None)

        args: list[str] = []
        if self.tag:
            args += ["--tag", self.tag]
            self.console.info(f"Publishing '{name}@{version}' using dist tag '{self.tag}'")
        if self.registry:
            args += ["--registry", self.registry]
            self.console.info(f"Publishing '{name}@{version}' to registry '{self.registry}'")

        published = self._exec("npm", "publish", *args, network=True)
        if isinstance(published, Err):
            return published
        self.published_package = f"{name}@{version}"
        self.console.info(f"Published package '{self.published_package}'")
        return Ok(None)

    def undo(self) -> CommandResult:
        if self.published_package is None or not self.undo_publish:
            return Ok(None)
        unpublished = self._exec("npm", "unpublish", self.published_package, network=True)
        if isinstance(unpublished, Err):
            return unpublished
        self.console.info(f"Unpublished package '{self.published_package}'")
        self.published_package = None
        return Ok(None)
