from __future__ import annotations

import json
from pathlib import Path
from typing import Any, cast

from atomic_release.core.result import Err, Ok, Result
from atomic_release.core.structured import as_str_dict
from atomic_release.release.errors import ReleaseError, ReleaseErrorKind

from ..process_command import ProcessCommand


class NpmCommand(ProcessCommand):
    """Command operating on the package in ``working_directory``."""

    error_kind: ReleaseErrorKind = "npm_failed"

    @property
    def package_json_path(self) -> Path:
        return self.working_directory / "package.json"

    def _package_json(self) -> Result[dict[str, Any], ReleaseError]:
        try:
            data = as_str_dict(json.loads(self.package_json_path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError) as e:
            return Err(ReleaseError(kind="io_failed", message=f"Failed to read {self.package_json_path}: {e}"))
        if data is None:
            return Err(ReleaseError(kind="io_failed", message=f"{self.package_json_path} is not a JSON object"))
        return Ok(cast(dict[str, Any], data))
