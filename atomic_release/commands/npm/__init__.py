"""npm commands."""

from .bump_version import NpmBumpPackageVersionCommand
from .publish import NpmPublishPackageCommand

__all__ = [
    "NpmBumpPackageVersionCommand",
    "NpmPublishPackageCommand",
]
