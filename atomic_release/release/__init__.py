"""Version derivation and changelogs from git history."""

from .contracts import Release
from .errors import ReleaseError
from .semantic import GitSemanticRelease, SemanticReleaseOptions
from .trunk import GitTrunkRelease, TrunkReleaseOptions

__all__ = [
    "GitSemanticRelease",
    "GitTrunkRelease",
    "Release",
    "ReleaseError",
    "SemanticReleaseOptions",
    "TrunkReleaseOptions",
]
