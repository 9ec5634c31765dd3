"""Git query facade."""

from .client import GitCliClient, GitClient, GitError
from .model import Commit, MergedTag, Person

__all__ = [
    "Commit",
    "GitCliClient",
    "GitClient",
    "GitError",
    "MergedTag",
    "Person",
]
