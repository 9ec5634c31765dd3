"""Release strategies."""

from .git_strategy import GitStrategy
from .github_npm_package import (
    GithubNpmPackageOptions,
    GithubNpmPackageStrategy,
    GithubOptions,
    NpmBranchConfig,
)

__all__ = [
    "GitStrategy",
    "GithubNpmPackageOptions",
    "GithubNpmPackageStrategy",
    "GithubOptions",
    "NpmBranchConfig",
]
