from __future__ import annotations

import os

from atomic_release.cli.context import CLIContext, build_context
from atomic_release.core.errors import ErrorCode
from atomic_release.strategies import (
    GithubNpmPackageOptions,
    GithubNpmPackageStrategy,
    GithubOptions,
    NpmBranchConfig,
)

from .release_common import exit_release, unwrap_or_exit


def make_strategy(ctx: CLIContext) -> GithubNpmPackageStrategy:
    config = ctx.config
    github = config.github
    if not github.owner or not github.repo:
        exit_release("[github] owner and repo are required to run a release", code=ErrorCode.CONFIG_ERROR)
    token = os.environ.get(github.token_env)
    if not token:
        exit_release(f"{github.token_env} is not set", code=ErrorCode.CONFIG_ERROR)

    branches = dict(config.branches)
    options = GithubNpmPackageOptions(
        working_directory=ctx.root,
        github=GithubOptions(owner=github.owner, repo=github.repo, personal_access_token=token),
        branch_config={
            name: NpmBranchConfig(
                npm_dist_tag=branch.npm_dist_tag,
                is_stable_github_release=branch.github_release_stable,
            )
            for name, branch in branches.items()
        },
        remote=config.remote,
        git_actor=config.git_actor,
        package_root=ctx.root / config.package_root,
        changelog_path=ctx.root / config.changelog.path,
        regenerate_changelog=config.changelog.regenerate,
        npm_registry=config.npm_registry,
        is_release_branch=(lambda name: name in branches) if branches else (lambda name: True),
    )
    return GithubNpmPackageStrategy(ctx.release, ctx.git, options, console=ctx.console)


def run() -> None:
    """Release the package: tag, changelog, npm, GitHub release and comments."""
    ctx = build_context()
    unwrap_or_exit(make_strategy(ctx).run())
