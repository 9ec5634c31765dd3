"""Concrete reversible release commands."""

from .file_writer import FileWriterCommand, WriteMode
from .git import GitCommitCommand, GitPushBranchCommand, GitSwitchBranchCommand, GitTagCommand
from .github import (
    GithubCreateIssueCommentsCommand,
    GithubCreatePullRequestCommand,
    GithubCreateReleaseCommand,
)
from .npm import NpmBumpPackageVersionCommand, NpmPublishPackageCommand

__all__ = [
    "FileWriterCommand",
    "GitCommitCommand",
    "GitPushBranchCommand",
    "GitSwitchBranchCommand",
    "GitTagCommand",
    "GithubCreateIssueCommentsCommand",
    "GithubCreatePullRequestCommand",
    "GithubCreateReleaseCommand",
    "NpmBumpPackageVersionCommand",
    "NpmPublishPackageCommand",
    "WriteMode",
]
