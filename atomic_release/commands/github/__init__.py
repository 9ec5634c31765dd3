"""GitHub REST commands."""

from .issue_comments import GithubCreateIssueCommentsCommand, IssueComment
from .pull_request import GithubCreatePullRequestCommand
from .release import GithubCreateReleaseCommand, ReleaseAsset

__all__ = [
    "GithubCreateIssueCommentsCommand",
    "GithubCreatePullRequestCommand",
    "GithubCreateReleaseCommand",
    "IssueComment",
    "ReleaseAsset",
]
