"""Git commands."""

from .commit import GitCommitCommand
from .push_branch import GitPushBranchCommand
from .switch_branch import GitSwitchBranchCommand
from .tag import GitTagCommand

__all__ = [
    "GitCommitCommand",
    "GitPushBranchCommand",
    "GitSwitchBranchCommand",
    "GitTagCommand",
]
