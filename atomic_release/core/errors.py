"""Process exit codes.

Every failure surfaced by the CLI maps to one of these values. The numbers
are part of the command-line contract and must stay stable:

- 0: Success
- 1: User error (bad input, unknown version, unsupported commit)
- 2: Configuration error (missing or invalid settings)
- 3: Conflict (tag, branch or version already exists)
- 4: External failure (git, npm or GitHub call failed)
- 5: I/O error (file could not be read or written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    CONFLICT = 3
    EXTERNAL_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
