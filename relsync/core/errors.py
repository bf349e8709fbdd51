"""Process exit codes for the relsync CLI.

The numeric values are part of the CLI contract (workflow steps may branch
on them) and should remain stable:
- 0: Success
- 1: User error (missing tag, unmatched files under strict matching)
- 2: Configuration error (bad environment, unknown platform)
- 3: Release error (reconciliation or upload failed at the provider)
- 4: Network error (provider unreachable)
- 5: I/O error (asset file unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    RELEASE_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
