"""Process exit codes.

Every CLI failure maps onto one of these codes. The numeric values are part
of the command-line contract and must stay stable:
- 0: Success (including a release with nothing to publish)
- 1: User error (bad staging layout, ambiguous repository, missing version)
- 2: Environment error (missing git, missing identity, missing token)
- 3: Release error (checkout, commit or tag failed)
- 4: Network error (clone or push failed)
- 5: I/O error (file not readable or writable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
