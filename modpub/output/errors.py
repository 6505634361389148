"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modpub.core.errors import ErrorCode
from modpub.output.console import Style
from modpub.release.errors import PRECONDITION_KINDS, RESOLUTION_KINDS, ReleaseError

if TYPE_CHECKING:
    from modpub.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    if error.kind in PRECONDITION_KINDS:
        return int(ErrorCode.ENV_ERROR)
    if error.kind in RESOLUTION_KINDS:
        return int(ErrorCode.USER_ERROR)
    match error.kind:
        case "clone_failed" | "push_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "io_failed" | "sync_failed":
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.RELEASE_ERROR)
