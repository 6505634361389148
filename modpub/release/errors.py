"""Error payload for the release workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    # preconditions: nothing has been touched yet
    "tool_missing",
    "identity_missing",
    "token_missing",
    # resolution: raised before the workspace exists
    "staging_missing",
    "declaration_missing",
    "invalid_module_path",
    "no_repository",
    "multiple_repositories",
    "version_missing",
    "io_failed",
    # execution: the workspace may be left behind for inspection
    "clone_failed",
    "checkout_failed",
    "sync_failed",
    "commit_failed",
    "tag_failed",
    "push_failed",
]

PRECONDITION_KINDS: frozenset[str] = frozenset({"tool_missing", "identity_missing", "token_missing"})
RESOLUTION_KINDS: frozenset[str] = frozenset(
    {
        "staging_missing",
        "declaration_missing",
        "invalid_module_path",
        "no_repository",
        "multiple_repositories",
        "version_missing",
    }
)


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
