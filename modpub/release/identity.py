"""Committer identity resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from modpub.core.config import ReleaseConfig
from modpub.core.result import Err, Ok, Result
from modpub.git.repository import read_git_config
from modpub.platform.process import ProcessRunner
from modpub.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class GitIdentity:
    name: str
    email: str


class IdentityResolver(Protocol):
    def resolve(self, config: ReleaseConfig) -> Result[GitIdentity, ReleaseError]: ...


class GitConfigIdentityResolver:
    """Explicit overrides first, then ``git config user.name`` / ``user.email``.

    Ambient values are read from ``cwd`` (the invocation directory by default)
    so repository-local configuration applies as well as the global one.
    """

    def __init__(self, runner: ProcessRunner, *, cwd: Path | None = None) -> None:
        self._runner = runner
        self._cwd = cwd

    def resolve(self, config: ReleaseConfig) -> Result[GitIdentity, ReleaseError]:
        name = self._lookup(config.git_user_name, "user.name")
        if isinstance(name, Err):
            return name
        if not name.value:
            return Err(
                ReleaseError(
                    kind="identity_missing",
                    message="Unable to detect user name.",
                    hint="Configure a global git user.name or pass GIT_USER_NAME.",
                )
            )

        email = self._lookup(config.git_user_email, "user.email")
        if isinstance(email, Err):
            return email
        if not email.value:
            return Err(
                ReleaseError(
                    kind="identity_missing",
                    message="Unable to detect user email.",
                    hint="Configure a global git user.email or pass GIT_USER_EMAIL.",
                )
            )

        return Ok(GitIdentity(name=name.value, email=email.value))

    def _lookup(self, override: str | None, key: str) -> Result[str | None, ReleaseError]:
        if override:
            return Ok(override)
        result = read_git_config(key, runner=self._runner, cwd=self._cwd or Path.cwd())
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="identity_missing",
                    message=f"git config {key} failed",
                    hint=result.error.message,
                )
            )
        return Ok(result.value)
