"""Clone, synchronize and commit the release workspace."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from modpub.core.result import Err, Ok, Result
from modpub.git.repository import Repository
from modpub.output.console import ConsoleProtocol
from modpub.platform.files import clear_directory, copy_directory_contents, remove_path
from modpub.platform.process import ProcessRunner
from modpub.release.discovery import is_module_dir
from modpub.release.errors import ReleaseError
from modpub.release.identity import GitIdentity
from modpub.release.model import Module, RepositoryTarget

Cloner = Callable[[RepositoryTarget, Path], Result[Repository, ReleaseError]]

_GIT_DIR = ".git"
_COMMIT_PREFIX = "chore(release):"


class TokenCloner:
    """Clone over HTTPS with a token embedded in the URL.

    The token never appears in echoed commands or error messages.
    """

    def __init__(
        self,
        *,
        token: str | None,
        host: str,
        runner: ProcessRunner,
        console: ConsoleProtocol | None = None,
    ) -> None:
        self._token = token
        self._host = host
        self._runner = runner
        self._console = console

    def preflight(self) -> Result[None, ReleaseError]:
        if not self._token:
            return Err(
                ReleaseError(
                    kind="token_missing",
                    message="GITHUB_TOKEN env variable is required",
                    hint="Export GITHUB_TOKEN (or activate the usage directory) and retry.",
                )
            )
        return Ok(None)

    def __call__(self, target: RepositoryTarget, dest: Path) -> Result[Repository, ReleaseError]:
        ready = self.preflight()
        if isinstance(ready, Err):
            return ready
        assert self._token is not None

        dest.parent.mkdir(parents=True, exist_ok=True)
        result = Repository.clone(
            target.clone_url(host=self._host, token=self._token),
            dest,
            runner=self._runner,
            console=self._console,
            secrets=(self._token,),
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="clone_failed",
                    message=f"failed to clone {target.slug}",
                    hint=result.error.message,
                )
            )
        return Ok(result.value)


def checkout_branch(repo: Repository, branch: str) -> Result[None, ReleaseError]:
    """Switch to ``branch``, creating it when the remote does not have it yet."""
    if isinstance(repo.checkout(branch), Ok):
        return Ok(None)

    created = repo.create_branch(branch)
    if isinstance(created, Err):
        return Err(
            ReleaseError(
                kind="checkout_failed",
                message=f"failed to check out or create branch: {branch}",
                hint=created.error.message,
            )
        )
    return Ok(None)


def sync_modules(
    *,
    staging_dir: Path,
    workspace: Path,
    modules: list[Module],
) -> Result[list[Path], ReleaseError]:
    """Replace workspace content with the staged modules.

    A staging directory that is itself a module mirrors the whole tree:
    everything but ``.git`` is removed first. Otherwise only the workspace
    directories of the staged submodules are replaced and any sibling
    submodule stays as it is.

    Returns:
        The workspace entries that were removed before copying.
    """
    try:
        if is_module_dir(staging_dir):
            removed = clear_directory(workspace, exclude=(_GIT_DIR,))
        else:
            removed = []
            for module in modules:
                existing = workspace / module.name
                if existing.exists() or existing.is_symlink():
                    remove_path(existing)
                    removed.append(existing)
        copy_directory_contents(staging_dir, workspace)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="sync_failed",
                message=f"failed to copy {staging_dir} into {workspace}",
                hint=str(e),
            )
        )
    return Ok(removed)


def build_commit_message(modules: list[Module], *, version: str | None) -> str:
    """``chore(release): <version>`` or one ``name@version`` per module."""
    if version:
        return f"{_COMMIT_PREFIX} {version}"
    parts = [f"{m.name}@{m.version}" for m in modules]
    return " ".join([_COMMIT_PREFIX, *parts])


def stage_changes(repo: Repository) -> Result[bool, ReleaseError]:
    """Stage everything and report whether anything differs from HEAD."""
    added = repo.add_all()
    if isinstance(added, Err):
        return Err(
            ReleaseError(kind="commit_failed", message="git add failed", hint=added.error.message)
        )

    changed = repo.has_staged_changes()
    if isinstance(changed, Err):
        return Err(
            ReleaseError(
                kind="commit_failed",
                message="failed to compare workspace with HEAD",
                hint=changed.error.message,
            )
        )
    return Ok(changed.value)


def commit_release(
    repo: Repository,
    *,
    identity: GitIdentity,
    message: str,
) -> Result[None, ReleaseError]:
    for key, value in (("user.name", identity.name), ("user.email", identity.email)):
        configured = repo.set_config(key, value)
        if isinstance(configured, Err):
            return Err(
                ReleaseError(
                    kind="commit_failed",
                    message=f"git config {key} failed",
                    hint=configured.error.message,
                )
            )

    committed = repo.commit(message)
    if isinstance(committed, Err):
        return Err(
            ReleaseError(
                kind="commit_failed",
                message="git commit failed",
                hint=committed.error.message,
            )
        )
    return Ok(None)
