"""Release orchestration.

``ModuleReleaser`` runs one release end to end:

    discover -> resolve repository -> resolve versions -> clone -> checkout
    -> sync -> stage (stop here if nothing changed) -> commit -> tag -> push

Every collaborator that touches the outside world is injected so the whole
flow can run against fakes. Errors stop the run at the failing step; a clone
that was already created is left on disk for inspection.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

from modpub.core.config import ReleaseConfig
from modpub.core.result import Err, Ok, Result
from modpub.git.repository import Repository
from modpub.output.console import ConsoleProtocol, Style
from modpub.platform.files import remove_path
from modpub.platform.process import ProcessRunner, SubprocessRunner, which
from modpub.release.discovery import collect_modules
from modpub.release.errors import ReleaseError
from modpub.release.identity import GitConfigIdentityResolver, GitIdentity, IdentityResolver
from modpub.release.model import Module, ReleaseOutcome
from modpub.release.resolver import resolve_repository
from modpub.release.sync import (
    Cloner,
    TokenCloner,
    build_commit_message,
    checkout_branch,
    commit_release,
    stage_changes,
    sync_modules,
)
from modpub.release.tagging import create_tags, push_release
from modpub.release.version import resolve_versions

WorkspaceFactory = Callable[[], Path]


def _temp_workspace() -> Path:
    return Path(tempfile.mkdtemp(prefix="modpub-"))


class ModuleReleaser:
    """Publishes the staged modules of one repository.

    Args:
        config: Settings for this run.
        console: Progress output.
        runner: Executes git; defaults to ``SubprocessRunner``.
        identity_resolver: Supplies the committer identity.
        cloner: Produces the workspace clone; defaults to ``TokenCloner``.
        workspace_factory: Returns a fresh empty directory per run.
        which: Executable lookup used for the ``git`` precondition.
    """

    def __init__(
        self,
        config: ReleaseConfig,
        *,
        console: ConsoleProtocol,
        runner: ProcessRunner | None = None,
        identity_resolver: IdentityResolver | None = None,
        cloner: Cloner | None = None,
        workspace_factory: WorkspaceFactory = _temp_workspace,
        which: Callable[[str], Path | None] = which,
    ) -> None:
        self.config = config
        self._console = console
        self._runner = runner or SubprocessRunner()
        self._identity_resolver = identity_resolver or GitConfigIdentityResolver(self._runner)
        self._cloner = cloner or TokenCloner(
            token=config.token,
            host=config.clone_host,
            runner=self._runner,
            console=console,
        )
        self._workspace_factory = workspace_factory
        self._which = which

    def preflight(self) -> Result[GitIdentity, ReleaseError]:
        """Check git, the clone token (default cloner only) and the committer identity."""
        if self._which("git") is None:
            return Err(
                ReleaseError(
                    kind="tool_missing",
                    message="git must be available to create this release",
                    hint="Install git and make sure it is on PATH.",
                )
            )
        if isinstance(self._cloner, TokenCloner):
            token = self._cloner.preflight()
            if isinstance(token, Err):
                return token
        return self._identity_resolver.resolve(self.config)

    def release(self) -> Result[ReleaseOutcome, ReleaseError]:
        """Run the release process.

        Returns:
            Ok(ReleaseOutcome) when the release completed or had nothing to
            publish, Err(ReleaseError) at the first failing step.
        """
        cfg = self.config
        console = self._console

        identity = self.preflight()
        if isinstance(identity, Err):
            return identity

        discovered = collect_modules(cfg.staging_dir)
        if isinstance(discovered, Err):
            return discovered
        console.header("Detected modules:")
        for module in discovered.value:
            console.print(f" - {module.path}")

        resolved = resolve_repository(discovered.value)
        if isinstance(resolved, Err):
            return resolved
        target, modules = resolved.value

        versioned = resolve_versions(modules, cfg.version)
        if isinstance(versioned, Err):
            return versioned
        modules = versioned.value

        try:
            workspace_root = self._workspace_factory()
            workspace_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(ReleaseError(kind="io_failed", message=f"cannot create workspace: {e}"))
        workspace = workspace_root / target.name
        console.info(f"cloning {target.slug} into {workspace}")
        cloned = self._cloner(target, workspace)
        if isinstance(cloned, Err):
            return cloned
        repo = cloned.value

        steps = self._publish(repo, modules=modules, identity=identity.value)
        if isinstance(steps, Err):
            console.print(f"workspace left for inspection: {workspace}", Style.DIM)
            return steps
        tags = steps.value

        keep = cfg.keep_workspace or (cfg.dry_run and bool(tags))
        if keep:
            console.print(f"workspace: {workspace}", Style.DIM)
        else:
            self._discard(workspace_root)

        if not tags:
            console.success("No changes. Skipping release")
            return Ok(ReleaseOutcome(workspace=workspace if keep else None))

        if cfg.dry_run:
            console.success(f"dry run: {len(tags)} tag(s) created locally, nothing pushed")
        else:
            console.success(f"released {target.slug}: {', '.join(tags)}")
        return Ok(
            ReleaseOutcome(
                tags=tuple(tags),
                workspace=workspace if keep else None,
                pushed=not cfg.dry_run,
            )
        )

    def _publish(
        self,
        repo: Repository,
        *,
        modules: list[Module],
        identity: GitIdentity,
    ) -> Result[list[str], ReleaseError]:
        cfg = self.config

        checked_out = checkout_branch(repo, cfg.branch)
        if isinstance(checked_out, Err):
            return checked_out

        synced = sync_modules(staging_dir=cfg.staging_dir, workspace=repo.path, modules=modules)
        if isinstance(synced, Err):
            return synced

        changed = stage_changes(repo)
        if isinstance(changed, Err):
            return changed
        if not changed.value:
            return Ok([])

        message = cfg.commit_message or build_commit_message(modules, version=cfg.version)
        committed = commit_release(repo, identity=identity, message=message)
        if isinstance(committed, Err):
            return committed

        tags = create_tags(repo, modules)
        if isinstance(tags, Err):
            return tags

        pushed = push_release(
            repo,
            branch=cfg.branch,
            tags=tags.value,
            console=self._console,
            dry_run=cfg.dry_run,
        )
        if isinstance(pushed, Err):
            return pushed
        return Ok(tags.value)

    def _discard(self, workspace_root: Path) -> None:
        try:
            remove_path(workspace_root)
        except OSError as e:
            self._console.warning(f"could not remove workspace {workspace_root}: {e}")
