from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import typer

from modpub.cli.commands._helpers import exit_with_code
from modpub.cli.context import build_context
from modpub.core.config import CONFIG_FILENAME
from modpub.core.result import Err
from modpub.output.errors import print_release_error, release_error_exit_code
from modpub.release.service import ModuleReleaser


def release(
    staging_dir: Path | None = typer.Option(
        None, "--dir", help="Staging directory with the modules [env: MODPUB_DIR, default: dist/go]"
    ),
    version: str | None = typer.Option(
        None, "--version", help="Version for every module [env: VERSION]"
    ),
    branch: str | None = typer.Option(None, "--branch", help="Target branch [env: GIT_BRANCH]"),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Commit and tag locally, never push [env: DRY_RUN]"
    ),
    message: str | None = typer.Option(
        None, "--message", "-m", help="Commit message override [env: GIT_COMMIT_MESSAGE]"
    ),
    keep_workspace: bool | None = typer.Option(
        None, "--keep-workspace/--discard-workspace", help="Keep the temporary clone"
    ),
    config: Path = typer.Option(
        Path(CONFIG_FILENAME), "--config", help="TOML file with a [release] table"
    ),
) -> None:
    """Commit, tag and push the staged modules to their repository."""
    ctx = build_context(config_path=config)

    overrides: dict[str, object] = {}
    if staging_dir is not None:
        overrides["staging_dir"] = staging_dir
    if version:
        overrides["version"] = version
    if branch:
        overrides["branch"] = branch
    if dry_run is not None:
        overrides["dry_run"] = dry_run
    if message:
        overrides["commit_message"] = message
    if keep_workspace is not None:
        overrides["keep_workspace"] = keep_workspace
    cfg = replace(ctx.config, **overrides)

    releaser = ModuleReleaser(cfg, console=ctx.console)
    result = releaser.release()
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        exit_with_code(release_error_exit_code(result.error))

    outcome = result.value
    for tag in outcome.tags:
        typer.echo(tag)
