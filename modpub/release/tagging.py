"""Tag creation and push."""

from __future__ import annotations

from modpub.core.result import Err, Ok, Result
from modpub.git.repository import Repository
from modpub.output.console import ConsoleProtocol
from modpub.release.errors import ReleaseError
from modpub.release.model import Module


def tag_name(module: Module) -> str:
    """``v<version>`` for the root module, ``<name>/v<version>`` for submodules."""
    if module.is_root:
        return f"v{module.version}"
    return f"{module.name}/v{module.version}"


def create_tags(repo: Repository, modules: list[Module]) -> Result[list[str], ReleaseError]:
    tags: list[str] = []
    for module in modules:
        name = tag_name(module)
        result = repo.tag_annotated(name, name)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="tag_failed",
                    message=f"failed to create tag: {name}",
                    hint=result.error.message,
                )
            )
        tags.append(name)
    return Ok(tags)


def push_release(
    repo: Repository,
    *,
    branch: str,
    tags: list[str],
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[None, ReleaseError]:
    """Push the branch, then every tag in order.

    In dry-run mode nothing leaves the machine; the would-be pushes are
    reported instead. The first failing push aborts the rest.
    """
    if dry_run:
        console.print(f"Will push to branch: {branch}")
        for tag in tags:
            console.print(f"Will push tag: {tag}")
        return Ok(None)

    for ref in (branch, *tags):
        result = repo.push(ref)
        if isinstance(result, Err):
            hint = result.error.message
            if ref != branch:
                hint = f"{hint}; branch {branch} was already pushed"
            return Err(
                ReleaseError(
                    kind="push_failed",
                    message=f"git push failed: {ref}",
                    hint=hint,
                )
            )
    return Ok(None)
