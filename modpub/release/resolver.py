"""Repository resolution from module declarations.

Each module file declares an import path ``host/owner/repo[/sub...]``.
All staged modules must live in the same ``owner/repo``; anything else is
rejected before a clone is attempted.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from modpub.core.result import Err, Ok, Result
from modpub.release.errors import ReleaseError
from modpub.release.model import Module, RepositoryTarget

_DECLARATION_KEYWORD = "module"


def find_module_declaration(mod_file: Path) -> Result[str, ReleaseError]:
    """Return the import path from the first ``module`` line of ``mod_file``."""
    try:
        text = mod_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="io_failed", message=f"cannot read {mod_file}: {e}"))

    for line in text.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == _DECLARATION_KEYWORD:
            return Ok(parts[1].strip('"`'))

    return Err(
        ReleaseError(
            kind="declaration_missing",
            message=f"No module declaration in file: {mod_file}",
            hint=f"Add a line like '{_DECLARATION_KEYWORD} github.com/<owner>/<repo>'.",
        )
    )


def split_module_path(import_path: str, *, mod_file: Path) -> Result[RepositoryTarget, ReleaseError]:
    segments = import_path.split("/")
    if len(segments) < 3 or not segments[1] or not segments[2]:
        return Err(
            ReleaseError(
                kind="invalid_module_path",
                message=f"cannot derive owner/repo from '{import_path}' in {mod_file}",
                hint="Expected host/owner/repo[/submodule].",
            )
        )
    return Ok(RepositoryTarget(owner=segments[1], name=segments[2]))


def resolve_repository(
    modules: list[Module],
) -> Result[tuple[RepositoryTarget, list[Module]], ReleaseError]:
    """Find the single repository all modules belong to.

    Returns:
        The target and the modules with their ``import_path`` set.
    """
    repos: dict[str, RepositoryTarget] = {}
    resolved: list[Module] = []
    for module in modules:
        declaration = find_module_declaration(module.mod_file)
        if isinstance(declaration, Err):
            return declaration
        target = split_module_path(declaration.value, mod_file=module.mod_file)
        if isinstance(target, Err):
            return target
        repos.setdefault(target.value.slug, target.value)
        resolved.append(replace(module, import_path=declaration.value))

    if not repos:
        return Err(
            ReleaseError(
                kind="no_repository",
                message="Unable to detect repository from module files.",
                hint="No module files were found in the staging directory.",
            )
        )
    if len(repos) > 1:
        return Err(
            ReleaseError(
                kind="multiple_repositories",
                message="Multiple repositories found in module files",
                hint=", ".join(sorted(repos)),
            )
        )

    (target,) = repos.values()
    return Ok((target, resolved))
