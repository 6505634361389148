"""Staging directory scan for publishable modules."""

from __future__ import annotations

from pathlib import Path

from modpub.core.result import Err, Ok, Result
from modpub.release.errors import ReleaseError
from modpub.release.model import MODULE_FILE, Module


def is_module_dir(path: Path) -> bool:
    return path.is_dir() and (path / MODULE_FILE).is_file()


def collect_modules(staging_dir: Path) -> Result[list[Module], ReleaseError]:
    """Return the modules staged under ``staging_dir``.

    The staging directory itself is the root module when it holds a module
    file; every immediate child directory holding one is a submodule.
    Children are visited in name order so runs are reproducible.
    """
    if not staging_dir.is_dir():
        return Err(
            ReleaseError(
                kind="staging_missing",
                message=f"staging directory not found: {staging_dir}",
                hint="Build the modules first or pass --dir.",
            )
        )

    modules: list[Module] = []
    if is_module_dir(staging_dir):
        modules.append(Module(path=staging_dir, is_root=True))

    for child in sorted(staging_dir.iterdir(), key=lambda p: p.name):
        if is_module_dir(child):
            modules.append(Module(path=child, is_root=False))

    return Ok(modules)
