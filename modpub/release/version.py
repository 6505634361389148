from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from modpub.core.result import Err, Ok, Result
from modpub.release.errors import ReleaseError
from modpub.release.model import VERSION_FILE, Module


def extract_version(module_dir: Path, global_version: str | None) -> Result[str, ReleaseError]:
    """Resolve the release version of one module.

    The global override wins over the module's ``version`` file. The file's
    surrounding whitespace (such as a trailing newline) is stripped, and a
    file that is empty after stripping counts as missing.
    """
    if global_version:
        return Ok(global_version)

    version_file = module_dir / VERSION_FILE
    if version_file.is_file():
        try:
            version = version_file.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            return Err(ReleaseError(kind="io_failed", message=f"cannot read {version_file}: {e}"))
        if version:
            return Ok(version)

    return Err(
        ReleaseError(
            kind="version_missing",
            message=f"Unable to determine version of module {module_dir}.",
            hint=(
                f"Either include a '{VERSION_FILE}' file, or specify a global version "
                "using the VERSION environment variable."
            ),
        )
    )


def resolve_versions(
    modules: list[Module], global_version: str | None
) -> Result[list[Module], ReleaseError]:
    out: list[Module] = []
    for module in modules:
        version = extract_version(module.path, global_version)
        if isinstance(version, Err):
            return version
        out.append(replace(module, version=version.value))
    return Ok(out)
