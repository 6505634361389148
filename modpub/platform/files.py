"""Filesystem helpers."""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path

__all__ = [
    "atomic_write_text",
    "clear_directory",
    "copy_directory_contents",
    "load_lines",
    "remove_path",
    "update_ini_key",
    "write_lines",
]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


def clear_directory(root: Path, *, exclude: Iterable[str] = ()) -> list[Path]:
    """Delete every entry directly under ``root`` except the excluded names.

    ``root`` itself is kept.

    Returns:
        The removed entries.
    """
    keep = set(exclude)
    removed: list[Path] = []
    for entry in sorted(root.iterdir()):
        if entry.name in keep:
            continue
        remove_path(entry)
        removed.append(entry)
    return removed


def copy_directory_contents(src: Path, dst: Path) -> None:
    """Copy everything under ``src`` into ``dst``, merging with what is there.

    Hidden entries are copied too. Existing files are overwritten.
    """
    dst.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        target = dst / entry.name
        if entry.is_dir() and not entry.is_symlink():
            shutil.copytree(entry, target, symlinks=True, dirs_exist_ok=True)
        else:
            shutil.copy2(entry, target, follow_symlinks=False)


def load_lines(path: Path) -> list[str]:
    """Read a text file as lines; a missing file yields no lines."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    return text.splitlines()


def write_lines(path: Path, lines: Iterable[str]) -> None:
    atomic_write_text(path, "".join(f"{line}\n" for line in lines))


def update_ini_key(lines: list[str], key: str, value: str) -> None:
    """Set ``key=value`` in place, replacing an existing assignment or appending."""
    pattern = re.compile(rf"^{re.escape(key)}\s*=")
    for i, line in enumerate(lines):
        if pattern.match(line):
            lines[i] = f"{key}={value}"
            return
    lines.append(f"{key}={value}")
