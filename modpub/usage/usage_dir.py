"""Per-session configuration for accessing a package registry.

Login steps write what a session needs into the usage directory. Nothing in
it is active until it has been sourced into a shell (``activate.bash``) or
applied to the current process (``UsageDir.activate_in_current_process``).

Layout:

  <dir>/env            KEY=value lines with environment variables to set
  <dir>/cwd/           files copied into the working directory before each command
  <dir>/activate.bash  helper that exports ``env`` and copies ``cwd/``

Other files may be written freely (``put_file``, ``put_json``); they carry no
special meaning.
"""

from __future__ import annotations

import json
import os
import re
import shutil
import time
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path

from modpub.core.result import Err, Ok, Result
from modpub.output.console import ConsoleProtocol
from modpub.platform.files import (
    atomic_write_text,
    copy_directory_contents,
    load_lines,
    update_ini_key,
    write_lines,
)

__all__ = ["DEFAULT_USAGE_DIR", "UsageDir", "UsageDirError"]

DEFAULT_USAGE_DIR = Path.home() / ".modpub" / "usage"

CWD_FILES_DIR = "CWD_FILES_DIR"
EXPIRATION_TIME_MS = "EXPIRATION_TIME_MS"

_ENV_LINE = re.compile(r"^([a-zA-Z0-9_-]+)\s*=\s*(.*)$")

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class UsageDirError:
    message: str
    path: Path | None = None


class UsageDir:
    """A usage directory rooted at ``directory``.

    Args:
        directory: Root of the usage directory.
        clock: Returns the current time in seconds; used for expiration.
    """

    def __init__(self, directory: Path, *, clock: Clock = time.time) -> None:
        self.directory = directory
        self.env_file = directory / "env"
        self.cwd_dir = directory / "cwd"
        self._clock = clock

    @classmethod
    def default(cls) -> UsageDir:
        return cls(DEFAULT_USAGE_DIR)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def is_valid(self) -> bool:
        """True when settings were stored and have not expired."""
        env = self.current_env()
        if isinstance(env, Err):
            return False
        values = env.value
        # reset() always writes CWD_FILES_DIR
        if set(values) <= {CWD_FILES_DIR}:
            return False

        expiration = values.get(EXPIRATION_TIME_MS)
        if expiration is not None:
            try:
                if int(expiration) <= self._now_ms():
                    return False
            except ValueError:
                return False

        return True

    def delete(self) -> Result[None, UsageDirError]:
        try:
            if self.directory.exists():
                shutil.rmtree(self.directory)
        except OSError as e:
            return Err(UsageDirError(f"Could not remove {self.directory}: {e}", path=self.directory))
        return Ok(None)

    def reset(self) -> Result[None, UsageDirError]:
        """Recreate an empty directory with the activation helper."""
        deleted = self.delete()
        if isinstance(deleted, Err):
            return deleted

        try:
            self.cwd_dir.mkdir(parents=True, exist_ok=True)
            self.env_file.write_text("", encoding="utf-8")
        except OSError as e:
            return Err(UsageDirError(f"Could not create {self.directory}: {e}", path=self.directory))

        added = self.add_to_env({CWD_FILES_DIR: str(self.cwd_dir)})
        if isinstance(added, Err):
            return added

        script = "\n".join(
            [
                f'while read -u10 line; do [[ -z $line ]] || export "$line"; done 10<{self.env_file}',
                # copy even when cwd/ is empty
                "cp -R $CWD_FILES_DIR/ .",
            ]
        )
        return self.put_file("activate.bash", script).map(lambda _: None)

    def set_expiration_time_ms(self, timestamp_ms: int) -> Result[None, UsageDirError]:
        return self.add_to_env({EXPIRATION_TIME_MS: str(timestamp_ms)})

    def add_to_env(self, settings: Mapping[str, str]) -> Result[None, UsageDirError]:
        """Add or replace environment variable settings."""
        try:
            lines = load_lines(self.env_file)
            for key, value in settings.items():
                update_ini_key(lines, key, value)
            write_lines(self.env_file, lines)
        except OSError as e:
            return Err(UsageDirError(f"Could not update {self.env_file}: {e}", path=self.env_file))
        return Ok(None)

    def current_env(self) -> Result[dict[str, str], UsageDirError]:
        try:
            lines = load_lines(self.env_file)
        except OSError as e:
            return Err(UsageDirError(f"Could not read {self.env_file}: {e}", path=self.env_file))

        env: dict[str, str] = {}
        for line in lines:
            m = _ENV_LINE.match(line)
            if m:
                env[m.group(1)] = m.group(2)
        return Ok(env)

    def cwd_file(self, filename: str) -> Path:
        return self.cwd_dir / filename

    def activate_in_current_process(
        self,
        *,
        environ: MutableMapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> Result[None, UsageDirError]:
        """Export ``env`` into ``environ`` and copy ``cwd/`` into ``cwd``."""
        env = self.current_env()
        if isinstance(env, Err):
            return env

        target_env = os.environ if environ is None else environ
        target_env.update(env.value)

        dest = cwd or Path.cwd()
        if self.cwd_dir.is_dir():
            try:
                copy_directory_contents(self.cwd_dir, dest)
            except OSError as e:
                return Err(UsageDirError(f"Could not copy {self.cwd_dir}: {e}", path=self.cwd_dir))
        return Ok(None)

    def copy_select_cwd_file_here(
        self, *filenames: str, cwd: Path | None = None
    ) -> Result[None, UsageDirError]:
        dest = cwd or Path.cwd()
        for name in filenames:
            try:
                shutil.copyfile(self.cwd_file(name), dest / name)
            except OSError as e:
                return Err(UsageDirError(f"Could not copy {name}: {e}", path=self.cwd_file(name)))
        return Ok(None)

    def put_file(self, filename: str, contents: str) -> Result[Path, UsageDirError]:
        path = self.directory / filename
        try:
            atomic_write_text(path, contents)
        except OSError as e:
            return Err(UsageDirError(f"Could not write {path}: {e}", path=path))
        return Ok(path)

    def put_cwd_file(self, filename: str, contents: str) -> Result[Path, UsageDirError]:
        path = self.cwd_file(filename)
        try:
            atomic_write_text(path, contents)
        except OSError as e:
            return Err(UsageDirError(f"Could not write {path}: {e}", path=path))
        return Ok(path)

    def put_json(self, key: str, data: object) -> Result[Path, UsageDirError]:
        return self.put_file(f"{key}.json", json.dumps(data))

    def read_json(self, key: str) -> Result[object | None, UsageDirError]:
        """Load ``<key>.json``; a missing file is ``Ok(None)``."""
        path = self.directory / f"{key}.json"
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Ok(None)
        except OSError as e:
            return Err(UsageDirError(f"Could not read {path}: {e}", path=path))

        try:
            return Ok(json.loads(raw))
        except json.JSONDecodeError as e:
            return Err(UsageDirError(f"Invalid JSON in {path}: {e}", path=path))

    def advertise(self, console: ConsoleProtocol) -> None:
        """Tell the operator how to activate these settings."""
        console.print("To activate these settings in the current bash shell:")
        console.print(f"    source {self.directory / 'activate.bash'}")
