"""Subprocess execution with Result-based error handling.

Every external command (mostly the git client) goes through a
``ProcessRunner``. The default ``SubprocessRunner`` wraps ``subprocess.run``;
tests substitute a fake that records commands and returns canned output.

Usage:
    runner = SubprocessRunner()
    match runner.run(["git", "status"], cwd=repo_path):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from modpub.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessRunner", "SubprocessRunner", "which"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"

    @property
    def detail(self) -> str:
        """Best available diagnostic text."""
        return self.stderr.strip() or self.stdout.strip()


class ProcessRunner(Protocol):
    """Executes external commands."""

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        """Run ``cmd`` in ``cwd`` and return its stdout.

        Returns:
            Ok(stdout) on exit 0, Err(ProcessError) otherwise.
        """
        ...


class SubprocessRunner:
    """``ProcessRunner`` backed by ``subprocess.run``."""

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd),
                env=env,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            return Err(
                ProcessError(
                    command=tuple(cmd),
                    returncode=-1,
                    stdout=e.stdout if isinstance(e.stdout, str) else "",
                    stderr=f"Command timed out after {timeout}s",
                )
            )
        except OSError as e:
            return Err(
                ProcessError(
                    command=tuple(cmd),
                    returncode=-1,
                    stdout="",
                    stderr=str(e),
                )
            )

        if proc.returncode != 0:
            return Err(
                ProcessError(
                    command=tuple(cmd),
                    returncode=proc.returncode,
                    stdout=proc.stdout,
                    stderr=proc.stderr,
                )
            )

        return Ok(proc.stdout)


def which(name: str) -> Path | None:
    """Locate an executable on PATH."""
    found = shutil.which(name)
    return Path(found) if found else None
