from __future__ import annotations

from pathlib import Path

import pytest

from modpub.core.result import Err, Ok, Result
from modpub.platform.process import ProcessError


class FakeRunner:
    """ProcessRunner double: records commands and answers by command prefix."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.cwds: list[Path] = []
        self._failures: list[tuple[tuple[str, ...], int, str]] = []
        self._outputs: list[tuple[tuple[str, ...], str]] = []

    def fail(self, *prefix: str, returncode: int = 1, stderr: str = "boom") -> None:
        self._failures.append((prefix, returncode, stderr))

    def respond(self, *prefix: str, stdout: str) -> None:
        self._outputs.append((prefix, stdout))

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del env, timeout
        self.calls.append(list(cmd))
        self.cwds.append(cwd)
        for prefix, returncode, stderr in self._failures:
            if tuple(cmd[: len(prefix)]) == prefix:
                return Err(ProcessError(tuple(cmd), returncode, "", stderr))
        for prefix, stdout in self._outputs:
            if tuple(cmd[: len(prefix)]) == prefix:
                return Ok(stdout)
        return Ok("")

    def git_calls(self) -> list[list[str]]:
        return [c[1:] for c in self.calls if c and c[0] == "git"]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


def write_module(directory: Path, import_path: str, version: str | None = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "go.mod").write_text(f"module {import_path}\n\ngo 1.21\n", encoding="utf-8")
    if version is not None:
        (directory / "version").write_text(version, encoding="utf-8")
    return directory


@pytest.fixture
def make_module():
    return write_module
