"""Git repository abstraction.

``Repository`` drives the git client through an injected ``ProcessRunner``
and returns ``Result`` values for every operation. Commands are echoed to
the console (when one is given) before they run, with secrets such as the
clone token replaced by ``***``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from modpub.core.result import Err, Ok, Result
from modpub.output.console import ConsoleProtocol, Style
from modpub.platform.process import ProcessError, ProcessRunner

__all__ = [
    "GitError",
    "Repository",
    "read_git_config",
    "redact",
]

_REDACTED = "***"


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push")
        message: Error message, with secrets redacted
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def redact(text: str, secrets: Iterable[str]) -> str:
    """Replace every non-empty secret in ``text``."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, _REDACTED)
    return text


def _git_error(args: list[str], error: ProcessError, secrets: tuple[str, ...]) -> GitError:
    command = args[0] if args else ""
    message = redact(error.detail, secrets) or f"git {command} failed"
    return GitError(command=command, message=message, returncode=error.returncode)


def read_git_config(
    key: str,
    *,
    runner: ProcessRunner,
    cwd: Path,
) -> Result[str | None, GitError]:
    """Read a value from the ambient git configuration.

    ``git config`` exits 1 when the key is unset; that is reported as
    ``Ok(None)`` rather than an error.
    """
    args = ["config", key]
    result = runner.run(["git", *args], cwd=cwd)
    match result:
        case Ok(stdout):
            return Ok(stdout.strip() or None)
        case Err(e) if e.returncode == 1:
            return Ok(None)
        case Err(e):
            return Err(_git_error(args, e, ()))


class Repository:
    """A local git working tree.

    Attributes:
        path: Path to the repository root
    """

    def __init__(
        self,
        path: Path,
        *,
        runner: ProcessRunner,
        console: ConsoleProtocol | None = None,
        secrets: Iterable[str] = (),
    ) -> None:
        self.path = path
        self._runner = runner
        self._console = console
        self._secrets = tuple(s for s in secrets if s)

    @classmethod
    def clone(
        cls,
        url: str,
        target: Path,
        *,
        runner: ProcessRunner,
        console: ConsoleProtocol | None = None,
        secrets: Iterable[str] = (),
    ) -> Result[Repository, GitError]:
        """Clone ``url`` into ``target`` (which must not exist yet)."""
        repo = cls(target, runner=runner, console=console, secrets=secrets)
        result = repo._run(["clone", url, str(target)], cwd=target.parent)
        if isinstance(result, Err):
            return result
        return Ok(repo)

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    def checkout(self, branch: str) -> Result[None, GitError]:
        return self._run(["checkout", branch]).map(lambda _: None)

    def create_branch(self, branch: str) -> Result[None, GitError]:
        return self._run(["checkout", "-b", branch]).map(lambda _: None)

    def add_all(self) -> Result[None, GitError]:
        return self._run(["add", "."]).map(lambda _: None)

    def has_staged_changes(self) -> Result[bool, GitError]:
        """Check whether the index differs from HEAD.

        On a branch without commits yet, any staged entry counts as a change.
        """
        args = ["diff-index", "--quiet", "--cached", "HEAD", "--"]
        result = self._runner.run(["git", *args], cwd=self.path)
        match result:
            case Ok(_):
                return Ok(False)
            case Err(e) if e.returncode == 1:
                return Ok(True)
            case Err(e):
                head = self._runner.run(
                    ["git", "rev-parse", "--verify", "--quiet", "HEAD"], cwd=self.path
                )
                if isinstance(head, Ok):
                    return Err(_git_error(args, e, self._secrets))

        status = self._run(["status", "--porcelain"], echo=False)
        if isinstance(status, Err):
            return status
        return Ok(bool(status.value.strip()))

    def set_config(self, key: str, value: str) -> Result[None, GitError]:
        return self._run(["config", key, value]).map(lambda _: None)

    def commit(self, message: str) -> Result[None, GitError]:
        return self._run(["commit", "-m", message]).map(lambda _: None)

    def tag_annotated(self, name: str, message: str) -> Result[None, GitError]:
        return self._run(["tag", "-a", name, "-m", message]).map(lambda _: None)

    def push(self, ref: str, *, remote: str = "origin") -> Result[None, GitError]:
        return self._run(["push", remote, ref]).map(lambda _: None)

    def _run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        echo: bool = True,
    ) -> Result[str, GitError]:
        if echo and self._console is not None:
            self._console.print(redact(" ".join(["git", *args]), self._secrets), Style.DIM)
        result = self._runner.run(["git", *args], cwd=cwd or self.path)
        if isinstance(result, Err):
            return Err(_git_error(args, result.error, self._secrets))
        return Ok(result.value)
