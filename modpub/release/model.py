from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


MODULE_FILE = "go.mod"
VERSION_FILE = "version"


@dataclass(frozen=True, slots=True)
class Module:
    """A publishable module directory.

    ``import_path`` and ``version`` are filled in by the resolver and the
    version extractor; a module is never modified after that.
    """

    path: Path
    is_root: bool
    import_path: str | None = None
    version: str | None = None

    @property
    def name(self) -> str:
        # The root is often staged as ".", which has no name of its own.
        if self.is_root:
            return self.path.resolve().name
        return self.path.name

    @property
    def mod_file(self) -> Path:
        return self.path / MODULE_FILE


@dataclass(frozen=True, slots=True)
class RepositoryTarget:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    def clone_url(self, *, host: str, token: str) -> str:
        return f"https://{token}@{host}/{self.slug}.git"

    def __str__(self) -> str:
        return self.slug


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """What a release run produced.

    Attributes:
        tags: Tags created, in discovery order (empty for a no-op run).
        workspace: Clone left on disk, if any.
        pushed: Whether branch and tags were pushed.
    """

    tags: tuple[str, ...] = ()
    workspace: Path | None = None
    pushed: bool = False

    @property
    def is_noop(self) -> bool:
        return not self.tags
