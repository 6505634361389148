"""Module release workflow.

Discovery -> repository resolution -> versioning -> clone/sync/commit ->
tag/push. ``ModuleReleaser`` in ``service`` sequences the steps; each step
lives in its own module and can be exercised on its own.
"""

from __future__ import annotations

from .errors import ReleaseError
from .model import Module, ReleaseOutcome, RepositoryTarget
from .service import ModuleReleaser

__all__ = [
    "Module",
    "ModuleReleaser",
    "ReleaseError",
    "ReleaseOutcome",
    "RepositoryTarget",
]
