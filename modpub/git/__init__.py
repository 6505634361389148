"""Git client wrapper.

Thin, Result-returning layer over the ``git`` executable.

Usage:
    from modpub.git import Repository

    match Repository.clone(url, target, runner=runner):
        case Ok(repo):
            repo.checkout("main")
        case Err(e):
            print(e.message)
"""

from .repository import GitError, Repository, read_git_config

__all__ = [
    "GitError",
    "Repository",
    "read_git_config",
]
