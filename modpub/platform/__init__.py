"""Platform layer: subprocess execution and filesystem helpers."""

from .process import ProcessError, ProcessRunner, SubprocessRunner, which

__all__ = [
    "ProcessError",
    "ProcessRunner",
    "SubprocessRunner",
    "which",
]
