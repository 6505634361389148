"""Per-session registry usage directory."""

from .usage_dir import DEFAULT_USAGE_DIR, UsageDir, UsageDirError

__all__ = [
    "DEFAULT_USAGE_DIR",
    "UsageDir",
    "UsageDirError",
]
