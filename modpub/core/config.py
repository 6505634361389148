"""Release configuration.

All ambient settings are collected here once, at startup, into a frozen
``ReleaseConfig`` that is then passed explicitly to the release components.

Sources, highest priority first:

1. command-line flags (applied by the CLI with ``dataclasses.replace``)
2. environment variables (``VERSION``, ``GIT_BRANCH``, ``DRY_RUN``, ...)
3. the ``[release]`` table of ``modpub.toml``
4. built-in defaults

The authentication token is only ever read from the environment.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, get_bool, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_BRANCH",
    "DEFAULT_CLONE_HOST",
    "DEFAULT_STAGING_DIR",
    "ConfigError",
    "ReleaseConfig",
    "load_release_config",
]

CONFIG_FILENAME = "modpub.toml"

DEFAULT_STAGING_DIR = "dist/go"
DEFAULT_BRANCH = "main"
DEFAULT_CLONE_HOST = "github.com"

_STR_KEYS = (
    "dir",
    "version",
    "branch",
    "git_user_name",
    "git_user_email",
    "commit_message",
    "clone_host",
)
_BOOL_KEYS = ("dry_run", "keep_workspace")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration cannot be loaded or is malformed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Settings for a single release run.

    Attributes:
        staging_dir: Directory holding the staged modules.
        version: Global version override applied to every module.
        branch: Branch to commit and push to.
        dry_run: Create commit and tags locally but never push.
        git_user_name: Committer name override (ambient git config otherwise).
        git_user_email: Committer email override (ambient git config otherwise).
        commit_message: Commit message override.
        token: Token used to authenticate the clone.
        clone_host: Host serving the target repository.
        keep_workspace: Leave the temporary clone behind after a successful run.
    """

    staging_dir: Path = Path(DEFAULT_STAGING_DIR)
    version: str | None = None
    branch: str = DEFAULT_BRANCH
    dry_run: bool = False
    git_user_name: str | None = None
    git_user_email: str | None = None
    commit_message: str | None = None
    token: str | None = None
    clone_host: str = DEFAULT_CLONE_HOST
    keep_workspace: bool = False

    @classmethod
    def from_sources(
        cls,
        *,
        env: Mapping[str, str],
        file_table: Mapping[str, object] | None = None,
    ) -> ReleaseConfig:
        """Merge a ``[release]`` table and environment variables."""
        table: Mapping[str, object] = file_table or {}

        def pick(env_key: str, file_key: str) -> str | None:
            value = env.get(env_key, "").strip()
            if value:
                return value
            return get_str(table, file_key)

        def pick_bool(env_key: str, file_key: str) -> bool:
            raw = env.get(env_key)
            if raw is not None and raw.strip():
                return _parse_bool(raw)
            return get_bool(table, file_key) or False

        return cls(
            staging_dir=Path(pick("MODPUB_DIR", "dir") or DEFAULT_STAGING_DIR),
            version=pick("VERSION", "version"),
            branch=pick("GIT_BRANCH", "branch") or DEFAULT_BRANCH,
            dry_run=pick_bool("DRY_RUN", "dry_run"),
            git_user_name=pick("GIT_USER_NAME", "git_user_name"),
            git_user_email=pick("GIT_USER_EMAIL", "git_user_email"),
            commit_message=pick("GIT_COMMIT_MESSAGE", "commit_message"),
            token=env.get("GITHUB_TOKEN", "").strip() or None,
            clone_host=pick("GIT_HOST", "clone_host") or DEFAULT_CLONE_HOST,
            keep_workspace=pick_bool("KEEP_WORKSPACE", "keep_workspace"),
        )


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() == "true"


def _read_release_table(path: Path) -> Result[StrDict, ConfigError]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return Ok({})
    except OSError as e:
        return Err(ConfigError(f"Error reading {path}: {e}", path=path))

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Invalid UTF-8 in config: {e}", path=path))

    if "release" in data and get_table(data, "release") is None:
        return Err(ConfigError("[release] must be a table", path=path))
    table = get_table(data, "release") or {}

    if "token" in table:
        return Err(
            ConfigError("token must not be stored in config; set GITHUB_TOKEN", path=path)
        )
    for key in _STR_KEYS:
        if key in table and not isinstance(table[key], str):
            return Err(ConfigError(f"release.{key} must be a string", path=path))
    for key in _BOOL_KEYS:
        if key in table and not isinstance(table[key], bool):
            return Err(ConfigError(f"release.{key} must be a boolean", path=path))

    return Ok(table)


def load_release_config(
    *,
    env: Mapping[str, str],
    config_path: Path | None = None,
) -> Result[ReleaseConfig, ConfigError]:
    """Build the release configuration from environment and optional file.

    Args:
        env: Environment mapping (usually ``os.environ``).
        config_path: TOML file with a ``[release]`` table. A missing file is
            not an error.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) if the file is invalid.
    """
    table: StrDict = {}
    if config_path is not None:
        result = _read_release_table(config_path)
        if isinstance(result, Err):
            return result
        table = result.value

    return Ok(ReleaseConfig.from_sources(env=env, file_table=table))
