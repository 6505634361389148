from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from modpub.core.config import ReleaseConfig, load_release_config
from modpub.core.errors import ErrorCode
from modpub.core.result import Err
from modpub.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(*, config_path: Path | None = None) -> CLIContext:
    """Load configuration once from the environment and optional file."""
    result = load_release_config(env=os.environ, config_path=config_path)
    if isinstance(result, Err):
        where = f" ({result.error.path})" if result.error.path else ""
        typer.echo(f"error: {result.error.message}{where}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(config=result.value, console=RichConsole())
