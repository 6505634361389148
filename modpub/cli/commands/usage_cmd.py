from __future__ import annotations

from pathlib import Path

import typer

from modpub.cli.commands._helpers import exit_on_error, exit_with_code
from modpub.core.errors import ErrorCode
from modpub.output.console import ConsoleProtocol, RichConsole, Style
from modpub.usage.usage_dir import DEFAULT_USAGE_DIR, UsageDir

usage_app = typer.Typer(add_completion=False, no_args_is_help=True)

_DIR_OPTION = typer.Option(DEFAULT_USAGE_DIR, "--dir", help="Usage directory")


def _console() -> ConsoleProtocol:
    return RichConsole()


@usage_app.command("show")
def show(directory: Path = _DIR_OPTION) -> None:
    """Print the staged environment and whether it is still valid."""
    console = _console()
    usage = UsageDir(directory)
    env = usage.current_env()
    exit_on_error(env, console)

    console.print(f"usage dir: {usage.directory}", Style.DIM)
    for key, value in sorted(env.unwrap().items()):
        console.print(f"{key}={value}")
    if usage.is_valid():
        console.success("settings are valid")
    else:
        console.warning("settings are missing or expired")
        exit_with_code(int(ErrorCode.ENV_ERROR))


@usage_app.command("reset")
def reset(directory: Path = _DIR_OPTION) -> None:
    """Recreate an empty usage directory."""
    console = _console()
    usage = UsageDir(directory)
    exit_on_error(usage.reset(), console)
    console.success(f"reset {usage.directory}")
    usage.advertise(console)


@usage_app.command("delete")
def delete(directory: Path = _DIR_OPTION) -> None:
    """Remove the usage directory."""
    console = _console()
    usage = UsageDir(directory)
    exit_on_error(usage.delete(), console)
    console.success(f"deleted {usage.directory}")


@usage_app.command("activate")
def activate(directory: Path = _DIR_OPTION) -> None:
    """Show how to load the settings into the current shell."""
    console = _console()
    usage = UsageDir(directory)
    if not usage.is_valid():
        console.warning("settings are missing or expired")
    usage.advertise(console)
