"""CLI entry point for hunkstage.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from hunkstage.cli.config import config_app
from hunkstage.cli.main import (
    discard_command,
    goto_command,
    main_callback,
    select_command,
    stage_command,
    status_command,
    unstage_command,
    yank_command,
)
from hunkstage.cli.utils import colorize_status, format_status, run_in_buffer

# Main application
app = typer.Typer(
    name="hunkstage",
    help="hunkstage: foldable git status with hunk and line staging",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("status")(status_command)
app.command("select")(select_command)
app.command("stage")(stage_command)
app.command("unstage")(unstage_command)
app.command("discard")(discard_command)
app.command("goto")(goto_command)
app.command("yank")(yank_command)

# Logging setup and --version
app.callback()(main_callback)


__all__ = [
    "app",
    "config_app",
    "colorize_status",
    "format_status",
    "run_in_buffer",
]
