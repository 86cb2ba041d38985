"""CLI commands for repository configuration management."""

import typer

from hunkstage.git.exceptions import GitError
from hunkstage.git.runner import get_repo_root
from hunkstage.user_config import (
    SECTION_KEYS,
    ConfigError,
    get_config_file,
    get_status_config,
    set_section_option,
)

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage status configuration in .hunkstage/config.yaml",
    add_completion=False,
)


def _flag(value: bool) -> str:
    return "yes" if value else "no"


@config_app.command("show")
def config_show() -> None:
    """Show the effective status configuration."""
    try:
        repo_root = get_repo_root()
        config = get_status_config(repo_root)
        config_file = get_config_file(repo_root)

        if config_file.exists():
            typer.echo(f"Status configuration ({config_file}):")
        else:
            typer.echo("Status configuration (defaults, no config file):")
        typer.echo()

        typer.echo("  Sections:")
        for key in SECTION_KEYS:
            section = config.section(key)
            typer.echo(f"    {key:<22} folded: {_flag(section.folded):<4} hidden: {_flag(section.hidden)}")
        typer.echo()
        typer.echo(f"  Files folded: {_flag(config.items_folded)}")
        typer.echo(f"  Fold signs: {_flag(not config.disable_signs)}")
        typer.echo(f"  Context highlighting: {_flag(not config.disable_context_highlighting)}")
        typer.echo(f"  Hint line: {_flag(not config.disable_hint)}")
        typer.echo(f"  Recent commits: {config.recent_count}")
        typer.echo(f"  Refresh timeout: {config.refresh_timeout}s")

    except (GitError, ConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@config_app.command("set-fold")
def config_set_fold(
    section: str = typer.Argument(..., help=f"Section key ({', '.join(SECTION_KEYS)})"),
    folded: bool = typer.Option(
        True,
        "--folded/--open",
        help="Whether the section starts folded",
    ),
) -> None:
    """Set whether a section starts folded."""
    try:
        repo_root = get_repo_root()
        set_section_option(repo_root, section, "folded", folded)
        state = "folded" if folded else "open"
        typer.echo(f"✓ Section '{section}' now starts {state}")

    except (GitError, ConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@config_app.command("hide")
def config_hide(
    section: str = typer.Argument(..., help=f"Section key ({', '.join(SECTION_KEYS)})"),
    hidden: bool = typer.Option(
        True,
        "--hidden/--shown",
        help="Whether the section is hidden",
    ),
) -> None:
    """Hide or show a section."""
    try:
        repo_root = get_repo_root()
        set_section_option(repo_root, section, "hidden", hidden)
        state = "hidden" if hidden else "shown"
        typer.echo(f"✓ Section '{section}' is now {state}")

    except (GitError, ConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
