"""Status buffer commands.

Line numbers given to these commands refer to the buffer printed by
`hunkstage status` with the same --depth and --width.
"""

from typing import Optional

import typer

from hunkstage import __version__
from hunkstage.cli.utils import CLI_ERRORS, fail, format_status, printable, run_in_buffer
from hunkstage.log import configure_logging
from hunkstage.status.buffer import StatusBuffer
from hunkstage.status.navigation import CommitTarget, FileTarget

DEPTH_OPTION = typer.Option(
    None,
    "--depth",
    "-d",
    min=1,
    max=4,
    help="Fold depth: 1 sections, 2 files, 3 hunks, 4 everything open",
)
WIDTH_OPTION = typer.Option(
    None,
    "--width",
    "-w",
    help="Terminal width used to lay out file lines",
)
PARTIAL_OPTION = typer.Option(
    False,
    "--partial",
    "-p",
    help="Act on the selected diff lines only instead of whole hunks",
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hunkstage {__version__}")
        raise typer.Exit()


def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug events to stderr",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """hunkstage: foldable git status with hunk and line staging."""
    configure_logging(level="debug" if verbose else None)


def status_command(
    depth: Optional[int] = DEPTH_OPTION,
    width: Optional[int] = WIDTH_OPTION,
    numbers: bool = typer.Option(
        False,
        "--numbers",
        "-n",
        help="Show line numbers",
    ),
    color: bool = typer.Option(
        True,
        "--color/--no-color",
        help="Colorize the output",
    ),
) -> None:
    """Show the status buffer."""

    async def action(buffer: StatusBuffer) -> str:
        return format_status(buffer.rendered, numbers=numbers, color=color)

    try:
        typer.echo(run_in_buffer(action, depth=depth, width=width))
    except CLI_ERRORS as e:
        fail(e)


def select_command(
    first: int = typer.Argument(..., help="First buffer line"),
    last: Optional[int] = typer.Argument(None, help="Last buffer line (defaults to FIRST)"),
    depth: Optional[int] = DEPTH_OPTION,
    width: Optional[int] = WIDTH_OPTION,
) -> None:
    """Show what a line range selects."""

    async def action(buffer: StatusBuffer) -> str:
        buffer.select_lines(first, last or first)
        return printable(buffer.selection().format())

    try:
        typer.echo(run_in_buffer(action, depth=depth, width=width))
    except CLI_ERRORS as e:
        fail(e)


def stage_command(
    first: int = typer.Argument(..., help="First buffer line"),
    last: Optional[int] = typer.Argument(None, help="Last buffer line (defaults to FIRST)"),
    partial: bool = PARTIAL_OPTION,
    depth: Optional[int] = DEPTH_OPTION,
    width: Optional[int] = WIDTH_OPTION,
) -> None:
    """Stage the files, hunks or lines in a line range."""

    async def action(buffer: StatusBuffer) -> str:
        buffer.select_lines(first, last or first)
        await buffer.stage(partial=partial)
        return format_status(buffer.rendered, numbers=True)

    try:
        typer.echo(run_in_buffer(action, depth=depth, width=width))
    except CLI_ERRORS as e:
        fail(e)


def unstage_command(
    first: int = typer.Argument(..., help="First buffer line"),
    last: Optional[int] = typer.Argument(None, help="Last buffer line (defaults to FIRST)"),
    partial: bool = PARTIAL_OPTION,
    depth: Optional[int] = DEPTH_OPTION,
    width: Optional[int] = WIDTH_OPTION,
) -> None:
    """Unstage the files, hunks or lines in a line range."""

    async def action(buffer: StatusBuffer) -> str:
        buffer.select_lines(first, last or first)
        await buffer.unstage(partial=partial)
        return format_status(buffer.rendered, numbers=True)

    try:
        typer.echo(run_in_buffer(action, depth=depth, width=width))
    except CLI_ERRORS as e:
        fail(e)


def discard_command(
    first: int = typer.Argument(..., help="First buffer line"),
    last: Optional[int] = typer.Argument(None, help="Last buffer line (defaults to FIRST)"),
    partial: bool = PARTIAL_OPTION,
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation",
    ),
    depth: Optional[int] = DEPTH_OPTION,
    width: Optional[int] = WIDTH_OPTION,
) -> None:
    """Discard the changes in a line range."""

    def confirm(message: str) -> bool:
        return yes or typer.confirm(printable(message), default=False)

    async def action(buffer: StatusBuffer) -> Optional[str]:
        buffer.select_lines(first, last or first)
        if not await buffer.discard(confirm, partial=partial):
            return None
        return format_status(buffer.rendered, numbers=True)

    try:
        output = run_in_buffer(action, depth=depth, width=width)
    except CLI_ERRORS as e:
        fail(e)

    if output is None:
        typer.echo("Nothing discarded.")
    else:
        typer.echo(output)


def goto_command(
    line: int = typer.Argument(..., help="Buffer line"),
    col: int = typer.Option(0, "--col", "-c", help="Cursor column on the line"),
    depth: Optional[int] = DEPTH_OPTION,
    width: Optional[int] = WIDTH_OPTION,
) -> None:
    """Print the file position or commit a buffer line points at."""

    async def action(buffer: StatusBuffer):
        return buffer.goto(line, col)

    try:
        target = run_in_buffer(action, depth=depth, width=width)
    except CLI_ERRORS as e:
        fail(e)

    if isinstance(target, FileTarget):
        if target.is_submodule:
            typer.echo(printable(f"{target.path} (submodule)"))
        elif target.row is not None:
            typer.echo(printable(f"{target.path}:{target.row}:{target.col + 1}"))
        else:
            typer.echo(printable(str(target.path)))
    elif isinstance(target, CommitTarget):
        typer.echo(target.ref)
    else:
        typer.echo("Nothing to open on this line.")
        raise typer.Exit(1)


def yank_command(
    first: int = typer.Argument(..., help="First buffer line"),
    last: Optional[int] = typer.Argument(None, help="Last buffer line (defaults to FIRST)"),
    depth: Optional[int] = DEPTH_OPTION,
    width: Optional[int] = WIDTH_OPTION,
) -> None:
    """Print the oid, file name or ref that a line range selects."""

    async def action(buffer: StatusBuffer) -> Optional[str]:
        buffer.select_lines(first, last or first)
        return buffer.yank_selected()

    try:
        value = run_in_buffer(action, depth=depth, width=width)
    except CLI_ERRORS as e:
        fail(e)

    if value is None:
        raise typer.Exit(1)
    typer.echo(printable(value))
