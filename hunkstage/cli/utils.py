"""Shared helpers for CLI commands."""

from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import anyio
import typer

from hunkstage.git.exceptions import GitError
from hunkstage.status.buffer import StatusBuffer
from hunkstage.status.exceptions import StatusError
from hunkstage.status.models import FoldSign, LineTag, RenderedBuffer
from hunkstage.status.registry import StatusRegistry
from hunkstage.user_config import ConfigError

T = TypeVar("T")

# Errors reported as "Error: ..." with exit code 1
CLI_ERRORS = (GitError, StatusError, ConfigError)

_SIGN_TEXT = {FoldSign.OPEN: "v", FoldSign.CLOSED: ">"}


def printable(text: str) -> str:
    """Make git text safe to print.

    Bytes that are not UTF-8 show as U+FFFD and a CR before the line end is
    dropped.
    """
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace").rstrip("\r")


def run_in_buffer(
    action: Callable[[StatusBuffer], Awaitable[T]],
    depth: Optional[int] = None,
    width: Optional[int] = None,
    cwd: Optional[Path] = None,
) -> T:
    """Open a status buffer for the current repository and run `action` on it.

    Args:
        action: Coroutine function receiving the opened buffer.
        depth: Fold preset applied before `action` runs.
        width: Terminal width used for rendering.
        cwd: Directory inside the repository (defaults to the current one).
    """

    async def runner() -> T:
        registry = StatusRegistry()
        buffer = await registry.open(cwd or Path.cwd(), width=width)
        if depth is not None:
            buffer.set_depth(depth)
        try:
            return await action(buffer)
        finally:
            registry.close_all()

    return anyio.run(runner)


def fail(error: Exception) -> None:
    """Print an error and exit with status 1."""
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


def colorize_status(rendered: RenderedBuffer) -> list[str]:
    """Add ANSI color codes to status lines like git diff.

    - Red for removed lines (-)
    - Green for added lines (+)
    - Cyan for hunk headers (@@)
    - Bold for section headers and branch rows

    Args:
        rendered: The rendered status buffer.

    Returns:
        The colorized lines.
    """
    red = "\033[31m"
    green = "\033[32m"
    cyan = "\033[36m"
    bold = "\033[1m"
    reset = "\033[0m"

    styles = {
        LineTag.HUNK_HEADER: cyan,
        LineTag.ADD: green,
        LineTag.DELETE: red,
        LineTag.SECTION: bold,
        LineTag.HEAD: bold,
    }

    colorized = []
    for line, tag in zip(rendered.lines, rendered.tags):
        style = styles.get(tag)
        line = printable(line)
        colorized.append(f"{style}{line}{reset}" if style and line else line)
    return colorized


def format_status(rendered: RenderedBuffer, numbers: bool = False, color: bool = False) -> str:
    """Render the buffer text with a fold sign column.

    Args:
        rendered: The rendered status buffer.
        numbers: Prefix each line with its line number.
        color: Emit ANSI colors.
    """
    lines = colorize_status(rendered) if color else [printable(line) for line in rendered.lines]
    width = len(str(len(lines)))

    output = []
    for linenr, line in enumerate(lines, 1):
        sign = _SIGN_TEXT.get(rendered.signs.get(linenr), " ")
        prefix = f"{linenr:>{width}} " if numbers else ""
        output.append(f"{prefix}{sign} {line}".rstrip())
    return "\n".join(output)
