"""Cursor motions and jump targets.

Contains:
- FileTarget / CommitTarget: What "go to" opens for a line
- goto_target: Resolve the jump target under a buffer line
- next_hunk_line / previous_hunk_line: Hunk header motions within a section
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from hunkstage.status.exceptions import StatusError
from hunkstage.status.locate import resolve
from hunkstage.status.models import Hunk, Item, StatusTree
from hunkstage.status.patch import hunks_in_range, jump_row


@dataclass
class FileTarget:
    """A worktree file to open, optionally at a row and column."""

    path: Path
    row: Optional[int] = None
    col: Optional[int] = None
    is_submodule: bool = False


@dataclass
class CommitTarget:
    """A commit (or ref) to show."""

    ref: str


Target = Union[FileTarget, CommitTarget]


def goto_target(tree: StatusTree, line: int, col: int = 0) -> Optional[Target]:
    """Find what to open for a buffer line.

    File items open the worktree file; inside a hunk the row follows the
    line under the cursor. Commit items and header rows show the commit.

    Raises:
        StatusError: If the file item has no path.
    """
    location = resolve(tree, line)
    section, item = location.section, location.item
    if section is None:
        return None

    if item is None:
        if section.is_header and section.ref:
            return CommitTarget(ref=section.ref)
        return None

    if section.has_commits:
        return CommitTarget(ref=item.oid or item.name.split(" ")[0].rstrip(":"))

    if item.absolute_path is None:
        raise StatusError("Cannot open file. No path found.")

    if item.submodule:
        return FileTarget(path=item.absolute_path, is_submodule=True)

    selected = hunks_in_range(item, line, line, False)
    if not selected:
        return FileTarget(path=item.absolute_path)

    return FileTarget(
        path=item.absolute_path,
        row=jump_row(selected[0], line),
        col=max(0, col - 1),
    )


def _position(items: list[Item], item: Item) -> int:
    return next(i for i, candidate in enumerate(items) if candidate is item)


def _rendered_hunks(item: Item) -> list[Hunk]:
    return [hunk for hunk in item.hunks or [] if hunk.rendered]


def next_hunk_line(tree: StatusTree, line: int) -> Optional[int]:
    """Line of the next hunk header after `line`, within the same section."""
    location = resolve(tree, line)
    if location.item is None:
        return None

    items = location.section.items
    start = _position(items, location.item)
    for item in items[start:]:
        for hunk in _rendered_hunks(item):
            if hunk.first > line:
                return hunk.first
    return None


def previous_hunk_line(tree: StatusTree, line: int) -> Optional[int]:
    """Line of the hunk header above `line`, within the same section.

    Inside a hunk body this is the header of that hunk.
    """
    location = resolve(tree, line)
    if location.item is None:
        return None

    items = location.section.items
    start = _position(items, location.item)
    for item in reversed(items[:start + 1]):
        for hunk in reversed(_rendered_hunks(item)):
            if hunk.first < line:
                return hunk.first
    return None
