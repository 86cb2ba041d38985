"""Status buffer: the commands that act on a status tree.

A StatusBuffer owns the cursor and the visual selection of one repository
view. Every index or worktree mutation runs in a worker thread and is
followed by a refresh, whether it succeeded or not.
"""

import re
from functools import partial as bind
from typing import TYPE_CHECKING, Callable, Optional

import anyio

from hunkstage.git.exceptions import GitError
from hunkstage.git.repo import GitRepository
from hunkstage.log import get_logger
from hunkstage.status.decorate import Decoration, decorate
from hunkstage.status.exceptions import OperationError, StatusError
from hunkstage.status.locate import CursorLocation, restore_cursor, save_cursor
from hunkstage.status.models import Item, RenderedBuffer, StatusTree
from hunkstage.status.navigation import (
    FileTarget,
    Target,
    goto_target,
    next_hunk_line,
    previous_hunk_line,
)
from hunkstage.status.patch import generate_patch, hunks_in_range
from hunkstage.status.refresh import RefreshCoordinator
from hunkstage.status.selection import Selection, select
from hunkstage.user_config import StatusConfig

if TYPE_CHECKING:
    from hunkstage.status.registry import StatusRegistry

logger = get_logger(__name__)

# (sections, items, hunks) folded for each depth level
DEPTH_PRESETS = {
    1: (True, True, False),
    2: (False, True, False),
    3: (False, False, True),
    4: (False, False, False),
}

_STASH_RE = re.compile(r"^(stash@\{\d+\})")

# Staged modes whose file does not exist in HEAD
_ADDED_MODES = ("A", "N")


def format_discard_message(files: list[str], hunk_count: int, partial: bool = False) -> str:
    """Build the confirmation prompt for a discard."""
    if partial:
        return "Discard selection?"
    if hunk_count > 0:
        return f"Discard {hunk_count} hunks?"
    if len(files) > 1:
        return f"Discard {len(files)} files?"
    return f'Discard "{files[0]}"?'


class StatusBuffer:
    """Interactive status view of one repository.

    Args:
        repo: The repository.
        config: Display configuration.
        width: Terminal width used for rendering.
        registry: Registry this buffer is tracked in, if any.
    """

    def __init__(
        self,
        repo: GitRepository,
        config: StatusConfig,
        width: Optional[int] = None,
        registry: Optional["StatusRegistry"] = None,
    ):
        self.repo = repo
        self.config = config
        self.registry = registry
        self.coordinator = RefreshCoordinator(self._load, config, width)
        self.cursor_col = 0
        self.visual_anchor: Optional[int] = None
        self.closed = False

    @property
    def root(self):
        return self.repo.root

    @property
    def tree(self) -> StatusTree:
        return self.coordinator.tree

    @property
    def rendered(self) -> RenderedBuffer:
        return self.coordinator.rendered

    @property
    def cursor_line(self) -> int:
        return self.coordinator.cursor_line

    def _load(self):
        return self.repo.snapshot(recent_count=self.config.recent_count)

    async def open(self, cursor: Optional[CursorLocation] = None) -> None:
        """Render for the first time, placing the cursor at `cursor` if given."""
        await self.coordinator.refresh("open")
        if cursor is not None:
            self.coordinator.cursor_line = restore_cursor(self.tree, cursor)

    # Cursor and selection

    def move(self, line: int, col: int = 0) -> None:
        """Move the cursor, clamped to the buffer."""
        self.coordinator.cursor_line = max(1, min(line, len(self.rendered) or 1))
        self.cursor_col = max(0, col)

    def select_lines(self, first: int, last: int) -> None:
        """Start a visual selection at `first` with the cursor on `last`."""
        self.move(last)
        self.visual_anchor = max(1, min(first, len(self.rendered) or 1))

    def clear_visual(self) -> None:
        self.visual_anchor = None

    def selection(self) -> Selection:
        anchor = self.visual_anchor if self.visual_anchor is not None else self.cursor_line
        return select(self.tree, anchor, self.cursor_line)

    # Folding

    def toggle(self) -> None:
        """Toggle the fold of the hunks under the selection.

        Falls back to the focal item, then to the section.
        """
        selection = self.selection()
        section = selection.section
        if section is None or section.is_header:
            return

        item = selection.item
        hunks = hunks_in_range(item, selection.first_line, selection.last_line, False) if item else []

        if hunks:
            for selected in hunks:
                selected.hunk.folded = not selected.hunk.folded
            self.coordinator.cursor_line = hunks[0].first
        elif item:
            item.folded = not item.folded
        else:
            section.folded = not section.folded

        self.coordinator.rerender()

    def set_folds(self, section: bool, item: bool, hunk: bool) -> None:
        """Set the fold state of every section, item and hunk."""
        for node in self.tree.sections:
            node.folded = section
            for child in node.items:
                child.folded = item
                for grandchild in child.hunks or []:
                    grandchild.folded = hunk
        self.coordinator.rerender()

    def set_depth(self, depth: int) -> None:
        """Apply a fold preset, from 1 (sections folded) to 4 (all open)."""
        if depth not in DEPTH_PRESETS:
            raise StatusError(f"Invalid fold depth: {depth} (expected 1-4)")
        self.set_folds(*DEPTH_PRESETS[depth])

    # Index and worktree operations

    async def _run(self, name: str, job: Callable[[], None]) -> None:
        logger.debug("operation_start", operation=name)
        try:
            await anyio.to_thread.run_sync(job)
        except GitError as e:
            logger.error("operation_failed", operation=name, error=str(e))
            raise OperationError(name, e) from e
        finally:
            self.clear_visual()
            await self.coordinator.refresh(f"{name}_finish")

    def _stage_selection(self, selection: Selection, partial: bool) -> None:
        files = []
        for section in selection.sections:
            for item in section.items:
                hunks = hunks_in_range(item, selection.first_line, selection.last_line, partial)

                if section.name in ("unstaged", "untracked") and hunks:
                    for selected in hunks:
                        patch = generate_patch(item, selected.hunk, selected.from_, selected.to)
                        self.repo.apply(patch, cached=True)
                elif section.name == "unstaged":
                    self.repo.stage([item.name])
                elif section.name == "untracked":
                    files.append(item.name)
                else:
                    logger.debug("stage_skipped", section=section.name, item=item.name)

        if files:
            self.repo.add(files)

    def _unstage_selection(self, selection: Selection, partial: bool) -> None:
        files = []
        for section in selection.sections:
            if section.name != "staged":
                continue
            for item in section.items:
                hunks = hunks_in_range(item, selection.first_line, selection.last_line, partial)
                if not hunks:
                    files.append(item.name)
                    continue
                for selected in hunks:
                    logger.debug(
                        "unstage_hunk",
                        item=item.name,
                        from_=selected.from_,
                        to=selected.to,
                        index_from=selected.hunk.index_from,
                    )
                    patch = generate_patch(item, selected.hunk, selected.from_, selected.to, reverse=True)
                    self.repo.apply(patch, cached=True)

        if files:
            self.repo.unstage(files)

    async def stage(self, partial: bool = False) -> None:
        """Stage the selection.

        Selected hunks (or lines, with `partial`) are applied to the index
        as patches; items without selected hunks are staged whole. Only
        unstaged and untracked items are affected.

        Raises:
            OperationError: If git rejects the change.
        """
        await self._run("stage", bind(self._stage_selection, self.selection(), partial))

    async def unstage(self, partial: bool = False) -> None:
        """Unstage the selection. Only staged items are affected.

        Raises:
            OperationError: If git rejects the change.
        """
        await self._run("unstage", bind(self._unstage_selection, self.selection(), partial))

    def _discard_item(self, section: str, item: Item) -> None:
        if section == "untracked":
            self.repo.remove_untracked(item.name)
        elif section == "unstaged":
            self.repo.checkout([item.name])
        elif section == "staged":
            self.repo.reset([item.name])
            if item.mode in _ADDED_MODES:
                self.repo.remove_untracked(item.name)
            else:
                self.repo.checkout([item.name])

    def _discard_jobs(self, selection: Selection, partial: bool) -> tuple[list[Callable[[], None]], list[str], int]:
        jobs: list[Callable[[], None]] = []
        files: list[str] = []
        hunk_count = 0

        for section in selection.sections:
            if not section.section.has_hunks:
                continue
            for item in section.items:
                files.append(item.name)
                hunks = hunks_in_range(item, selection.first_line, selection.last_line, partial)

                if not hunks:
                    jobs.append(bind(self._discard_item, section.name, item))
                    continue

                hunk_count += len(hunks)
                for selected in hunks:
                    patch = generate_patch(item, selected.hunk, selected.from_, selected.to, reverse=True)
                    # Staged hunks are removed from both the index and the worktree
                    jobs.append(bind(self.repo.apply, patch, index=section.name == "staged"))

        return jobs, files, hunk_count

    async def discard(self, confirm: Callable[[str], bool], partial: bool = False) -> bool:
        """Discard the selection after confirmation.

        Args:
            confirm: Called with the prompt; nothing is changed unless it
                returns True.
            partial: Discard only the selected lines.

        Returns:
            True if the discard ran.

        Raises:
            OperationError: If git rejects the change.
        """
        selection = self.selection()
        try:
            await anyio.to_thread.run_sync(self.repo.update_index)
        except GitError as e:
            raise OperationError("discard", e) from e

        jobs, files, hunk_count = self._discard_jobs(selection, partial)
        if not jobs:
            return False

        if not confirm(format_discard_message(files, hunk_count, partial)):
            logger.debug("discard_cancelled", files=len(files))
            return False

        def run_jobs() -> None:
            for i, job in enumerate(jobs, 1):
                logger.debug("discard_job", index=i, total=len(jobs))
                job()

        await self._run("discard", run_jobs)
        return True

    async def stage_unstaged(self) -> None:
        """Stage every tracked modification."""
        await self._run("stage_unstaged", self.repo.stage_modified)

    async def stage_all(self) -> None:
        """Stage everything, untracked files included."""
        await self._run("stage_all", self.repo.stage_all)

    async def unstage_staged(self) -> None:
        """Unstage everything."""
        await self._run("unstage_staged", self.repo.unstage_all)

    # Navigation

    def goto(self, line: Optional[int] = None, col: Optional[int] = None) -> Optional[Target]:
        """Resolve what to open for the cursor line.

        Opening a file closes the buffer.

        Raises:
            StatusError: If the file item has no path.
        """
        if line is not None:
            self.move(line, col or 0)
        target = goto_target(self.tree, self.cursor_line, self.cursor_col)
        if isinstance(target, FileTarget):
            self.close()
        return target

    def next_hunk_header(self) -> Optional[int]:
        line = next_hunk_line(self.tree, self.cursor_line)
        if line is not None:
            self.move(line)
        return line

    def previous_hunk_header(self) -> Optional[int]:
        line = previous_hunk_line(self.tree, self.cursor_line)
        if line is not None:
            self.move(line)
        return line

    def yank_selected(self) -> Optional[str]:
        """Get the identifier of what is selected.

        Stash references are resolved to the stash commit oid.
        """
        selection = self.selection()

        if selection.item:
            value = selection.item.oid or selection.item.name
        elif selection.commit:
            value = selection.commit.oid
        elif selection.section and selection.section.ref:
            value = selection.section.ref
        elif selection.section and selection.section.commit:
            value = selection.section.commit
        else:
            return None

        match = _STASH_RE.match(value)
        if match:
            value = self.repo.rev_parse(match.group(1)) or value
        return value

    def decorations(self, first: int = 1, last: Optional[int] = None) -> list[Decoration]:
        return decorate(
            self.tree,
            self.rendered,
            self.cursor_line,
            context_highlighting=not self.config.disable_context_highlighting,
            first=first,
            last=last,
        )

    # Lifecycle

    async def refresh(self, reason: str = "manual") -> bool:
        return await self.coordinator.request_refresh(reason)

    async def reset(self) -> None:
        """Drop all fold state and rebuild from scratch."""
        self.coordinator.reset()
        self.clear_visual()
        await self.coordinator.refresh("reset")

    def close(self) -> Optional[CursorLocation]:
        """Close the buffer and remember the cursor location for the next open."""
        if self.closed:
            return None
        self.closed = True

        location = save_cursor(self.tree, self.cursor_line)
        if self.registry is not None:
            self.registry.forget(self, location)
        return location
