"""Status buffer for hunkstage.

This package provides the interactive status view with:
- models: StatusTree and its Section/Item/Hunk nodes
- builder: build a StatusTree from a RepositorySnapshot
- locate: map buffer lines to nodes, save and restore the cursor
- selection: compute what a line range selects
- patch: partial patches for staging, unstaging and discarding
- refresh: RefreshLock and RefreshCoordinator
- navigation: jump targets and hunk motions
- decorate: per-line highlights
- buffer: StatusBuffer commands
- registry: StatusRegistry
"""

from hunkstage.status.exceptions import OperationError, StatusError
from hunkstage.status.models import (
    FoldSign,
    Hunk,
    Item,
    LineTag,
    RenderedBuffer,
    Section,
    SectionKind,
    StatusTree,
)
from hunkstage.status.builder import build
from hunkstage.status.locate import CursorLocation, Location, resolve, restore_cursor, save_cursor
from hunkstage.status.selection import Selection, SectionSelection, select
from hunkstage.status.patch import SelectedHunk, generate_patch, hunks_in_range, jump_row
from hunkstage.status.refresh import Permit, RefreshCoordinator, RefreshLock, StatusState
from hunkstage.status.navigation import CommitTarget, FileTarget
from hunkstage.status.decorate import Decoration, Highlight
from hunkstage.status.buffer import DEPTH_PRESETS, StatusBuffer, format_discard_message
from hunkstage.status.registry import StatusRegistry


__all__ = [
    # Exceptions
    "OperationError",
    "StatusError",
    # Models
    "FoldSign",
    "Hunk",
    "Item",
    "LineTag",
    "RenderedBuffer",
    "Section",
    "SectionKind",
    "StatusTree",
    # Builder / locate / selection
    "build",
    "CursorLocation",
    "Location",
    "resolve",
    "restore_cursor",
    "save_cursor",
    "Selection",
    "SectionSelection",
    "select",
    # Patches
    "SelectedHunk",
    "generate_patch",
    "hunks_in_range",
    "jump_row",
    # Refresh
    "Permit",
    "RefreshCoordinator",
    "RefreshLock",
    "StatusState",
    # Buffer
    "CommitTarget",
    "FileTarget",
    "Decoration",
    "Highlight",
    "DEPTH_PRESETS",
    "StatusBuffer",
    "format_discard_message",
    "StatusRegistry",
]
