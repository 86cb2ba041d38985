"""Data models for the status tree.

Contains:
- SectionKind: What a section lists (header row, files with diffs, commits)
- LineTag: Semantic tag of one rendered line
- FoldSign: Fold marker placed on a foldable node's first line
- Hunk, Item, Section: Tree nodes with absolute line ranges
- StatusTree: Ordered sections of one rendered buffer
- RenderedBuffer: Text lines plus per-line tags and fold signs
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from hunkstage.git.models import CommitLogEntry, Diff, SubmoduleStatus


class SectionKind(str, Enum):
    HEADER = "header"
    DIFF = "diff"
    COMMITS = "commits"


class LineTag(str, Enum):
    HINT = "hint"
    HEAD = "head"
    BLANK = "blank"
    SECTION = "section"
    ITEM = "item"
    REBASE_DONE = "rebase_done"
    HUNK_HEADER = "hunk_header"
    ADD = "add"
    DELETE = "delete"
    CONTEXT = "context"


class FoldSign(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Hunk:
    """A hunk of an item's diff.

    `first`/`last` are buffer lines (1-based, inclusive) and are None when an
    ancestor is folded. `diff_from`/`diff_to` index into the item's
    `diff.lines`.
    """

    hash: str
    item: str  # Name of the owning item
    diff_from: int
    diff_to: int
    index_from: int
    index_len: int
    disk_from: int
    disk_len: int
    header: str
    folded: bool = False
    first: Optional[int] = None
    last: Optional[int] = None

    @property
    def rendered(self) -> bool:
        return self.first is not None


@dataclass
class Item:
    """A file or commit entry within a section."""

    name: str
    section: str  # Key of the owning section
    folded: bool = True
    first: Optional[int] = None
    last: Optional[int] = None
    hunks: Optional[list[Hunk]] = None
    diff: Optional[Diff] = None
    mode: Optional[str] = None
    original_name: Optional[str] = None
    submodule: Optional[SubmoduleStatus] = None
    absolute_path: Optional[Path] = None
    oid: Optional[str] = None
    commit: Optional[CommitLogEntry] = None

    @property
    def rendered(self) -> bool:
        return self.first is not None


@dataclass
class Section:
    """One status category, or one branch header row."""

    name: str
    kind: SectionKind
    first: int
    last: int
    items: list[Item] = field(default_factory=list)
    folded: bool = False
    ignore_sign: bool = False
    label: str = ""
    ref: Optional[str] = None  # Ref the header row points at
    commit: Optional[str] = None  # Oid the header row points at

    @property
    def is_header(self) -> bool:
        return self.kind is SectionKind.HEADER

    @property
    def has_hunks(self) -> bool:
        return self.kind is SectionKind.DIFF

    @property
    def has_commits(self) -> bool:
        return self.kind is SectionKind.COMMITS


@dataclass
class StatusTree:
    """Sections in render order."""

    sections: list[Section] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.sections)

    def __iter__(self):
        return iter(self.sections)

    def section(self, name: str) -> Optional[Section]:
        for section in self.sections:
            if section.name == name:
                return section
        return None


@dataclass
class RenderedBuffer:
    """The text of the status buffer.

    `tags[n - 1]` describes buffer line `n`; `signs` maps buffer lines to the
    fold marker drawn there.
    """

    lines: list[str] = field(default_factory=list)
    tags: list[LineTag] = field(default_factory=list)
    signs: dict[int, FoldSign] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.lines)

    def line(self, linenr: int) -> Optional[str]:
        if 1 <= linenr <= len(self.lines):
            return self.lines[linenr - 1]
        return None

    def tag(self, linenr: int) -> Optional[LineTag]:
        if 1 <= linenr <= len(self.tags):
            return self.tags[linenr - 1]
        return None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
