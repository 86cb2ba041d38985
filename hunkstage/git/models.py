"""Data models for repository state read from git.

Contains:
- DiffHunk: One hunk of a file diff, addressed by line index into Diff.lines
- Diff: Parsed diff for a single file
- SubmoduleStatus: Dirty flags for a submodule entry
- FileEntry: One changed file in the untracked/unstaged/staged lists
- CommitLogEntry: One commit or stash in a log-like list
- Tag, Head, Upstream, PushRemote: Branch header information
- SectionData: Items of one status section plus an optional progress cursor
- RepositorySnapshot: Everything the status buffer renders for one refresh
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union


@dataclass
class DiffHunk:
    """A hunk inside Diff.lines.

    `diff_from` is the index of the `@@` header line and `diff_to` the index of
    the hunk's last body line (inclusive). `index_from`/`index_len` are the
    old-side range from the header, `disk_from`/`disk_len` the new-side range.
    """

    hash: str
    header: str
    diff_from: int
    diff_to: int
    index_from: int
    index_len: int
    disk_from: int
    disk_len: int


@dataclass
class Diff:
    """Diff for a single file."""

    file: str
    header_lines: list[str]  # From 'diff --git' up to the first @@
    lines: list[str] = field(default_factory=list)  # Hunk headers and bodies
    hunks: list[DiffHunk] = field(default_factory=list)
    is_binary: bool = False


@dataclass
class SubmoduleStatus:
    """Flags from the `S<c><m><u>` field of porcelain v2 status."""

    commit_changed: bool = False
    has_tracked_changes: bool = False
    has_untracked_changes: bool = False


@dataclass
class FileEntry:
    """One file in a diff-bearing section."""

    name: str
    mode: Optional[str] = None
    original_name: Optional[str] = None
    submodule: Optional[SubmoduleStatus] = None
    has_diff: bool = True
    diff: Optional[Diff] = None
    absolute_path: Optional[Path] = None
    done: bool = False


@dataclass
class CommitLogEntry:
    """A commit (or stash) shown in a log-like section."""

    oid: str
    abbrev: str
    subject: str
    name: Optional[str] = None  # Display name, defaults to "<abbrev> <subject>"
    done: bool = False

    @property
    def display_name(self) -> str:
        return self.name or f"{self.abbrev} {self.subject}"


SectionEntry = Union[FileEntry, CommitLogEntry]


@dataclass
class SectionData:
    """Items of one status section.

    `current` is set for sections that track progress (rebase) and renders as
    `<current>/<total>` in the section header.
    """

    items: list[SectionEntry] = field(default_factory=list)
    current: Optional[int] = None


@dataclass
class Tag:
    name: Optional[str] = None
    distance: Optional[int] = None


@dataclass
class Head:
    branch: str = "(detached)"
    oid: Optional[str] = None
    abbrev: Optional[str] = None
    commit_message: Optional[str] = None
    detached: bool = False
    tag: Tag = field(default_factory=Tag)


@dataclass
class Upstream:
    ref: Optional[str] = None  # e.g. "origin/main"
    remote: Optional[str] = None
    branch: Optional[str] = None
    oid: Optional[str] = None
    abbrev: Optional[str] = None
    commit_message: Optional[str] = None
    unpulled: SectionData = field(default_factory=SectionData)
    unmerged: SectionData = field(default_factory=SectionData)


@dataclass
class PushRemote:
    ref: Optional[str] = None
    abbrev: Optional[str] = None
    commit_message: Optional[str] = None
    unpulled: SectionData = field(default_factory=SectionData)
    unmerged: SectionData = field(default_factory=SectionData)


@dataclass
class RebaseState:
    head: Optional[str] = None  # Branch being rebased, None when idle
    onto: Optional[str] = None
    section: SectionData = field(default_factory=SectionData)


@dataclass
class SequencerState:
    head: Optional[str] = None  # "REVERT_HEAD" or "CHERRY_PICK_HEAD"
    section: SectionData = field(default_factory=SectionData)


@dataclass
class RepositorySnapshot:
    """Repository state for one status refresh."""

    root: Path
    head: Head = field(default_factory=Head)
    upstream: Upstream = field(default_factory=Upstream)
    push_remote: PushRemote = field(default_factory=PushRemote)
    rebase: RebaseState = field(default_factory=RebaseState)
    sequencer: SequencerState = field(default_factory=SequencerState)
    untracked: SectionData = field(default_factory=SectionData)
    unstaged: SectionData = field(default_factory=SectionData)
    staged: SectionData = field(default_factory=SectionData)
    stashes: SectionData = field(default_factory=SectionData)
    recent: SectionData = field(default_factory=SectionData)
