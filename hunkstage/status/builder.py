"""Status tree builder.

Turns a RepositorySnapshot into a fresh StatusTree and the text of the
status buffer. Fold state is carried over from the previous tree by stable
key: sections by name, items by name within their section, hunks by content
hash within their item. Line ranges are always recomputed.
"""

from dataclasses import dataclass, field
from typing import Optional

from hunkstage.git.models import (
    CommitLogEntry,
    FileEntry,
    RepositorySnapshot,
    SectionData,
    SectionEntry,
    SubmoduleStatus,
)
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
from hunkstage.user_config import StatusConfig

MODE_TO_TEXT = {
    "M": "Modified",
    "N": "New file",
    "A": "Added",
    "D": "Deleted",
    "C": "Copied",
    "U": "Updated",
    "UU": "Both Modified",
    "R": "Renamed",
}

MAX_LABEL_LEN = len("Modified by us")

HINT = "Hint: [status] redraw | [stage] stage | [unstage] unstage | [discard] discard | [goto] open"

DIFF_SECTIONS = ("untracked", "unstaged", "staged")

_LINE_TAGS = {"+": LineTag.ADD, "-": LineTag.DELETE}


def format_mode(mode: Optional[str]) -> str:
    """Get the display label for a status letter (e.g. "M" -> "Modified")."""
    if not mode:
        return ""
    if mode in MODE_TO_TEXT:
        return MODE_TO_TEXT[mode]
    if mode[:1] in MODE_TO_TEXT:
        return MODE_TO_TEXT[mode[:1]] + " by us"
    return mode


def format_submodule_mode(submodule: SubmoduleStatus) -> str:
    """Describe why a submodule is dirty."""
    parts = []
    if submodule.commit_changed:
        parts.append("new commits")
    if submodule.has_tracked_changes:
        parts.append("modified content")
    if submodule.has_untracked_changes:
        parts.append("untracked content")
    return f"({', '.join(parts)})" if parts else "(malformed submodule)"


def format_item_line(entry: FileEntry, compact: bool = False) -> str:
    """Render the line of one changed file.

    Args:
        entry: The file entry.
        compact: Do not pad the mode label to a fixed width.
    """
    label = format_mode(entry.mode).ljust(MAX_LABEL_LEN)
    if compact:
        label = label.strip()

    if entry.mode and entry.original_name:
        line = f"{label} {entry.original_name} -> {entry.name}"
    elif entry.mode:
        line = f"{label} {entry.name}"
    else:
        line = entry.name

    if entry.submodule:
        line = f"{line} {format_submodule_mode(entry.submodule)}"
    return line


@dataclass
class _PreviousNodes:
    """Nodes of the previous tree keyed by their stable key path."""

    sections: dict[str, Section] = field(default_factory=dict)
    items: dict[tuple[str, str], Item] = field(default_factory=dict)
    hunks: dict[tuple[str, str, str], Hunk] = field(default_factory=dict)

    @classmethod
    def from_tree(cls, tree: Optional[StatusTree]) -> "_PreviousNodes":
        nodes = cls()
        if tree is None:
            return nodes
        for section in tree.sections:
            nodes.sections[section.name] = section
            for item in section.items:
                nodes.items[(section.name, item.name)] = item
                for hunk in item.hunks or []:
                    nodes.hunks[(section.name, item.name, hunk.hash)] = hunk
        return nodes


class _TreeBuilder:
    def __init__(
        self,
        previous: Optional[StatusTree],
        snapshot: RepositorySnapshot,
        config: StatusConfig,
        width: Optional[int],
    ):
        self.previous = _PreviousNodes.from_tree(previous)
        self.snapshot = snapshot
        self.config = config
        self.compact = width is not None and width < config.wide_columns
        self.lines: list[str] = []
        self.tags: list[LineTag] = []
        self.sections: list[Section] = []

    def append(self, text: str, tag: LineTag) -> int:
        """Append a line and return its 1-based line number."""
        self.lines.append(text)
        self.tags.append(tag)
        return len(self.lines)

    def header_row(self, name: str, text: str, ref: Optional[str] = None, commit: Optional[str] = None) -> None:
        line = self.append(text, LineTag.HEAD)
        self.sections.append(
            Section(
                name=name,
                kind=SectionKind.HEADER,
                first=line,
                last=line,
                ignore_sign=True,
                label=text,
                ref=ref,
                commit=commit,
            )
        )

    def build(self) -> tuple[StatusTree, RenderedBuffer]:
        snapshot = self.snapshot

        if not self.config.disable_hint:
            self.append(HINT, LineTag.HINT)
            self.append("", LineTag.BLANK)

        self.render_headers()
        self.append("", LineTag.BLANK)

        if snapshot.rebase.head:
            self.render_section(f"Rebasing: {snapshot.rebase.head}", "rebase", snapshot.rebase.section)
        elif snapshot.sequencer.head == "REVERT_HEAD":
            self.render_section("Reverting", "sequencer", snapshot.sequencer.section)
        elif snapshot.sequencer.head == "CHERRY_PICK_HEAD":
            self.render_section("Picking", "sequencer", snapshot.sequencer.section)

        self.render_section("Untracked files", "untracked", snapshot.untracked)
        self.render_section("Unstaged changes", "unstaged", snapshot.unstaged)
        self.render_section("Staged changes", "staged", snapshot.staged)
        self.render_section("Stashes", "stashes", snapshot.stashes)

        push_ref = snapshot.push_remote.ref
        upstream_ref = snapshot.upstream.ref

        if push_ref and upstream_ref != push_ref:
            self.render_section(
                f"Unpulled from {push_ref}", "unpulled_pushRemote", snapshot.push_remote.unpulled
            )
            self.render_section(
                f"Unpushed to {push_ref}", "unmerged_pushRemote", snapshot.push_remote.unmerged
            )

        if upstream_ref:
            self.render_section(
                f"Unpulled from {upstream_ref}", "unpulled_upstream", snapshot.upstream.unpulled
            )
            self.render_section(
                f"Unmerged into {upstream_ref}", "unmerged_upstream", snapshot.upstream.unmerged
            )

        self.render_section("Recent commits", "recent", snapshot.recent)

        tree = StatusTree(sections=self.sections)
        signs = {} if self.config.disable_signs else fold_signs(tree)
        return tree, RenderedBuffer(lines=self.lines, tags=self.tags, signs=signs)

    def render_headers(self) -> None:
        head = self.snapshot.head
        abbrev = f"{head.abbrev} " if head.abbrev else ""
        self.header_row(
            "head_branch_header",
            f"Head:     {abbrev}{head.branch} {head.commit_message or '(no commits)'}",
            ref=None if head.detached else head.branch,
            commit=head.oid,
        )

        if not head.detached:
            upstream = self.snapshot.upstream
            if upstream.ref:
                abbrev = f"{upstream.abbrev} " if upstream.abbrev else ""
                self.header_row(
                    "upstream_header",
                    f"Merge:    {abbrev}{upstream.ref} {upstream.commit_message or '(no commits)'}",
                    ref=upstream.ref,
                    commit=upstream.oid,
                )

            push_remote = self.snapshot.push_remote
            if push_remote.ref and push_remote.abbrev:
                self.header_row(
                    "push_branch_header",
                    f"Push:     {push_remote.abbrev} {push_remote.ref} "
                    f"{push_remote.commit_message or '(does not exist)'}",
                    ref=push_remote.ref,
                )

        if head.tag.name:
            self.header_row(
                "tag_header",
                f"Tag:      {head.tag.name} ({head.tag.distance})",
                ref=head.tag.name,
            )

    def render_section(self, label: str, key: str, data: SectionData) -> None:
        section_config = self.config.section(key)
        if section_config.hidden or not data.items:
            return

        if data.current is not None:
            header = f"{label} ({data.current}/{len(data.items)})"
        else:
            header = f"{label} ({len(data.items)})"

        first = self.append(header, LineTag.SECTION)

        previous = self.previous.sections.get(key)
        folded = previous.folded if previous else section_config.folded
        kind = SectionKind.DIFF if key in DIFF_SECTIONS else SectionKind.COMMITS

        items = [self.build_item(key, entry, render=not folded) for entry in data.items]
        last = len(self.lines)

        if not folded:
            self.append("", LineTag.BLANK)

        self.sections.append(
            Section(
                name=key,
                kind=kind,
                first=first,
                last=last,
                items=items,
                folded=folded,
                label=label,
            )
        )

    def build_item(self, key: str, entry: SectionEntry, render: bool) -> Item:
        if isinstance(entry, CommitLogEntry):
            name = entry.display_name
        else:
            name = entry.name

        previous = self.previous.items.get((key, name))
        item = Item(
            name=name,
            section=key,
            folded=previous.folded if previous else self.config.items_folded,
        )

        if isinstance(entry, CommitLogEntry):
            item.oid = entry.oid
            item.commit = entry
            if render:
                tag = LineTag.REBASE_DONE if entry.done else LineTag.ITEM
                item.first = item.last = self.append(name, tag)
            return item

        item.mode = entry.mode
        item.original_name = entry.original_name
        item.submodule = entry.submodule
        item.absolute_path = entry.absolute_path
        item.diff = entry.diff

        if render:
            item.first = self.append(format_item_line(entry, self.compact), LineTag.ITEM)

        if entry.has_diff:
            item.hunks = self.build_hunks(key, item, render=render and not item.folded)

        if render:
            item.last = len(self.lines)
        return item

    def build_hunks(self, key: str, item: Item, render: bool) -> list[Hunk]:
        if item.diff is None:
            return []

        lines = item.diff.lines
        hunks = []
        for diff_hunk in item.diff.hunks:
            previous = self.previous.hunks.get((key, item.name, diff_hunk.hash))
            hunk = Hunk(
                hash=diff_hunk.hash,
                item=item.name,
                diff_from=diff_hunk.diff_from,
                diff_to=diff_hunk.diff_to,
                index_from=diff_hunk.index_from,
                index_len=diff_hunk.index_len,
                disk_from=diff_hunk.disk_from,
                disk_len=diff_hunk.disk_len,
                header=diff_hunk.header,
                folded=previous.folded if previous else False,
            )

            if render:
                hunk.first = self.append(lines[hunk.diff_from], LineTag.HUNK_HEADER)
                if not hunk.folded:
                    for line in lines[hunk.diff_from + 1:hunk.diff_to + 1]:
                        self.append(line, _LINE_TAGS.get(line[:1], LineTag.CONTEXT))
                hunk.last = len(self.lines)

            hunks.append(hunk)
        return hunks


def fold_signs(tree: StatusTree) -> dict[int, FoldSign]:
    """Fold markers for every foldable node that is on screen."""

    def sign(folded: bool) -> FoldSign:
        return FoldSign.CLOSED if folded else FoldSign.OPEN

    signs: dict[int, FoldSign] = {}
    for section in tree.sections:
        if section.ignore_sign:
            continue
        signs[section.first] = sign(section.folded)
        if section.folded:
            continue
        for item in section.items:
            if item.hunks is None or not item.rendered:
                continue
            signs[item.first] = sign(item.folded)
            if item.folded:
                continue
            for hunk in item.hunks:
                if hunk.rendered:
                    signs[hunk.first] = sign(hunk.folded)
    return signs


def build(
    previous: Optional[StatusTree],
    snapshot: RepositorySnapshot,
    config: StatusConfig,
    width: Optional[int] = None,
) -> tuple[StatusTree, RenderedBuffer]:
    """Build a new status tree and its rendered text.

    Args:
        previous: The tree being replaced (None on first render). Only fold
            state is read from it.
        snapshot: Fresh repository state.
        config: Display configuration.
        width: Terminal width; below `config.wide_columns` mode labels are
            not padded.

    Returns:
        Tuple of (new tree, rendered buffer).
    """
    return _TreeBuilder(previous, snapshot, config, width).build()
