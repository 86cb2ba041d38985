"""Selection engine.

Contains:
- SectionSelection: Items selected within one section
- Selection: Everything a cursor or visual range touches
- select: Compute the selection for a buffer line range
"""

from dataclasses import dataclass, field
from typing import Optional

from hunkstage.git.models import CommitLogEntry
from hunkstage.status.models import Item, Section, SectionKind, StatusTree
from hunkstage.status.patch import hunks_in_range


@dataclass
class SectionSelection:
    section: Section
    items: list[Item] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.section.name

    @property
    def kind(self) -> SectionKind:
        return self.section.kind


@dataclass
class Selection:
    """Selected nodes, grouped by the sections the range spans.

    `item`/`commit` are the focal target: the first item whose range fully
    contains the selected lines. `section` is the section fully containing
    them, if any.
    """

    first_line: int
    last_line: int
    sections: list[SectionSelection] = field(default_factory=list)
    section: Optional[Section] = None
    item: Optional[Item] = None
    commit: Optional[CommitLogEntry] = None
    items: list[Item] = field(default_factory=list)
    commits: list[CommitLogEntry] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.items

    def format(self) -> str:
        """Render the selection for debugging.

        The focal item is marked with `*`; each item lists the diff-line
        range and lines of its partially selected hunks.
        """
        lines = [f"{self.first_line},{self.last_line}:"]

        for section in self.sections:
            lines.append(f"{section.name}:")
            for item in section.items:
                marker = "*" if item is self.item else ""
                lines.append(f"  {marker}{item.name}:")
                for hunk in hunks_in_range(item, self.first_line, self.last_line, True):
                    lines.append(f"    {hunk.from_},{hunk.to}:")
                    for line in hunk.lines:
                        lines.append(f"      {line}")

        return "\n".join(lines)


def select(tree: StatusTree, first_line: int, last_line: int) -> Selection:
    """Compute the nodes touched by a buffer line range.

    A single-line selection on a section header selects every item of that
    section, including items hidden by a fold.

    Args:
        tree: The current status tree.
        first_line: One end of the range.
        last_line: The other end of the range.

    Returns:
        The Selection.
    """
    first_line, last_line = min(first_line, last_line), max(first_line, last_line)
    selection = Selection(first_line=first_line, last_line=last_line)

    for section in tree.sections:
        if section.first > last_line:
            break
        if section.last < first_line:
            continue

        if section.first <= first_line and section.last >= last_line:
            selection.section = section

        entire_section = section.first == first_line == last_line
        items = []

        for item in section.items:
            if not entire_section and not (
                item.rendered and item.first <= last_line and item.last >= first_line
            ):
                continue

            if (
                selection.item is None
                and item.rendered
                and item.first <= first_line
                and item.last >= last_line
            ):
                selection.item = item
                selection.commit = item.commit

            if item.commit:
                selection.commits.append(item.commit)

            selection.items.append(item)
            items.append(item)

        selection.sections.append(SectionSelection(section=section, items=items))

    return selection
