"""Line index: map buffer lines to tree nodes and back.

Contains:
- Location: Section/Item/Hunk found at a line
- resolve: Find the smallest nodes containing a line
- KeyRef / CursorLocation: Cursor position expressed as stable keys
- save_cursor: Capture the key path under a line
- restore_cursor: Find the line for a saved key path in a rebuilt tree
"""

from bisect import bisect_right
from dataclasses import dataclass
from operator import attrgetter
from typing import NamedTuple, Optional, Sequence, Union

from hunkstage.status.models import Hunk, Item, Section, StatusTree

Node = Union[Section, Item, Hunk]

_first = attrgetter("first")


@dataclass
class Location:
    section: Optional[Section] = None
    item: Optional[Item] = None
    hunk: Optional[Hunk] = None


def _index_containing(nodes: Sequence[Node], line: int) -> Optional[int]:
    """Binary search for the node whose range contains `line`.

    Siblings are either all on screen or all hidden under a folded parent,
    so checking the first one is enough.
    """
    if not nodes or nodes[0].first is None:
        return None
    idx = bisect_right(nodes, line, key=_first) - 1
    if idx >= 0 and nodes[idx].first <= line <= nodes[idx].last:
        return idx
    return None


def resolve(tree: StatusTree, line: int) -> Location:
    """Find the section, item and hunk under a buffer line.

    Returns partial results when the line is a header or gap line.
    """
    location = Location()

    section_idx = _index_containing(tree.sections, line)
    if section_idx is None:
        return location
    location.section = tree.sections[section_idx]

    item_idx = _index_containing(location.section.items, line)
    if item_idx is None:
        return location
    location.item = location.section.items[item_idx]

    hunk_idx = _index_containing(location.item.hunks or [], line)
    if hunk_idx is not None:
        location.hunk = location.item.hunks[hunk_idx]
    return location


class KeyRef(NamedTuple):
    """Position of a node among its siblings plus its stable key."""

    index: int
    key: str


@dataclass
class CursorLocation:
    """Cursor position as a key path, independent of line numbers.

    `first`/`last` are the line range of the smallest node found, used for
    context highlighting.
    """

    section: Optional[KeyRef] = None
    item: Optional[KeyRef] = None
    hunk: Optional[KeyRef] = None
    first: Optional[int] = None
    last: Optional[int] = None


def save_cursor(tree: StatusTree, line: int) -> CursorLocation:
    """Capture the key path of the smallest node under `line`.

    A line on a section or item header selects that node and not its
    children.
    """
    cursor = CursorLocation()

    section_idx = _index_containing(tree.sections, line)
    if section_idx is None:
        return cursor
    section = tree.sections[section_idx]
    cursor.section = KeyRef(section_idx, section.name)
    cursor.first, cursor.last = section.first, section.last
    if line == section.first:
        return cursor

    item_idx = _index_containing(section.items, line)
    if item_idx is None:
        return cursor
    item = section.items[item_idx]
    cursor.item = KeyRef(item_idx, item.name)
    cursor.first, cursor.last = item.first, item.last
    if line == item.first:
        return cursor

    hunk_idx = _index_containing(item.hunks or [], line)
    if hunk_idx is not None:
        hunk = item.hunks[hunk_idx]
        cursor.hunk = KeyRef(hunk_idx, hunk.hash)
        cursor.first, cursor.last = hunk.first, hunk.last
    return cursor


def restore_cursor(tree: StatusTree, cursor: Optional[CursorLocation]) -> int:
    """Find the buffer line for a saved key path.

    Falls back to the nearest surviving ancestor when a key is gone or its
    node is hidden under a fold. A section that disappeared is replaced by
    the one now at its position (or the last one). Without a saved section
    the cursor goes to the first foldable section.

    Returns:
        A 1-based line inside a valid range, or 1 for an empty tree.
    """
    if not tree.sections:
        return 1

    cursor = cursor or CursorLocation()

    if cursor.section is None:
        # Skip the header rows and land on the first foldable region
        for section in tree.sections:
            if not section.ignore_sign:
                return section.first
        return tree.sections[0].first

    section = tree.section(cursor.section.key)
    if section is None:
        idx = min(cursor.section.index, len(tree.sections) - 1)
        return tree.sections[idx].first

    if cursor.item is None:
        return section.first

    item = next((i for i in section.items if i.name == cursor.item.key), None)
    if item is None or not item.rendered:
        return section.first

    if cursor.hunk is None:
        return item.first

    hunk = next((h for h in item.hunks or [] if h.hash == cursor.hunk.key), None)
    if hunk is None or not hunk.rendered:
        return item.first
    return hunk.first
