"""Line highlights for the status buffer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hunkstage.status.locate import save_cursor
from hunkstage.status.models import LineTag, RenderedBuffer, StatusTree


class Highlight(str, Enum):
    HUNK_HEADER = "HunkHeader"
    CURSOR_LINE = "CursorLine"
    DIFF_ADD = "DiffAdd"
    DIFF_DELETE = "DiffDelete"
    DIFF_CONTEXT = "DiffContext"


_TAG_HIGHLIGHTS = {
    LineTag.ADD: Highlight.DIFF_ADD,
    LineTag.DELETE: Highlight.DIFF_DELETE,
    LineTag.CONTEXT: Highlight.DIFF_CONTEXT,
}


@dataclass
class Decoration:
    """Highlights of one line.

    `context` is set when the line belongs to the node under the cursor; it
    names the highlighted variant of the line's group (e.g.
    "DiffAddHighlight").
    """

    line: int
    group: Optional[Highlight] = None
    context: Optional[str] = None


def decorate(
    tree: StatusTree,
    rendered: RenderedBuffer,
    cursor_line: int,
    context_highlighting: bool = True,
    first: int = 1,
    last: Optional[int] = None,
) -> list[Decoration]:
    """Compute highlights for lines `first..last` (defaults to the whole buffer)."""
    last = len(rendered) if last is None else min(last, len(rendered))
    cursor = save_cursor(tree, cursor_line)

    decorations = []
    for line in range(max(first, 1), last + 1):
        tag = rendered.tag(line)
        if tag is LineTag.HUNK_HEADER:
            group = Highlight.HUNK_HEADER
        elif line == cursor_line:
            group = Highlight.CURSOR_LINE
        else:
            group = _TAG_HIGHLIGHTS.get(tag)

        context = None
        if (
            context_highlighting
            and cursor.first is not None
            and cursor.first <= line <= cursor.last
            and group is not Highlight.CURSOR_LINE
        ):
            context = f"{(group or Highlight.DIFF_CONTEXT).value}Highlight"

        decorations.append(Decoration(line=line, group=group, context=context))
    return decorations
