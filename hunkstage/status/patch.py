"""Patch builder for partial staging.

Contains:
- SelectedHunk: A hunk with the diff-line range picked by a selection
- hunks_in_range: Map a buffer line range onto the hunks of an item
- generate_patch: Build a standalone patch for part of a hunk
- jump_row: Map a line inside a hunk to its row in the worktree file
"""

import re
from dataclasses import dataclass

from hunkstage.status.models import Hunk, Item

_DIFF_GIT_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")
_FILE_MODE_RE = re.compile(r"^(?:new|deleted) file mode (\d+)$")

DEFAULT_FILE_MODE = "100644"


@dataclass
class SelectedHunk:
    """Part of a hunk picked by a selection.

    `from_` and `to` are inclusive indices into the item's `diff.lines`;
    `lines` are the diff lines in that range.
    """

    hunk: Hunk
    from_: int
    to: int
    lines: list[str]

    @property
    def first(self) -> int:
        return self.hunk.first

    @property
    def last(self) -> int:
        return self.hunk.last


def hunks_in_range(item: Item, first_line: int, last_line: int, partial: bool) -> list[SelectedHunk]:
    """Find the hunks of an item touched by a buffer line range.

    Args:
        item: The file item.
        first_line: First selected buffer line.
        last_line: Last selected buffer line.
        partial: Select only the touched lines (line-wise visual selection)
            instead of the whole hunk body.

    Returns:
        One SelectedHunk per hunk on screen that intersects the range.
        Folded items have none.
    """
    if item.folded or not item.hunks or item.diff is None:
        return []

    selected = []
    for hunk in item.hunks:
        if not hunk.rendered or hunk.first > last_line or hunk.last < first_line:
            continue

        from_, to = hunk.diff_from + 1, hunk.diff_to
        if partial and not hunk.folded:
            # Buffer lines and diff lines advance together inside a hunk
            low = max(first_line, hunk.first + 1)
            high = min(last_line, hunk.last)
            if low <= high:
                from_ = hunk.diff_from + (low - hunk.first)
                to = hunk.diff_from + (high - hunk.first)

        selected.append(
            SelectedHunk(
                hunk=hunk,
                from_=from_,
                to=to,
                lines=item.diff.lines[from_:to + 1],
            )
        )
    return selected


def _file_headers(item: Item, old_missing: bool, new_missing: bool) -> list[str]:
    """Build the file header of a single-file patch.

    Both sides use the item's current path. A missing side is /dev/null and
    gets a new/deleted file mode line taken from the original header.
    """
    path = item.diff.file
    mode = DEFAULT_FILE_MODE
    for line in item.diff.header_lines:
        match = _DIFF_GIT_RE.match(line)
        if match:
            path = match.group(2)
        match = _FILE_MODE_RE.match(line)
        if match:
            mode = match.group(1)

    headers = [f"diff --git a/{path} b/{path}"]
    if old_missing:
        headers.append(f"new file mode {mode}")
    if new_missing:
        headers.append(f"deleted file mode {mode}")
    headers.append("--- /dev/null" if old_missing else f"--- a/{path}")
    headers.append("+++ /dev/null" if new_missing else f"+++ b/{path}")
    return headers


def _header_side_missing(item: Item, prefix: str) -> bool:
    return any(line == f"{prefix} /dev/null" for line in item.diff.header_lines)


def generate_patch(item: Item, hunk: Hunk, from_: int, to: int, reverse: bool = False) -> str:
    """Build a patch applying only diff lines `from_..to` of a hunk.

    Lines outside the range are neutralised so the patch still applies:
    applying forward, an unselected removal stays as context and an
    unselected addition is dropped. In reverse the roles swap, since the
    target already contains every addition and none of the removals.

    With `reverse` the emitted patch is inverted (`+`/`-` swapped, ranges
    swapped), so applying it forward to the current state undoes the
    selected lines.

    Args:
        item: Item owning the hunk (provides the diff lines and file header).
        hunk: The hunk to cut from.
        from_: First selected diff line index.
        to: Last selected diff line index.
        reverse: Build the undo patch.

    Returns:
        Patch text ending with a newline.
    """
    if from_ > to:
        from_, to = to, from_

    lines = item.diff.lines
    body: list[str] = []
    old_len = hunk.index_len
    offset = 0
    dropped_previous = False

    for k in range(hunk.diff_from + 1, hunk.diff_to + 1):
        line = lines[k]
        operand = line[:1]

        if operand == "\\":
            # "\ No newline at end of file" follows the line it describes
            if not dropped_previous:
                body.append(line)
            continue

        dropped_previous = False
        if operand not in ("+", "-"):
            body.append(line)
        elif from_ <= k <= to:
            offset += 1 if operand == "+" else -1
            body.append(line)
        elif not reverse:
            if operand == "-":
                body.append(" " + line[1:])
            else:
                dropped_previous = True
        else:
            if operand == "+":
                body.append(" " + line[1:])
                old_len += 1
            else:
                dropped_previous = True
                old_len -= 1

    new_len = old_len + offset
    old_missing = _header_side_missing(item, "---")
    new_missing = _header_side_missing(item, "+++")

    if reverse:
        body = [_invert_line(line) for line in body]
        header = f"@@ -{_start(hunk.disk_from, new_len)},{new_len} +{_start(hunk.index_from, old_len)},{old_len} @@"
        headers = _file_headers(item, old_missing=new_missing, new_missing=old_missing and old_len == 0)
    else:
        header = f"@@ -{_start(hunk.index_from, old_len)},{old_len} +{_start(hunk.disk_from, new_len)},{new_len} @@"
        headers = _file_headers(item, old_missing=old_missing, new_missing=new_missing and new_len == 0)

    return "\n".join(headers + [header] + body) + "\n"


def _start(start: int, length: int) -> int:
    # An empty side starts at 0; once it has lines it starts at 1
    return 1 if start == 0 and length > 0 else start


def _invert_line(line: str) -> str:
    if line.startswith("+"):
        return "-" + line[1:]
    if line.startswith("-"):
        return "+" + line[1:]
    return line


def jump_row(selected: SelectedHunk, line: int) -> int:
    """Translate a buffer line inside a hunk to a 1-based worktree row.

    `selected` must cover the whole hunk body. Removed lines above the
    cursor do not exist in the worktree and are not counted.
    """
    offset = line - selected.hunk.first
    row = selected.hunk.disk_from + offset - 1
    for diff_line in selected.lines[:offset]:
        if diff_line.startswith("-"):
            row -= 1
    return max(row, 1)
