"""Git diff parsing and retrieval.

Contains:
- parse_unified_diff: Parse unified diff output into per-file Diff objects
- _parse_file_block: Parse a single file block from the diff
- _parse_hunks: Locate hunks inside a file's diff lines
- get_unstaged_diffs: Diffs between the index and the worktree
- get_staged_diffs: Diffs between HEAD and the index
- get_untracked_diff: Diff of an untracked file against /dev/null
"""

import hashlib
import re
from pathlib import Path
from typing import Optional

from hunkstage.git.models import Diff, DiffHunk
from hunkstage.git.runner import _run_git_command

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def parse_unified_diff(diff_output: str) -> dict[str, Diff]:
    """Parse unified diff output from `git diff`.

    Args:
        diff_output: Raw output from git diff

    Returns:
        Mapping of file path (new side) to its Diff
    """
    diffs: dict[str, Diff] = {}

    if not diff_output.strip():
        return diffs

    # Each file starts with 'diff --git a/... b/...'
    file_blocks = re.split(r"(?=^diff --git )", diff_output, flags=re.MULTILINE)

    for block in file_blocks:
        if not block.startswith("diff --git"):
            continue

        lines = block.split("\n")
        # The newline separating this block from the next one
        if lines and lines[-1] == "":
            lines.pop()

        diff = _parse_file_block(lines)
        if diff:
            diffs[diff.file] = diff

    return diffs


def _parse_file_block(lines: list[str]) -> Optional[Diff]:
    """Parse a single file block from the diff.

    Args:
        lines: Lines of the file block

    Returns:
        Diff object or None if the block header is not understood
    """
    match = re.match(r"diff --git a/(.*) b/(.*)", lines[0])
    if not match:
        return None

    file_path = match.group(2)

    header_lines: list[str] = []
    hunk_start_idx = None

    for i, line in enumerate(lines):
        if line.startswith("@@"):
            hunk_start_idx = i
            break
        header_lines.append(line)

        if "GIT binary patch" in line or line.startswith("Binary files"):
            return Diff(file=file_path, header_lines=header_lines, is_binary=True)

    if hunk_start_idx is None:
        # Mode change or empty file, nothing to address line by line
        return Diff(file=file_path, header_lines=header_lines)

    body = lines[hunk_start_idx:]
    return Diff(
        file=file_path,
        header_lines=header_lines,
        lines=body,
        hunks=_parse_hunks(body),
    )


def _parse_hunks(lines: list[str]) -> list[DiffHunk]:
    """Locate the hunks of a file diff.

    Args:
        lines: Diff lines starting with the first @@ header

    Returns:
        List of DiffHunk objects indexing into `lines`
    """
    starts = [i for i, line in enumerate(lines) if _HUNK_HEADER_RE.match(line)]
    hunks: list[DiffHunk] = []

    for n, start in enumerate(starts):
        end = starts[n + 1] - 1 if n + 1 < len(starts) else len(lines) - 1
        header = lines[start]
        match = _HUNK_HEADER_RE.match(header)

        # Stable, content-derived identity
        content_hash = hashlib.md5(
            "".join(lines[start:end + 1]).encode("utf-8", "surrogateescape"),
            usedforsecurity=False,
        ).hexdigest()

        hunks.append(
            DiffHunk(
                hash=content_hash,
                header=header,
                diff_from=start,
                diff_to=end,
                index_from=int(match.group(1)),
                index_len=int(match.group(2)) if match.group(2) is not None else 1,
                disk_from=int(match.group(3)),
                disk_len=int(match.group(4)) if match.group(4) is not None else 1,
            )
        )

    return hunks


def get_unstaged_diffs(repo_root: Path) -> dict[str, Diff]:
    """Get diffs between the index and the worktree."""
    output = _run_git_command(
        ["diff", "--no-color", "--no-ext-diff"], cwd=repo_root, strip=False
    )
    return parse_unified_diff(output)


def get_staged_diffs(repo_root: Path) -> dict[str, Diff]:
    """Get diffs between HEAD and the index."""
    output = _run_git_command(
        ["diff", "--cached", "--no-color", "--no-ext-diff"], cwd=repo_root, strip=False
    )
    return parse_unified_diff(output)


def get_untracked_diff(repo_root: Path, path: str) -> Optional[Diff]:
    """Get the diff of an untracked file against /dev/null.

    `git diff --no-index` exits with 1 when the inputs differ.
    """
    output = _run_git_command(
        ["diff", "--no-color", "--no-ext-diff", "--no-index", "--", "/dev/null", path],
        cwd=repo_root,
        strip=False,
        ok_codes=(0, 1),
    )
    return parse_unified_diff(output).get(path)
