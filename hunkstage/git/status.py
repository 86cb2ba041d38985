"""Git status utilities.

Contains:
- PorcelainStatus: Parsed `git status --porcelain=v2 --branch -z` output
- get_status: Run git status and parse it
- parse_porcelain_v2: Parse porcelain v2 output into file entries
- _parse_submodule: Parse the `<sub>` field of a porcelain v2 entry
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from hunkstage.git.models import FileEntry, SubmoduleStatus
from hunkstage.git.runner import _run_git_command


@dataclass
class PorcelainStatus:
    """Branch header and file lists from porcelain v2 status."""

    oid: Optional[str] = None
    branch: Optional[str] = None
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    untracked: list[FileEntry] = field(default_factory=list)
    unstaged: list[FileEntry] = field(default_factory=list)
    staged: list[FileEntry] = field(default_factory=list)

    @property
    def detached(self) -> bool:
        return self.branch is None


def get_status(repo_root: Path) -> PorcelainStatus:
    """Get the parsed status of the repository.

    Returns:
        PorcelainStatus for the worktree at `repo_root`.
    """
    output = _run_git_command(
        ["status", "--porcelain=v2", "--branch", "-z", "--untracked-files=all"],
        cwd=repo_root,
        strip=False,
    )
    return parse_porcelain_v2(output, repo_root)


def _parse_submodule(field_value: str) -> Optional[SubmoduleStatus]:
    """Parse the `<sub>` field: `N...` for plain files, `S<c><m><u>` for submodules."""
    if not field_value.startswith("S") or len(field_value) != 4:
        return None
    return SubmoduleStatus(
        commit_changed=field_value[1] == "C",
        has_tracked_changes=field_value[2] == "M",
        has_untracked_changes=field_value[3] == "U",
    )


def parse_porcelain_v2(output: str, repo_root: Optional[Path] = None) -> PorcelainStatus:
    """Parse NUL separated porcelain v2 status output.

    The first column of XY is the index (staged) status and the second the
    worktree (unstaged) status; `.` means unchanged. Unmerged entries are
    listed as unstaged with their two-letter state (e.g. `UU`).

    Args:
        output: Raw `git status --porcelain=v2 --branch -z` output.
        repo_root: Repository root used to fill in absolute paths.

    Returns:
        PorcelainStatus with the branch header and the three file lists.
    """
    status = PorcelainStatus()
    records = output.split("\0")

    def absolute(name: str) -> Optional[Path]:
        return repo_root / name if repo_root else None

    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        if not record:
            continue

        if record.startswith("# "):
            key, _, value = record[2:].partition(" ")
            if key == "branch.oid" and value != "(initial)":
                status.oid = value
            elif key == "branch.head" and value != "(detached)":
                status.branch = value
            elif key == "branch.upstream":
                status.upstream = value
            elif key == "branch.ab":
                ahead, behind = value.split(" ")
                status.ahead = int(ahead)
                status.behind = abs(int(behind))
            continue

        kind = record[0]

        if kind == "?":
            name = record[2:]
            status.untracked.append(FileEntry(name=name, absolute_path=absolute(name)))
            continue

        if kind == "1":
            parts = record.split(" ", 8)
            xy, sub, name = parts[1], parts[2], parts[8]
            original_name = None
        elif kind == "2":
            parts = record.split(" ", 9)
            xy, sub, name = parts[1], parts[2], parts[9]
            # The rename source is the next NUL separated record
            original_name = records[i]
            i += 1
        elif kind == "u":
            parts = record.split(" ", 10)
            xy, sub, name = parts[1], parts[2], parts[10]
            status.unstaged.append(
                FileEntry(
                    name=name,
                    mode=xy,
                    submodule=_parse_submodule(sub),
                    absolute_path=absolute(name),
                )
            )
            continue
        else:
            # Ignored entries ("!") are not shown
            continue

        submodule = _parse_submodule(sub)
        staged_mode, unstaged_mode = xy[0], xy[1]

        if staged_mode != ".":
            status.staged.append(
                FileEntry(
                    name=name,
                    mode=staged_mode,
                    original_name=original_name,
                    submodule=submodule,
                    absolute_path=absolute(name),
                )
            )
        if unstaged_mode != ".":
            status.unstaged.append(
                FileEntry(
                    name=name,
                    mode=unstaged_mode,
                    submodule=submodule,
                    absolute_path=absolute(name),
                )
            )

    return status
