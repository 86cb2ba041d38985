"""Index and worktree mutations.

Contains:
- apply: Pipe a patch to `git apply`
- stage / add: Stage whole files
- unstage: Remove whole files from the index
- checkout: Restore worktree files from the index
- reset: Reset index entries to HEAD
- stage_modified / stage_all / unstage_all: Bulk staging
- update: Refresh the index stat information
- remove_untracked: Delete an untracked file or directory
"""

import shutil
from pathlib import Path

from hunkstage.git.branch import rev_parse
from hunkstage.git.exceptions import GitError, PatchApplyError
from hunkstage.git.runner import _run_git_command
from hunkstage.log import get_logger

logger = get_logger(__name__)


def apply(
    repo_root: Path,
    patch: str,
    cached: bool = False,
    reverse: bool = False,
    index: bool = False,
) -> None:
    """Apply a patch to the index and/or worktree.

    Args:
        repo_root: Repository root.
        patch: Patch text.
        cached: Apply to the index only.
        reverse: Apply the patch in reverse.
        index: Apply to both the index and the worktree.

    Raises:
        PatchApplyError: If git rejects the patch.
    """
    args = ["apply"]
    if cached:
        args.append("--cached")
    if reverse:
        args.append("--reverse")
    if index:
        args.append("--index")
    args.append("-")

    try:
        _run_git_command(args, cwd=repo_root, input=patch)
    except GitError as e:
        logger.error("patch_apply_failed", args=args, stderr=e.stderr, patch=patch)
        raise PatchApplyError(str(e), e.command, e.stderr)


def stage(repo_root: Path, files: list[str]) -> None:
    """Stage whole files, including deletions."""
    if files:
        _run_git_command(["add", "-A", "--"] + files, cwd=repo_root)


def add(repo_root: Path, files: list[str]) -> None:
    """Add untracked files to the index."""
    if files:
        _run_git_command(["add", "--"] + files, cwd=repo_root)


def unstage(repo_root: Path, files: list[str]) -> None:
    """Remove files' staged changes, keeping the worktree."""
    if not files:
        return
    if rev_parse(repo_root, "HEAD") is None:
        # Unborn branch: there is no HEAD to reset to
        _run_git_command(["rm", "-q", "-r", "--cached", "--"] + files, cwd=repo_root)
    else:
        _run_git_command(["reset", "-q", "HEAD", "--"] + files, cwd=repo_root)


def checkout(repo_root: Path, files: list[str]) -> None:
    """Restore worktree files from the index."""
    if files:
        _run_git_command(["checkout", "-q", "--"] + files, cwd=repo_root)


def reset(repo_root: Path, files: list[str]) -> None:
    """Reset index entries to HEAD."""
    if files:
        _run_git_command(["reset", "-q", "--"] + files, cwd=repo_root)


def stage_modified(repo_root: Path) -> None:
    """Stage every change to tracked files."""
    _run_git_command(["add", "-u"], cwd=repo_root)


def stage_all(repo_root: Path) -> None:
    """Stage everything, including untracked files."""
    _run_git_command(["add", "-A"], cwd=repo_root)


def unstage_all(repo_root: Path) -> None:
    """Unstage everything."""
    _run_git_command(["reset", "-q"], cwd=repo_root)


def update(repo_root: Path) -> None:
    """Refresh the index so stat-only changes do not show up as diffs."""
    _run_git_command(["update-index", "-q", "--refresh"], cwd=repo_root, ok_codes=(0, 1))


def remove_untracked(repo_root: Path, name: str) -> None:
    """Delete an untracked file or directory from the worktree."""
    path = repo_root / name
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
