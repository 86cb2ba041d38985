"""Git branch, commit and ref utilities.

Contains:
- get_commit_header: Get oid, abbrev and subject for any ref
- get_recent_commits: Get the last n commits
- get_commits_between: Get commits reachable from one ref but not another
- get_stashes: Get the stash list
- get_push_remote_ref: Resolve the push remote branch for a local branch
- get_tag: Get the nearest tag and its distance from HEAD
- rev_parse: Resolve a ref to an oid
"""

from pathlib import Path
from typing import Optional

from hunkstage.git.exceptions import GitError
from hunkstage.git.models import CommitLogEntry, Tag
from hunkstage.git.runner import _run_git_command

# oid, abbreviated oid, subject separated by unit separators
_LOG_FORMAT = "--pretty=format:%H%x1f%h%x1f%s"


def _parse_log(output: str) -> list[CommitLogEntry]:
    commits = []
    for line in output.split("\n"):
        if not line:
            continue
        oid, abbrev, subject = line.split("\x1f", 2)
        commits.append(CommitLogEntry(oid=oid, abbrev=abbrev, subject=subject))
    return commits


def get_commit_header(repo_root: Path, ref: str) -> Optional[CommitLogEntry]:
    """Get oid, abbrev and subject for a ref.

    Returns:
        The commit, or None if the ref does not resolve (e.g. no commits yet).
    """
    try:
        output = _run_git_command(["log", "-1", _LOG_FORMAT, ref, "--"], cwd=repo_root)
    except GitError:
        return None
    commits = _parse_log(output)
    return commits[0] if commits else None


def get_recent_commits(repo_root: Path, n: int = 10) -> list[CommitLogEntry]:
    """Get the last n commits on HEAD.

    Args:
        repo_root: Repository root.
        n: Number of commits to retrieve.

    Returns:
        List of commits, newest first.
    """
    try:
        output = _run_git_command(["log", f"-n{n}", _LOG_FORMAT], cwd=repo_root)
    except GitError:
        # No commits yet in the repo
        return []
    return _parse_log(output)


def get_commits_between(repo_root: Path, exclude: str, include: str) -> list[CommitLogEntry]:
    """Get commits reachable from `include` but not from `exclude`."""
    try:
        output = _run_git_command(["log", _LOG_FORMAT, f"{exclude}..{include}"], cwd=repo_root)
    except GitError:
        return []
    return _parse_log(output)


def get_stashes(repo_root: Path) -> list[CommitLogEntry]:
    """Get the stash list.

    Stash entries are displayed as `stash@{N}: <message>`.
    """
    try:
        output = _run_git_command(
            ["stash", "list", "--pretty=format:%H%x1f%h%x1f%gd%x1f%gs"], cwd=repo_root
        )
    except GitError:
        return []

    stashes = []
    for line in output.split("\n"):
        if not line:
            continue
        oid, abbrev, selector, subject = line.split("\x1f", 3)
        stashes.append(
            CommitLogEntry(
                oid=oid, abbrev=abbrev, subject=subject, name=f"{selector}: {subject}"
            )
        )
    return stashes


def _config_value(repo_root: Path, key: str) -> Optional[str]:
    try:
        value = _run_git_command(["config", "--get", key], cwd=repo_root)
    except GitError:
        return None
    return value or None


def get_push_remote_ref(repo_root: Path, branch: Optional[str]) -> Optional[str]:
    """Resolve `<pushRemote>/<branch>` for a local branch.

    Uses `branch.<name>.pushRemote`, falling back to `remote.pushDefault`.
    """
    if not branch:
        return None
    remote = _config_value(repo_root, f"branch.{branch}.pushRemote") or _config_value(
        repo_root, "remote.pushDefault"
    )
    if not remote:
        return None
    return f"{remote}/{branch}"


def get_tag(repo_root: Path) -> Tag:
    """Get the nearest tag reachable from HEAD and the number of commits since."""
    try:
        name = _run_git_command(["describe", "--tags", "--abbrev=0"], cwd=repo_root)
        distance = _run_git_command(["rev-list", "--count", f"{name}..HEAD"], cwd=repo_root)
    except GitError:
        return Tag()
    return Tag(name=name, distance=int(distance))


def rev_parse(repo_root: Path, ref: str) -> Optional[str]:
    """Resolve a ref to a full oid, or None when it does not exist."""
    try:
        return _run_git_command(["rev-parse", "--verify", "--quiet", ref], cwd=repo_root) or None
    except GitError:
        return None
