"""Git command runner and repository utilities.

Contains:
- _run_git_command: Run a git command and return its output
- get_repo_root: Get the root directory of a git repository

Git output is decoded as UTF-8 with surrogateescape and without newline
translation, so diff lines keep their exact bytes (including CR) and input
encoded the same way reproduces them.
"""

import subprocess
from pathlib import Path
from typing import Optional

from hunkstage.git.exceptions import GitError, NotARepositoryError
from hunkstage.log import get_logger

logger = get_logger(__name__)

GIT_ENCODING = "utf-8"
GIT_ERRORS = "surrogateescape"


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode(GIT_ENCODING, GIT_ERRORS)


def _run_git_command(
    args: list[str],
    cwd: Optional[Path] = None,
    input: Optional[str] = None,
    strip: bool = True,
    ok_codes: tuple[int, ...] = (0,),
) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        cwd: Directory to run git in (defaults to the process cwd).
        input: Text piped to git's stdin (used by `git apply -`).
        strip: Strip surrounding whitespace from stdout. Diff output must
            keep leading/trailing spaces, so diff readers pass False and only
            the trailing newline is removed.
        ok_codes: Exit codes treated as success.

    Returns:
        The stdout of the git command.

    Raises:
        GitError: If the command fails.
    """
    logger.debug("git_command", args=args, cwd=str(cwd) if cwd else None)
    try:
        result = subprocess.run(
            ["git"] + args,
            capture_output=True,
            cwd=cwd,
            input=input.encode(GIT_ENCODING, GIT_ERRORS) if input is not None else None,
        )
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH.", args)

    if result.returncode not in ok_codes:
        stderr = _decode(result.stderr).strip()
        raise GitError(f"Git command failed: git {' '.join(args)}\n{stderr}", args, stderr)

    output = _decode(result.stdout)
    if strip:
        return output.strip()
    return output.rstrip("\n")


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Get the root directory of the git repository containing `cwd`.

    Args:
        cwd: Directory to start from (defaults to the process cwd).

    Returns:
        Path to the repository root.

    Raises:
        NotARepositoryError: If not in a git repository.
    """
    try:
        root = _run_git_command(["rev-parse", "--show-toplevel"], cwd=cwd)
        return Path(root)
    except GitError as e:
        raise NotARepositoryError(
            "Not in a git repository. Please run this command from within a git repo.",
            e.command,
            e.stderr,
        )
