"""Git-related exception classes.

Contains all exception classes for Git operations:
- GitError: Base exception for git-related errors
- NotARepositoryError: Raised when the working directory is not a repository
- PatchApplyError: Raised when git rejects a generated patch
"""


class GitError(Exception):
    """Custom exception for git-related errors."""

    def __init__(self, message: str, args: list[str] | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = args or []
        self.stderr = stderr


class NotARepositoryError(GitError):
    """Raised when a path is not inside a git repository."""

    pass


class PatchApplyError(GitError):
    """Raised when `git apply` rejects a patch."""

    pass
