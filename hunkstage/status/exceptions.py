"""Status buffer exception classes.

Contains:
- StatusError: Base exception for status buffer errors
- OperationError: Raised when a stage/unstage/discard operation fails
"""


class StatusError(Exception):
    """Custom exception for status buffer errors."""

    pass


class OperationError(StatusError):
    """Raised when git rejects an index or worktree operation."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
