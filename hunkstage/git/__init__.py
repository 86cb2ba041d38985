"""Git access layer for hunkstage.

This package provides modular git access with:
- exceptions: GitError, NotARepositoryError, PatchApplyError
- runner: _run_git_command, get_repo_root
- models: RepositorySnapshot and the per-section data it carries
- status: get_status, parse_porcelain_v2, PorcelainStatus
- diff: parse_unified_diff, get_unstaged_diffs, get_staged_diffs, get_untracked_diff
- branch: commit, stash, tag and push-remote lookups
- sequencer: rebase / revert / cherry-pick state
- index: apply and whole-file index mutations
- repo: GitRepository
"""

# Exceptions
from hunkstage.git.exceptions import (
    GitError,
    NotARepositoryError,
    PatchApplyError,
)

# Runner utilities
from hunkstage.git.runner import (
    _run_git_command,
    get_repo_root,
)

# Models
from hunkstage.git.models import (
    CommitLogEntry,
    Diff,
    DiffHunk,
    FileEntry,
    Head,
    PushRemote,
    RebaseState,
    RepositorySnapshot,
    SectionData,
    SequencerState,
    SubmoduleStatus,
    Tag,
    Upstream,
)

# Status and diff parsing
from hunkstage.git.status import (
    PorcelainStatus,
    get_status,
    parse_porcelain_v2,
)
from hunkstage.git.diff import (
    get_staged_diffs,
    get_unstaged_diffs,
    get_untracked_diff,
    parse_unified_diff,
)

# Repository handle
from hunkstage.git.repo import GitRepository


__all__ = [
    # Exceptions
    "GitError",
    "NotARepositoryError",
    "PatchApplyError",
    # Runner
    "_run_git_command",
    "get_repo_root",
    # Models
    "CommitLogEntry",
    "Diff",
    "DiffHunk",
    "FileEntry",
    "Head",
    "PushRemote",
    "RebaseState",
    "RepositorySnapshot",
    "SectionData",
    "SequencerState",
    "SubmoduleStatus",
    "Tag",
    "Upstream",
    # Status / diff
    "PorcelainStatus",
    "get_status",
    "parse_porcelain_v2",
    "get_staged_diffs",
    "get_unstaged_diffs",
    "get_untracked_diff",
    "parse_unified_diff",
    # Repository
    "GitRepository",
]
