"""Rebase and sequencer (revert / cherry-pick) state detection.

Contains:
- get_git_dir: Resolve the repository's git directory
- get_rebase_state: Read an in-progress interactive or merge-based rebase
- get_sequencer_state: Detect an in-progress revert or cherry-pick
"""

from pathlib import Path

from hunkstage.git.models import CommitLogEntry, RebaseState, SectionData, SequencerState
from hunkstage.git.runner import _run_git_command

_TODO_COMMANDS = {
    "p": "pick",
    "r": "reword",
    "e": "edit",
    "s": "squash",
    "f": "fixup",
    "d": "drop",
}


def get_git_dir(repo_root: Path) -> Path:
    """Get the absolute git directory (handles worktrees and `.git` files)."""
    git_dir = Path(_run_git_command(["rev-parse", "--git-dir"], cwd=repo_root))
    if not git_dir.is_absolute():
        git_dir = repo_root / git_dir
    return git_dir


def _parse_todo(text: str, done: bool) -> list[CommitLogEntry]:
    """Parse `git-rebase-todo` / `done` lines like `pick 1a2b3c4 subject`."""
    entries = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(" ", 2)
        if len(parts) < 2:
            continue
        action = _TODO_COMMANDS.get(parts[0], parts[0])
        oid = parts[1]
        subject = parts[2] if len(parts) > 2 else ""
        entries.append(
            CommitLogEntry(
                oid=oid,
                abbrev=oid[:7],
                subject=subject,
                name=f"{action} {oid[:7]} {subject}".rstrip(),
                done=done,
            )
        )
    return entries


def get_rebase_state(git_dir: Path) -> RebaseState:
    """Read the rebase in progress, if any.

    The section lists finished steps (marked done) followed by the remaining
    todo list; `current` is the number of finished steps.
    """
    for dirname in ("rebase-merge", "rebase-apply"):
        state_dir = git_dir / dirname
        if not state_dir.is_dir():
            continue

        head_name = state_dir / "head-name"
        head = head_name.read_text().strip() if head_name.exists() else "(detached)"
        head = head.removeprefix("refs/heads/")

        onto_file = state_dir / "onto"
        onto = onto_file.read_text().strip() if onto_file.exists() else None

        done_file = state_dir / "done"
        todo_file = state_dir / "git-rebase-todo"
        done = _parse_todo(done_file.read_text(), True) if done_file.exists() else []
        todo = _parse_todo(todo_file.read_text(), False) if todo_file.exists() else []

        return RebaseState(
            head=head,
            onto=onto,
            section=SectionData(items=done + todo, current=len(done)),
        )

    return RebaseState()


def get_sequencer_state(git_dir: Path) -> SequencerState:
    """Detect a revert or cherry-pick in progress."""
    for head in ("REVERT_HEAD", "CHERRY_PICK_HEAD"):
        head_file = git_dir / head
        if not head_file.exists():
            continue

        oid = head_file.read_text().strip()
        action = "revert" if head == "REVERT_HEAD" else "pick"
        entry = CommitLogEntry(
            oid=oid, abbrev=oid[:7], subject="", name=f"{action} {oid[:7]}"
        )
        return SequencerState(head=head, section=SectionData(items=[entry]))

    return SequencerState()
