"""Repository handle and snapshot collection.

Contains:
- GitRepository: Binds the git helpers to one repository root
"""

from pathlib import Path
from typing import Optional

from hunkstage.git import branch, sequencer
from hunkstage.git import index as git_index
from hunkstage.git.diff import get_staged_diffs, get_unstaged_diffs, get_untracked_diff
from hunkstage.git.models import (
    FileEntry,
    Head,
    PushRemote,
    RepositorySnapshot,
    SectionData,
    Upstream,
)
from hunkstage.git.runner import get_repo_root
from hunkstage.git.status import get_status
from hunkstage.log import get_logger

logger = get_logger(__name__)


def _attach_diffs(entries: list[FileEntry], diffs: dict) -> list[FileEntry]:
    for entry in entries:
        entry.diff = diffs.get(entry.name)
        # Submodules and unmerged paths carry no line diff
        entry.has_diff = entry.diff is not None or entry.submodule is None
    return entries


class GitRepository:
    """Git operations for a single working tree."""

    def __init__(self, root: Path):
        self.root = Path(root)

    @classmethod
    def discover(cls, cwd: Optional[Path] = None) -> "GitRepository":
        """Open the repository containing `cwd`."""
        return cls(get_repo_root(cwd))

    def snapshot(self, recent_count: int = 10) -> RepositorySnapshot:
        """Collect everything the status buffer renders.

        Args:
            recent_count: Number of recent commits to list.

        Returns:
            A fresh RepositorySnapshot.
        """
        logger.debug("snapshot_start", root=str(self.root))
        status = get_status(self.root)

        head = Head(branch=status.branch or "(detached)", detached=status.detached)
        head_commit = branch.get_commit_header(self.root, "HEAD") if status.oid else None
        if head_commit:
            head.oid = head_commit.oid
            head.abbrev = head_commit.abbrev
            head.commit_message = head_commit.subject
            head.tag = branch.get_tag(self.root)

        upstream = Upstream()
        if status.upstream:
            remote, _, remote_branch = status.upstream.partition("/")
            upstream = Upstream(ref=status.upstream, remote=remote, branch=remote_branch)
            upstream_commit = branch.get_commit_header(self.root, status.upstream)
            if upstream_commit:
                upstream.oid = upstream_commit.oid
                upstream.abbrev = upstream_commit.abbrev
                upstream.commit_message = upstream_commit.subject
                upstream.unpulled = SectionData(
                    items=branch.get_commits_between(self.root, "HEAD", status.upstream)
                )
                upstream.unmerged = SectionData(
                    items=branch.get_commits_between(self.root, status.upstream, "HEAD")
                )

        push_remote = PushRemote(ref=branch.get_push_remote_ref(self.root, status.branch))
        if push_remote.ref:
            push_commit = branch.get_commit_header(self.root, push_remote.ref)
            if push_commit:
                push_remote.abbrev = push_commit.abbrev
                push_remote.commit_message = push_commit.subject
                push_remote.unpulled = SectionData(
                    items=branch.get_commits_between(self.root, "HEAD", push_remote.ref)
                )
                push_remote.unmerged = SectionData(
                    items=branch.get_commits_between(self.root, push_remote.ref, "HEAD")
                )

        git_dir = sequencer.get_git_dir(self.root)

        untracked = []
        for entry in status.untracked:
            entry.diff = get_untracked_diff(self.root, entry.name)
            entry.has_diff = entry.diff is not None
            untracked.append(entry)

        snapshot = RepositorySnapshot(
            root=self.root,
            head=head,
            upstream=upstream,
            push_remote=push_remote,
            rebase=sequencer.get_rebase_state(git_dir),
            sequencer=sequencer.get_sequencer_state(git_dir),
            untracked=SectionData(items=untracked),
            unstaged=SectionData(
                items=_attach_diffs(status.unstaged, get_unstaged_diffs(self.root))
            ),
            staged=SectionData(items=_attach_diffs(status.staged, get_staged_diffs(self.root))),
            stashes=SectionData(items=branch.get_stashes(self.root)),
            recent=SectionData(items=branch.get_recent_commits(self.root, recent_count)),
        )
        logger.debug(
            "snapshot_done",
            untracked=len(snapshot.untracked.items),
            unstaged=len(snapshot.unstaged.items),
            staged=len(snapshot.staged.items),
        )
        return snapshot

    def rev_parse(self, ref: str) -> Optional[str]:
        return branch.rev_parse(self.root, ref)

    def apply(self, patch: str, cached: bool = False, reverse: bool = False, index: bool = False) -> None:
        git_index.apply(self.root, patch, cached=cached, reverse=reverse, index=index)

    def stage(self, files: list[str]) -> None:
        git_index.stage(self.root, files)

    def add(self, files: list[str]) -> None:
        git_index.add(self.root, files)

    def unstage(self, files: list[str]) -> None:
        git_index.unstage(self.root, files)

    def checkout(self, files: list[str]) -> None:
        git_index.checkout(self.root, files)

    def reset(self, files: list[str]) -> None:
        git_index.reset(self.root, files)

    def stage_modified(self) -> None:
        git_index.stage_modified(self.root)

    def stage_all(self) -> None:
        git_index.stage_all(self.root)

    def unstage_all(self) -> None:
        git_index.unstage_all(self.root)

    def update_index(self) -> None:
        git_index.update(self.root)

    def remove_untracked(self, name: str) -> None:
        git_index.remove_untracked(self.root, name)
