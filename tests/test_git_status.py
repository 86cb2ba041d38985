"""Tests for hunkstage.git.status and hunkstage.git.sequencer modules."""

from pathlib import Path

from hunkstage.git.sequencer import get_rebase_state, get_sequencer_state
from hunkstage.git.status import get_status, parse_porcelain_v2


def porcelain(*records: str) -> str:
    return "\0".join(records) + "\0"


class TestParsePorcelainV2:
    """Tests for parse_porcelain_v2 function."""

    def test_branch_headers(self):
        """Test branch header records."""
        status = parse_porcelain_v2(
            porcelain(
                "# branch.oid 1234567890abcdef",
                "# branch.head main",
                "# branch.upstream origin/main",
                "# branch.ab +2 -3",
            )
        )

        assert status.oid == "1234567890abcdef"
        assert status.branch == "main"
        assert status.upstream == "origin/main"
        assert (status.ahead, status.behind) == (2, 3)
        assert not status.detached

    def test_initial_and_detached(self):
        """Test a repository without commits on a detached head."""
        status = parse_porcelain_v2(porcelain("# branch.oid (initial)", "# branch.head (detached)"))

        assert status.oid is None
        assert status.branch is None
        assert status.detached

    def test_staged_and_unstaged_columns(self):
        """Test the XY columns split one entry into both lists."""
        status = parse_porcelain_v2(
            porcelain(
                "1 MM N... 100644 100644 100644 aaaaaaa bbbbbbb src/app.py",
                "1 A. N... 000000 100644 100644 0000000 ccccccc new.py",
                "1 .D N... 100644 100644 000000 ddddddd ddddddd gone.py",
            ),
            Path("/repo"),
        )

        assert [(e.name, e.mode) for e in status.staged] == [("src/app.py", "M"), ("new.py", "A")]
        assert [(e.name, e.mode) for e in status.unstaged] == [("src/app.py", "M"), ("gone.py", "D")]
        assert status.staged[0].absolute_path == Path("/repo/src/app.py")

    def test_paths_with_spaces(self):
        """Test file names may contain spaces."""
        status = parse_porcelain_v2(
            porcelain("1 .M N... 100644 100644 100644 aaaaaaa aaaaaaa my notes.txt", "? new dir/a b.txt")
        )

        assert status.unstaged[0].name == "my notes.txt"
        assert status.untracked[0].name == "new dir/a b.txt"
        assert status.untracked[0].absolute_path is None

    def test_rename_consumes_source_record(self):
        """Test the rename source is read from the following record."""
        status = parse_porcelain_v2(
            porcelain(
                "2 R. N... 100644 100644 100644 aaaaaaa aaaaaaa R100 new_name.py",
                "old_name.py",
                "? after.txt",
            )
        )

        assert status.staged[0].name == "new_name.py"
        assert status.staged[0].original_name == "old_name.py"
        assert status.staged[0].mode == "R"
        assert [e.name for e in status.untracked] == ["after.txt"]

    def test_unmerged_entry(self):
        """Test unmerged entries are unstaged with their two-letter mode."""
        status = parse_porcelain_v2(
            porcelain("u UU N... 100644 100644 100644 100644 aaaaaaa bbbbbbb ccccccc conflict.txt")
        )

        assert status.staged == []
        assert status.unstaged[0].name == "conflict.txt"
        assert status.unstaged[0].mode == "UU"

    def test_submodule_flags(self):
        """Test the submodule field is parsed."""
        status = parse_porcelain_v2(
            porcelain("1 .M SC.U 160000 160000 160000 aaaaaaa aaaaaaa vendor/lib")
        )

        submodule = status.unstaged[0].submodule
        assert submodule.commit_changed
        assert not submodule.has_tracked_changes
        assert submodule.has_untracked_changes

    def test_ignored_entries_are_skipped(self):
        """Test ignored records produce nothing."""
        status = parse_porcelain_v2(porcelain("! build/"))
        assert (status.untracked, status.unstaged, status.staged) == ([], [], [])

    def test_empty_output(self):
        """Test empty output gives an empty status."""
        status = parse_porcelain_v2("")
        assert status.branch is None
        assert status.untracked == []


class TestGetStatus:
    """Tests for get_status against a repository."""

    def test_reads_repository(self, git_repo, git):
        """Test a real status run."""
        (git_repo / "a.txt").write_text("changed\n")
        (git_repo / "notes.txt").write_text("hello\n")
        (git_repo / "b.txt").write_text("b\n")
        git(git_repo, "add", "b.txt")

        status = get_status(git_repo)

        assert status.branch == git(git_repo, "branch", "--show-current").strip()
        assert status.oid == git(git_repo, "rev-parse", "HEAD").strip()
        assert [e.name for e in status.untracked] == ["notes.txt"]
        assert [(e.name, e.mode) for e in status.unstaged] == [("a.txt", "M")]
        assert [(e.name, e.mode) for e in status.staged] == [("b.txt", "A")]
        assert status.unstaged[0].absolute_path == git_repo / "a.txt"


class TestSequencerState:
    """Tests for rebase and sequencer detection."""

    def test_idle(self, temp_dir):
        """Test nothing is reported without state files."""
        assert get_rebase_state(temp_dir).head is None
        assert get_sequencer_state(temp_dir).head is None

    def test_interactive_rebase(self, temp_dir):
        """Test done and todo steps are listed with progress."""
        state_dir = temp_dir / "rebase-merge"
        state_dir.mkdir()
        (state_dir / "head-name").write_text("refs/heads/feature\n")
        (state_dir / "onto").write_text("abcdef0123\n")
        (state_dir / "done").write_text("pick 1111111aaa First\n")
        (state_dir / "git-rebase-todo").write_text(
            "r 2222222bbb Second\n# comment\n\npick 3333333ccc Third\n"
        )

        state = get_rebase_state(temp_dir)

        assert state.head == "feature"
        assert state.onto == "abcdef0123"
        assert state.section.current == 1
        assert [entry.display_name for entry in state.section.items] == [
            "pick 1111111 First",
            "reword 2222222 Second",
            "pick 3333333 Third",
        ]
        assert [entry.done for entry in state.section.items] == [True, False, False]

    def test_cherry_pick(self, temp_dir):
        """Test a cherry-pick in progress."""
        (temp_dir / "CHERRY_PICK_HEAD").write_text("4444444dddd\n")

        state = get_sequencer_state(temp_dir)

        assert state.head == "CHERRY_PICK_HEAD"
        assert state.section.items[0].display_name == "pick 4444444"
