"""Tests for hunkstage.git.diff module."""

from hunkstage.git.diff import (
    get_staged_diffs,
    get_unstaged_diffs,
    get_untracked_diff,
    parse_unified_diff,
)

TWO_FILES_DIFF = """diff --git a/src/app.py b/src/app.py
index 1111111..2222222 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,2 +1,3 @@ def main():
 import os
+import sys
 import re
diff --git a/README.md b/README.md
index 3333333..4444444 100644
--- a/README.md
+++ b/README.md
@@ -5 +5 @@
-old
+new
"""


class TestParseUnifiedDiff:
    """Tests for parse_unified_diff function."""

    def test_empty_output(self):
        """Test empty output gives no diffs."""
        assert parse_unified_diff("") == {}
        assert parse_unified_diff("\n\n") == {}

    def test_splits_files(self):
        """Test each file gets its own Diff."""
        diffs = parse_unified_diff(TWO_FILES_DIFF)

        assert list(diffs) == ["src/app.py", "README.md"]
        assert diffs["src/app.py"].header_lines[0] == "diff --git a/src/app.py b/src/app.py"
        assert diffs["src/app.py"].header_lines[-1] == "+++ b/src/app.py"

    def test_lines_start_at_first_hunk(self, sample_diff):
        """Test Diff.lines holds only hunk headers and bodies."""
        assert sample_diff.lines[0] == "@@ -1,3 +1,4 @@"
        assert sample_diff.lines[-1] == " twelve"
        assert len(sample_diff.lines) == 9

    def test_hunk_ranges(self, sample_diff):
        """Test hunk indices and header ranges."""
        first, second = sample_diff.hunks

        assert (first.diff_from, first.diff_to) == (0, 4)
        assert (first.index_from, first.index_len, first.disk_from, first.disk_len) == (1, 3, 1, 4)
        assert (second.diff_from, second.diff_to) == (5, 8)
        assert (second.index_from, second.index_len, second.disk_from, second.disk_len) == (10, 3, 11, 2)

    def test_omitted_lengths_default_to_one(self):
        """Test `@@ -5 +5 @@` headers."""
        hunk = parse_unified_diff(TWO_FILES_DIFF)["README.md"].hunks[0]
        assert (hunk.index_from, hunk.index_len, hunk.disk_from, hunk.disk_len) == (5, 1, 5, 1)

    def test_context_lines_keep_whitespace(self):
        """Test an empty context line stays a single space."""
        diff = parse_unified_diff(
            "diff --git a/x.py b/x.py\n"
            "--- a/x.py\n"
            "+++ b/x.py\n"
            "@@ -1,2 +1,3 @@\n"
            " a = 1\n"
            "+b = 2\n"
            " \n"
        )["x.py"]
        assert diff.lines == ["@@ -1,2 +1,3 @@", " a = 1", "+b = 2", " "]
        assert diff.hunks[0].diff_to == 3

    def test_hunk_hash_depends_on_content(self, sample_diff_text):
        """Test equal hunks hash equally and edits change the hash."""
        original = parse_unified_diff(sample_diff_text)["a.py"]
        again = parse_unified_diff(sample_diff_text)["a.py"]
        edited = parse_unified_diff(sample_diff_text.replace("+two", "+2"))["a.py"]

        assert [h.hash for h in original.hunks] == [h.hash for h in again.hunks]
        assert original.hunks[0].hash != edited.hunks[0].hash
        assert original.hunks[1].hash == edited.hunks[1].hash

    def test_binary_file(self):
        """Test binary diffs have no lines."""
        diff = parse_unified_diff(
            "diff --git a/logo.png b/logo.png\n"
            "index 1111111..2222222 100644\n"
            "Binary files a/logo.png and b/logo.png differ\n"
        )["logo.png"]

        assert diff.is_binary
        assert diff.hunks == []

    def test_mode_change_only(self):
        """Test a diff without hunks."""
        diff = parse_unified_diff(
            "diff --git a/run.sh b/run.sh\nold mode 100644\nnew mode 100755\n"
        )["run.sh"]

        assert not diff.is_binary
        assert diff.lines == []
        assert diff.header_lines[-1] == "new mode 100755"

    def test_rename_uses_new_path(self):
        """Test renamed files are keyed by their new name."""
        diffs = parse_unified_diff(
            "diff --git a/old.py b/new.py\n"
            "similarity index 90%\n"
            "rename from old.py\n"
            "rename to new.py\n"
            "--- a/old.py\n"
            "+++ b/new.py\n"
            "@@ -1 +1 @@\n"
            "-x = 1\n"
            "+x = 2\n"
        )
        assert list(diffs) == ["new.py"]


class TestRepositoryDiffs:
    """Tests for reading diffs from a repository."""

    def test_unstaged_and_staged(self, git_repo, git):
        """Test the worktree and index diffs are read separately."""
        lines = (git_repo / "a.txt").read_text().splitlines()
        lines[0] = "first"
        (git_repo / "a.txt").write_text("\n".join(lines) + "\n")
        git(git_repo, "add", "a.txt")
        lines[19] = "last"
        (git_repo / "a.txt").write_text("\n".join(lines) + "\n")

        staged = get_staged_diffs(git_repo)["a.txt"]
        unstaged = get_unstaged_diffs(git_repo)["a.txt"]

        assert "+first" in staged.lines
        assert "+last" not in staged.lines
        assert "+last" in unstaged.lines
        assert "+first" not in unstaged.lines

    def test_untracked_file(self, git_repo):
        """Test an untracked file is diffed against /dev/null."""
        (git_repo / "notes.txt").write_text("one\ntwo\n")

        diff = get_untracked_diff(git_repo, "notes.txt")

        assert diff.lines == ["@@ -0,0 +1,2 @@", "+one", "+two"]
        assert "--- /dev/null" in diff.header_lines
