"""Tests for hunkstage CLI commands."""

import pytest
import yaml
from typer.testing import CliRunner

from hunkstage.cli import app
from hunkstage.cli.utils import format_status, printable
from hunkstage.status.models import FoldSign, LineTag, RenderedBuffer

from conftest import BASE_LINES

runner = CliRunner()


@pytest.fixture
def modified_repo(git_repo, monkeypatch):
    """Repository with lines 2 and 18 of a.txt changed, used as cwd.

    Default layout:
        1 Head, 2 blank, 3 Unstaged changes (1), 4 Modified a.txt,
        5 blank, 6 Recent commits (1)

    With --depth 4 the first hunk renders at lines 5-11:
        5 @@ -1,5 +1,5 @@, 6 " line 1", 7 "-line 2", 8 "+line 2 changed"
    """
    lines = list(BASE_LINES)
    lines[1] = "line 2 changed"
    lines[17] = "line 18 changed"
    (git_repo / "a.txt").write_text("\n".join(lines) + "\n")
    monkeypatch.chdir(git_repo)
    return git_repo


class TestMainCommand:
    """Tests for the main hunkstage command."""

    def test_shows_help(self):
        """Test that help is displayed."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "status" in result.output
        assert "stage" in result.output
        assert "config" in result.output

    def test_version(self):
        """Test --version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert result.output.startswith("hunkstage ")

    def test_outside_repository(self, temp_dir, monkeypatch):
        """Test commands fail cleanly outside a repository."""
        monkeypatch.chdir(temp_dir)

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        assert "Error: Not in a git repository" in result.output


class TestStatusCommand:
    """Tests for hunkstage status."""

    def test_default_layout(self, modified_repo):
        """Test the default fold state."""
        result = runner.invoke(app, ["status", "--numbers", "--no-color"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("1   Head:")
        assert lines[2] == "3 v Unstaged changes (1)"
        assert lines[3] == "4 > Modified       a.txt"
        assert lines[5] == "6 > Recent commits (1)"
        assert len(lines) == 6

    def test_depth_opens_hunks(self, modified_repo):
        """Test --depth 4 renders the diff."""
        result = runner.invoke(app, ["status", "-d", "4", "--no-color"])

        assert result.exit_code == 0
        assert "v @@ -1,5 +1,5 @@" in result.output
        assert "  +line 18 changed" in result.output

    def test_color(self, modified_repo):
        """Test ANSI colors are emitted by default."""
        result = runner.invoke(app, ["status", "-d", "4"], color=True)

        assert "\033[32m+line 2 changed\033[0m" in result.output

    def test_non_utf8_content(self, modified_repo):
        """Test bytes that are not UTF-8 print as replacement characters."""
        (modified_repo / "notes.txt").write_bytes(b"caf\xe9\r\n")

        result = runner.invoke(app, ["status", "-d", "4", "--no-color"])

        assert result.exit_code == 0
        assert "  +caf�\n" in result.output

    def test_invalid_depth(self, modified_repo):
        """Test depth outside 1-4 is a usage error."""
        result = runner.invoke(app, ["status", "-d", "7"])
        assert result.exit_code == 2

    def test_invalid_config(self, modified_repo):
        """Test a broken config file is reported."""
        (modified_repo / ".hunkstage").mkdir()
        (modified_repo / ".hunkstage" / "config.yaml").write_text("recent_count: [\n")

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        assert "Error: Failed to load config" in result.output


class TestSelectCommand:
    """Tests for hunkstage select."""

    def test_section_header(self, modified_repo):
        """Test a section header selects its files."""
        result = runner.invoke(app, ["select", "3"])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["3,3:", "unstaged:", "  a.txt:"]


class TestStageCommands:
    """Tests for hunkstage stage and unstage."""

    def test_stage_file(self, modified_repo, git):
        """Test staging the file line."""
        result = runner.invoke(app, ["stage", "4"])

        assert result.exit_code == 0
        assert git(modified_repo, "diff", "--cached", "--name-only") == "a.txt\n"
        assert "Staged changes (1)" in result.output

    def test_stage_line(self, modified_repo, git):
        """Test staging one added line."""
        result = runner.invoke(app, ["stage", "8", "--partial", "-d", "4"])

        assert result.exit_code == 0
        staged = git(modified_repo, "diff", "--cached")
        assert "+line 2 changed" in staged
        assert "-line 2" not in staged
        assert "line 18" not in staged

    def test_unstage_file(self, modified_repo, git):
        """Test unstaging the file line."""
        git(modified_repo, "add", "a.txt")

        result = runner.invoke(app, ["unstage", "4"])

        assert result.exit_code == 0
        assert git(modified_repo, "diff", "--cached") == ""
        assert "Unstaged changes (1)" in result.output


class TestDiscardCommand:
    """Tests for hunkstage discard."""

    def test_discard_with_yes(self, modified_repo, git):
        """Test --yes skips the prompt."""
        result = runner.invoke(app, ["discard", "4", "--yes"])

        assert result.exit_code == 0
        assert git(modified_repo, "diff") == ""

    def test_prompt_declined(self, modified_repo, git):
        """Test answering no keeps the changes."""
        result = runner.invoke(app, ["discard", "4"], input="n\n")

        assert result.exit_code == 0
        assert 'Discard "a.txt"?' in result.output
        assert "Nothing discarded." in result.output
        assert "+line 2 changed" in git(modified_repo, "diff")

    def test_prompt_accepted(self, modified_repo, git):
        """Test answering yes discards one hunk."""
        result = runner.invoke(app, ["discard", "5", "-d", "4"], input="y\n")

        assert result.exit_code == 0
        assert "Discard 1 hunks?" in result.output
        diff = git(modified_repo, "diff")
        assert "line 2 changed" not in diff
        assert "+line 18 changed" in diff

    def test_nothing_to_discard(self, modified_repo):
        """Test a header row discards nothing."""
        result = runner.invoke(app, ["discard", "1"])

        assert result.exit_code == 0
        assert "Nothing discarded." in result.output


class TestGotoCommand:
    """Tests for hunkstage goto."""

    def test_line_in_hunk(self, modified_repo):
        """Test a diff line maps to a file position."""
        result = runner.invoke(app, ["goto", "8", "-d", "4"])

        assert result.exit_code == 0
        assert result.output.strip() == f"{modified_repo / 'a.txt'}:2:1"

    def test_file_line(self, modified_repo):
        """Test the file line opens the file."""
        result = runner.invoke(app, ["goto", "4"])
        assert result.output.strip() == str(modified_repo / "a.txt")

    def test_blank_line(self, modified_repo):
        """Test a blank line has nothing to open."""
        result = runner.invoke(app, ["goto", "2"])

        assert result.exit_code == 1
        assert "Nothing to open on this line." in result.output


class TestYankCommand:
    """Tests for hunkstage yank."""

    def test_yank_file(self, modified_repo):
        """Test the file name is printed."""
        result = runner.invoke(app, ["yank", "4"])

        assert result.exit_code == 0
        assert result.output.strip() == "a.txt"

    def test_yank_commit(self, modified_repo, git):
        """Test a recent commit prints its oid."""
        result = runner.invoke(app, ["yank", "7", "-d", "2"])

        assert result.exit_code == 0
        assert result.output.strip() == git(modified_repo, "rev-parse", "HEAD").strip()

    def test_nothing_to_yank(self, modified_repo):
        """Test a blank line yanks nothing."""
        result = runner.invoke(app, ["yank", "2"])
        assert result.exit_code == 1


class TestConfigCommands:
    """Tests for hunkstage config subcommands."""

    def test_show_defaults(self, git_repo, monkeypatch):
        """Test showing the default configuration."""
        monkeypatch.chdir(git_repo)

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "defaults, no config file" in result.output
        assert "recent                 folded: yes  hidden: no" in result.output

    def test_set_fold(self, git_repo, monkeypatch):
        """Test set-fold writes the config file."""
        monkeypatch.chdir(git_repo)

        result = runner.invoke(app, ["config", "set-fold", "recent", "--open"])

        assert result.exit_code == 0
        assert "now starts open" in result.output
        with open(git_repo / ".hunkstage" / "config.yaml") as f:
            saved = yaml.safe_load(f)
        assert saved["sections"]["recent"]["folded"] is False

    def test_hide(self, git_repo, monkeypatch):
        """Test hiding a section removes it from the status."""
        monkeypatch.chdir(git_repo)

        result = runner.invoke(app, ["config", "hide", "recent"])
        assert result.exit_code == 0

        status = runner.invoke(app, ["status", "--no-color"])
        assert "Recent commits" not in status.output

    def test_unknown_section(self, git_repo, monkeypatch):
        """Test an unknown section is an error."""
        monkeypatch.chdir(git_repo)

        result = runner.invoke(app, ["config", "hide", "nope"])

        assert result.exit_code == 1
        assert "Unknown section: nope" in result.output


class TestFormatStatus:
    """Tests for format_status function."""

    def test_printable(self):
        """Test escaped bytes and line-end CRs are cleaned for display."""
        assert printable("caf\udce9\r") == "caf�"
        assert printable("plain") == "plain"

    def test_signs_and_numbers(self):
        """Test the sign column and line numbers."""
        rendered = RenderedBuffer(
            lines=["Head:     main", "", "Untracked files (1)", "notes.txt"],
            tags=[LineTag.HEAD, LineTag.BLANK, LineTag.SECTION, LineTag.ITEM],
            signs={3: FoldSign.OPEN},
        )

        assert format_status(rendered, numbers=True).splitlines() == [
            "1   Head:     main",
            "2",
            "3 v Untracked files (1)",
            "4   notes.txt",
        ]
