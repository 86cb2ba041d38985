"""Shared test fixtures and configuration."""

import shutil
import subprocess
import tempfile
from pathlib import Path

import pytest
import structlog

from hunkstage.git.diff import parse_unified_diff
from hunkstage.git.models import Diff, FileEntry, Head, RepositorySnapshot, SectionData

BASE_LINES = [f"line {i}" for i in range(1, 21)]


def run_git(repo: Path, *args: str) -> str:
    """Run git in `repo` and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Run every test with structlog defaults, so debug events can be captured."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def git():
    """The run_git helper."""
    return run_git


@pytest.fixture
def git_repo(temp_dir):
    """A repository with one commit containing a.txt (20 lines)."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    run_git(temp_dir, "init", "-q")
    run_git(temp_dir, "config", "user.email", "test@example.com")
    run_git(temp_dir, "config", "user.name", "Test User")
    run_git(temp_dir, "config", "commit.gpgsign", "false")
    run_git(temp_dir, "config", "core.autocrlf", "false")

    (temp_dir / "a.txt").write_text("\n".join(BASE_LINES) + "\n")
    run_git(temp_dir, "add", "a.txt")
    run_git(temp_dir, "commit", "-q", "-m", "Initial commit")
    return temp_dir


@pytest.fixture
def sample_diff_text():
    """Unstaged diff of a.py with two hunks: one addition, one removal."""
    return """diff --git a/a.py b/a.py
index 1111111..2222222 100644
--- a/a.py
+++ b/a.py
@@ -1,3 +1,4 @@
 one
+two
 three
 four
@@ -10,3 +11,2 @@
 ten
-eleven
 twelve
"""


@pytest.fixture
def sample_diff(sample_diff_text) -> Diff:
    return parse_unified_diff(sample_diff_text)["a.py"]


@pytest.fixture
def sample_snapshot(sample_diff) -> RepositorySnapshot:
    """Snapshot with a branch header and one unstaged file (a.py)."""
    return RepositorySnapshot(
        root=Path("/repo"),
        head=Head(branch="main", oid="abc1234def", abbrev="abc1234", commit_message="Initial commit"),
        unstaged=SectionData(
            items=[FileEntry(name="a.py", mode="M", diff=sample_diff, absolute_path=Path("/repo/a.py"))]
        ),
    )
