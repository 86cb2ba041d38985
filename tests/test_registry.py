"""Tests for hunkstage.status.registry module."""

import pytest

from hunkstage.git.exceptions import GitError, NotARepositoryError
from hunkstage.status.registry import StatusRegistry
from hunkstage.user_config import ConfigError, StatusConfig

pytestmark = pytest.mark.anyio


class TestStatusRegistry:
    """Tests for StatusRegistry."""

    async def test_open_from_subdirectory(self, git_repo):
        """Test buffers are keyed by repository root."""
        (git_repo / "sub").mkdir()
        registry = StatusRegistry()

        buffer = await registry.open(git_repo / "sub")

        assert buffer.root == git_repo
        assert registry.find(git_repo) is buffer
        assert len(registry) == 1

    async def test_open_twice_returns_same_buffer(self, git_repo):
        """Test one buffer per repository."""
        registry = StatusRegistry()
        first = await registry.open(git_repo)
        second = await registry.open(git_repo)

        assert first is second
        assert len(registry) == 1

    async def test_open_outside_repository(self, temp_dir):
        """Test opening a plain directory fails."""
        registry = StatusRegistry()
        with pytest.raises(NotARepositoryError):
            await registry.open(temp_dir)
        assert len(registry) == 0

    async def test_failed_open_is_not_registered(self, git_repo, mocker):
        """Test a buffer whose first render fails is not kept."""
        registry = StatusRegistry()
        mocker.patch(
            "hunkstage.status.buffer.StatusBuffer.open",
            side_effect=GitError("boom", ["status"]),
        )

        with pytest.raises(GitError):
            await registry.open(git_repo)
        assert registry.find(git_repo) is None

        mocker.stopall()
        buffer = await registry.open(git_repo)
        assert registry.find(git_repo) is buffer
        assert len(buffer.rendered) > 0

    async def test_open_reads_repository_config(self, git_repo):
        """Test the configuration file of the repository is used."""
        config_dir = git_repo / ".hunkstage"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("recent_count: 1\n")

        buffer = await StatusRegistry().open(git_repo)

        assert buffer.config.recent_count == 1

    async def test_invalid_config(self, git_repo):
        """Test a broken configuration file is reported."""
        config_dir = git_repo / ".hunkstage"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("recent_count: many\n")

        with pytest.raises(ConfigError):
            await StatusRegistry().open(git_repo)

    async def test_close_forgets_and_keeps_cursor(self, git_repo):
        """Test closing stores the cursor for the next open."""
        (git_repo / "notes.txt").write_text("hello\n")
        registry = StatusRegistry()
        config = StatusConfig(items_folded=False)
        buffer = await registry.open(git_repo, config=config)

        item = buffer.tree.section("untracked").items[0]
        buffer.move(item.first)
        registry.close(git_repo)

        assert buffer.closed
        assert len(registry) == 0
        assert registry.cursor_location.item.key == "notes.txt"

        reopened = await registry.open(git_repo, config=config)
        assert reopened is not buffer
        assert reopened.cursor_line == reopened.tree.section("untracked").items[0].first

    async def test_close_all(self, git_repo):
        """Test every buffer is closed."""
        registry = StatusRegistry()
        buffer = await registry.open(git_repo)

        registry.close_all()

        assert buffer.closed
        assert list(registry) == []

    async def test_refresh_all(self, git_repo):
        """Test every open buffer sees new changes."""
        registry = StatusRegistry()
        buffer = await registry.open(git_repo)
        assert buffer.tree.section("untracked") is None

        (git_repo / "notes.txt").write_text("hello\n")
        await registry.refresh_all("test")

        assert buffer.tree.section("untracked") is not None

    async def test_reset_all(self, git_repo):
        """Test fold state is dropped in every buffer."""
        registry = StatusRegistry()
        buffer = await registry.open(git_repo, config=StatusConfig(sections={}))
        buffer.set_depth(1)

        await registry.reset_all()

        assert not buffer.tree.section("recent").folded
