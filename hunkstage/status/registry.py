"""Registry of open status buffers, one per repository root."""

from pathlib import Path
from typing import Optional

import anyio

from hunkstage.git.repo import GitRepository
from hunkstage.log import get_logger
from hunkstage.status.buffer import StatusBuffer
from hunkstage.status.locate import CursorLocation
from hunkstage.user_config import StatusConfig, get_status_config

logger = get_logger(__name__)


class StatusRegistry:
    """Tracks open status buffers by repository root.

    The cursor location of the last closed buffer is kept and used to place
    the cursor of the next buffer opened.
    """

    def __init__(self):
        self._buffers: dict[Path, StatusBuffer] = {}
        self.cursor_location: Optional[CursorLocation] = None

    def __len__(self) -> int:
        return len(self._buffers)

    def __iter__(self):
        return iter(list(self._buffers.values()))

    async def open(
        self,
        path: Path,
        config: Optional[StatusConfig] = None,
        width: Optional[int] = None,
    ) -> StatusBuffer:
        """Open (or return the already open) buffer for the repository at `path`.

        Raises:
            NotARepositoryError: If `path` is not inside a repository.
            ConfigError: If the repository configuration is invalid.
        """
        repo = GitRepository.discover(Path(path))
        existing = self._buffers.get(repo.root)
        if existing is not None:
            return existing

        if config is None:
            config = get_status_config(repo.root)

        buffer = StatusBuffer(repo, config, width=width, registry=self)
        self._buffers[repo.root] = buffer
        try:
            await buffer.open(self.cursor_location)
        except BaseException:
            del self._buffers[repo.root]
            raise
        logger.debug("status_buffer_opened", root=str(repo.root))
        return buffer

    def find(self, root: Path) -> Optional[StatusBuffer]:
        return self._buffers.get(Path(root))

    def forget(self, buffer: StatusBuffer, location: Optional[CursorLocation]) -> None:
        """Stop tracking a closed buffer."""
        if self._buffers.get(buffer.root) is buffer:
            del self._buffers[buffer.root]
        self.cursor_location = location
        logger.debug("status_buffer_closed", root=str(buffer.root))

    def close(self, root: Path) -> None:
        buffer = self.find(root)
        if buffer is not None:
            buffer.close()

    def close_all(self) -> None:
        for buffer in self:
            buffer.close()

    async def refresh_all(self, reason: str = "unknown") -> None:
        """Refresh every open buffer concurrently. Each has its own lock."""
        async with anyio.create_task_group() as tg:
            for buffer in self:
                tg.start_soon(buffer.coordinator.refresh, reason)

    async def reset_all(self) -> None:
        async with anyio.create_task_group() as tg:
            for buffer in self:
                tg.start_soon(buffer.reset)
