"""Refresh coordination for one status buffer.

Contains:
- Permit: The token held by an in-flight rebuild
- RefreshLock: Single-slot permit with a watchdog that force-releases it
- StatusState: A completed tree together with its rendered text
- RefreshCoordinator: Serializes rebuilds and publishes finished trees

Only one rebuild runs at a time per repository. Readers always see the last
published StatusState and never a tree that is still being built.

A permit force-released by the watchdog does not stop the rebuild that held
it, so that rebuild can still publish after a newer one started. The
watchdog only keeps a stuck rebuild from blocking every later refresh.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

import anyio

from hunkstage.git.exceptions import GitError
from hunkstage.git.models import RepositorySnapshot
from hunkstage.log import get_logger
from hunkstage.status.builder import build
from hunkstage.status.locate import CursorLocation, restore_cursor, save_cursor
from hunkstage.status.models import RenderedBuffer, StatusTree
from hunkstage.user_config import StatusConfig

logger = get_logger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0


class Permit:
    """Token for the single refresh slot. Releasing it twice is a no-op."""

    def __init__(self, lock: "RefreshLock", reason: str):
        self._lock = lock
        self.reason = reason
        self.released = False

    def forget(self) -> bool:
        """Release the permit.

        Returns:
            True if this call released it, False if it was already released.
        """
        if self.released:
            return False
        self.released = True
        self._lock._release()
        return True


class RefreshLock:
    """A counting permit capped at one, with a watchdog timeout."""

    def __init__(self, timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.timeout = timeout
        self.permits = 1
        self._waiters: list[anyio.Event] = []

    @property
    def locked(self) -> bool:
        return self.permits == 0

    def try_acquire(self, reason: str = "unknown") -> Optional[Permit]:
        """Take the permit if it is free."""
        if self.permits == 0:
            return None
        self.permits -= 1
        logger.debug("refresh_lock_acquired", reason=reason)
        return Permit(self, reason)

    async def acquire(self, reason: str = "unknown") -> Permit:
        """Wait for the permit."""
        while self.permits == 0:
            event = anyio.Event()
            self._waiters.append(event)
            await event.wait()
        return self.try_acquire(reason)

    def _release(self) -> None:
        self.permits = min(self.permits + 1, 1)
        logger.debug("refresh_lock_released")
        waiters, self._waiters = self._waiters, []
        for event in waiters:
            event.set()

    async def watchdog(self, permit: Permit) -> None:
        """Force-release `permit` if it is still held after the timeout."""
        await anyio.sleep(self.timeout)
        if permit.forget():
            logger.warning(
                "refresh_lock_expired", reason=permit.reason, timeout=self.timeout
            )


@dataclass
class StatusState:
    """A fully built tree and its rendered text."""

    tree: StatusTree = field(default_factory=StatusTree)
    rendered: RenderedBuffer = field(default_factory=RenderedBuffer)
    snapshot: Optional[RepositorySnapshot] = None


class RefreshCoordinator:
    """Rebuilds the status tree of one repository, one rebuild at a time.

    Args:
        loader: Blocking callable returning a fresh RepositorySnapshot. It
            runs in a worker thread.
        config: Display configuration.
        width: Terminal width passed to the builder.
        timeout: Watchdog timeout, defaults to `config.refresh_timeout`.
    """

    def __init__(
        self,
        loader: Callable[[], RepositorySnapshot],
        config: StatusConfig,
        width: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.loader = loader
        self.config = config
        self.width = width
        self.lock = RefreshLock(timeout if timeout is not None else config.refresh_timeout)
        self.state = StatusState()
        self.cursor_line = 1
        self._listeners: list[Callable[[StatusState], None]] = []

    @property
    def tree(self) -> StatusTree:
        return self.state.tree

    @property
    def rendered(self) -> RenderedBuffer:
        return self.state.rendered

    def add_listener(self, listener: Callable[[StatusState], None]) -> None:
        """Call `listener` after every completed refresh."""
        self._listeners.append(listener)

    async def request_refresh(self, reason: str = "unknown") -> bool:
        """Refresh unless a refresh is already running.

        Requests made while locked are dropped, not queued.

        Returns:
            True if a refresh ran and published a new tree.
        """
        if self.lock.locked:
            logger.debug("refresh_dropped", reason=reason)
            return False
        return await self.refresh(reason)

    async def refresh(self, reason: str = "unknown") -> bool:
        """Wait for the permit, then reload and rebuild.

        Returns:
            True if a new tree was published, False if loading failed and
            the previous tree was kept.
        """
        permit = await self.lock.acquire(reason)
        async with anyio.create_task_group() as tg:
            tg.start_soon(self.lock.watchdog, permit)
            try:
                return await self._rebuild(reason)
            finally:
                permit.forget()
                tg.cancel_scope.cancel()

    async def _rebuild(self, reason: str) -> bool:
        cursor = save_cursor(self.tree, self.cursor_line)
        logger.debug("refresh_start", reason=reason)

        try:
            snapshot = await anyio.to_thread.run_sync(self.loader)
        except GitError as e:
            logger.error("refresh_failed", reason=reason, error=str(e))
            return False
        except Exception as e:
            logger.exception("refresh_failed", reason=reason, error=str(e))
            return False

        self.publish(snapshot, cursor)
        logger.debug("refresh_done", reason=reason, lines=len(self.rendered))

        for listener in self._listeners:
            listener(self.state)
        return True

    def publish(self, snapshot: RepositorySnapshot, cursor: Optional[CursorLocation]) -> None:
        """Build from `snapshot`, swap in the result and restore the cursor."""
        tree, rendered = build(self.tree, snapshot, self.config, self.width)
        self.state = StatusState(tree=tree, rendered=rendered, snapshot=snapshot)
        self.cursor_line = restore_cursor(tree, cursor)

    def rerender(self) -> None:
        """Rebuild from the cached snapshot after fold changes.

        The cursor keeps its line number, clamped to the new buffer.
        """
        if self.state.snapshot is None:
            return
        tree, rendered = build(self.tree, self.state.snapshot, self.config, self.width)
        self.state = StatusState(tree=tree, rendered=rendered, snapshot=self.state.snapshot)
        self.cursor_line = max(1, min(self.cursor_line, len(rendered)))

    def reset(self) -> None:
        """Forget the tree, so fold state starts from the configured defaults."""
        self.state = StatusState()
        self.cursor_line = 1
