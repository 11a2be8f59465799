"""Debounced scheduling of async actions on the running event loop."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from axgbolt.client.config import client_settings

logger = structlog.get_logger()


class Debouncer:
    """Run an action once input has been quiet for ``delay`` seconds.

    Each ``schedule`` call cancels the action still waiting from the
    previous one, so a burst of keystrokes produces a single request.

    Example usage:
        debouncer = Debouncer(0.5)
        debouncer.schedule(panel.refresh)
        await debouncer.wait()
    """

    def __init__(self, delay: float | None = None) -> None:
        self.delay = client_settings.search_debounce_seconds if delay is None else delay
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, action: Callable[[], Awaitable[object]]) -> None:
        """Replace any waiting action with ``action``."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(action))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the scheduled action, if any, to finish or be cancelled."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def _run(self, action: Callable[[], Awaitable[object]]) -> None:
        await asyncio.sleep(self.delay)
        try:
            await action()
        except Exception:
            logger.exception("Debounced action failed")
