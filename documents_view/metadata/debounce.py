"""Trailing-edge debounce for coroutine callbacks."""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Tuple

from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Debouncer:
    """Coalesce bursts of calls into one call after a quiet period.

    Every call re-arms the timer on the running event loop and replaces the
    pending arguments, so only the latest arguments reach the callback.
    """

    def __init__(self, callback: Callable[..., Awaitable[Any]], delay: float):
        """Initialize the debouncer.

        Args:
            callback: Coroutine function to run once the timer fires
            delay: Quiet period in seconds
        """
        self._callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._args: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None
        self._tasks: Set[asyncio.Task] = set()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._args = (args, kwargs)
        self._handle = loop.call_later(self.delay, self._fire)

    @property
    def pending(self) -> bool:
        """Whether a call is waiting for its timer."""
        return self._handle is not None

    def cancel(self) -> None:
        """Drop the pending call, if any. Calls already running are left alone."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._args = None

    async def flush(self) -> None:
        """Run the pending call now and wait for all running calls."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()
        await self.wait()

    async def wait(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        if self._args is None:
            return
        args, kwargs = self._args
        self._args = None

        task = asyncio.get_running_loop().create_task(self._callback(*args, **kwargs))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            LOGGER.error(
                "Debounced call failed",
                exc_info=error,
                extra={"callback": getattr(self._callback, "__qualname__", repr(self._callback))},
            )
