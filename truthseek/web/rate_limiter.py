"""Sliding-window rate limiter for outbound provider calls.

Only operation *starts* are bounded: at most ``max_per_second`` operations are
admitted in any trailing ``window`` seconds. Admitted operations run
concurrently and are not awaited by the limiter, so they may finish in any
order even though they are admitted strictly in submission order.
"""

import asyncio
from collections import deque
from functools import partial
from typing import Any, Awaitable, Callable, Deque, Optional, Set, Tuple

from truthseek.utils.logger import get_logger

log = get_logger(__name__)

Operation = Callable[[], Awaitable[Any]]


class RateLimiter:
    """Queue operations and start them no faster than N per window."""

    def __init__(self, max_per_second: int, window: float = 1.0):
        if max_per_second < 1:
            raise ValueError("max_per_second must be at least 1")
        self.max_per_second = max_per_second
        self.window = window
        self._queue: Deque[Tuple[Operation, asyncio.Future]] = deque()
        self._starts: Deque[float] = deque()
        self._worker: Optional[asyncio.Task] = None
        self._running: Set[asyncio.Future] = set()

    @property
    def pending(self) -> int:
        """Operations queued but not yet admitted."""
        return len(self._queue)

    def schedule(self, operation: Operation) -> asyncio.Future:
        """Queue *operation* and return a future for its outcome.

        Must be called from inside a running event loop. Failures of the
        operation surface through the returned future only.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._queue.append((operation, future))
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._admit())
        return future

    async def _admit(self) -> None:
        loop = asyncio.get_running_loop()
        while self._queue:
            now = loop.time()
            while self._starts and now - self._starts[0] >= self.window:
                self._starts.popleft()

            if len(self._starts) >= self.max_per_second:
                delay = self._starts[0] + self.window - now
                log.debug("Rate limit reached (%d/%.1fs), waiting %.3fs",
                          self.max_per_second, self.window, delay)
                await asyncio.sleep(delay)
                continue

            free = self.max_per_second - len(self._starts)
            stamp = loop.time()
            while free > 0 and self._queue:
                operation, future = self._queue.popleft()
                if future.done():
                    # Caller gave up before admission; no slot consumed.
                    continue
                self._starts.append(stamp)
                self._start(operation, future)
                free -= 1

    def _start(self, operation: Operation, future: asyncio.Future) -> None:
        try:
            task = asyncio.ensure_future(operation())
        except Exception as exc:
            future.set_exception(exc)
            return
        self._running.add(task)
        task.add_done_callback(partial(self._settle, future))
        future.add_done_callback(partial(_cancel_if_abandoned, task))

    def _settle(self, future: asyncio.Future, task: asyncio.Future) -> None:
        self._running.discard(task)
        if future.done():
            return
        if task.cancelled():
            future.cancel()
        elif task.exception() is not None:
            future.set_exception(task.exception())
        else:
            future.set_result(task.result())


def _cancel_if_abandoned(task: asyncio.Future, future: asyncio.Future) -> None:
    if future.cancelled() and not task.done():
        task.cancel()
