"""
A fixed-size pool of asyncio workers draining a shared queue.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONCURRENCY = 15


@dataclass
class PoolResult(Generic[T]):
    """Outcome of one pool run."""

    total: int = 0
    succeeded: int = 0
    failures: list[tuple[T, BaseException]] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def attempted(self) -> int:
        return self.succeeded + self.failed


class WorkerPool(Generic[T]):
    """
    Runs `handler` over every item with at most `concurrency` items in flight.

    Workers pop from a shared deque and count finished items under one lock,
    so no item is handed out twice and `on_complete` fires exactly once, on
    the increment that reaches the total. Handler exceptions are recorded as
    failures and never reach the caller.

    There is no timeout unless one is given: a handler that never returns
    holds its worker slot for the rest of the run.
    """

    def __init__(
        self,
        handler: Callable[[T], Awaitable[Any]],
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float | None = None,
        on_progress: Callable[[int, int], None] | None = None,
        on_failure: Callable[[T, BaseException], None] | None = None,
        on_complete: Callable[[PoolResult[T]], None] | None = None,
    ):
        if concurrency < 1:
            raise ValueError("Concurrency must be at least 1.")
        self.handler = handler
        self.concurrency = concurrency
        self.timeout = timeout
        self.on_progress = on_progress
        self.on_failure = on_failure
        self.on_complete = on_complete

        self._queue: deque[T] = deque()
        self._lock = asyncio.Lock()
        self._completed = 0
        self._total = 0
        self._result: PoolResult[T] = PoolResult()

    async def run(self, items: Iterable[T]) -> PoolResult[T]:
        """Processes all items and returns once every one has been attempted."""
        self._queue = deque(items)
        self._total = len(self._queue)
        self._completed = 0
        self._result = PoolResult(total=self._total)

        if self._total == 0:
            self._signal_complete()
            return self._result

        workers = [
            asyncio.create_task(self._worker(i))
            for i in range(min(self.concurrency, self._total))
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            for worker in workers:
                if not worker.done():
                    worker.cancel()
        return self._result

    async def _next_item(self) -> tuple[bool, T | None]:
        async with self._lock:
            if not self._queue:
                return False, None
            return True, self._queue.popleft()

    async def _mark_finished(self) -> tuple[int, bool]:
        """Atomically counts one finished item; True only on the final one."""
        async with self._lock:
            self._completed += 1
            return self._completed, self._completed == self._total

    async def _worker(self, worker_id: int) -> None:
        while True:
            has_item, item = await self._next_item()
            if not has_item:
                log.debug(f"Worker {worker_id} found the queue empty, stopping.")
                return

            try:
                if self.timeout is not None:
                    await asyncio.wait_for(self.handler(item), self.timeout)
                else:
                    await self.handler(item)
            except Exception as e:
                self._result.failures.append((item, e))
                if self.on_failure:
                    self.on_failure(item, e)
            else:
                self._result.succeeded += 1

            completed, is_last = await self._mark_finished()
            if self.on_progress:
                self.on_progress(completed, self._total)
            if is_last:
                self._signal_complete()

    def _signal_complete(self) -> None:
        if self.on_complete:
            self.on_complete(self._result)
