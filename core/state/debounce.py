"""
Debounced search keyed by the latest query.

Every new query cancels the pending one. A result is published only if its
query is still the latest when it resolves, so the last typed query wins
even when an older request happens to resolve later.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestQueryDebouncer(Generic[T]):

    def __init__(self, search: Callable[[str], Awaitable[T]], delay_ms: int):
        self._search = search
        self.delay = delay_ms / 1000
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self.latest_query: Optional[str] = None
        self.latest_result: Optional[T] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, query: str) -> asyncio.Task:
        """Start the debounce window for a query, superseding any pending one."""
        self.cancel()
        self._generation += 1
        self.latest_query = query
        self._task = asyncio.create_task(self._run(query, self._generation))
        return self._task

    async def _run(self, query: str, generation: int) -> Optional[T]:
        await asyncio.sleep(self.delay)
        result = await self._search(query)
        if generation != self._generation:
            logger.debug(f"[DEBOUNCE] Dropped stale result for {query!r}")
            return None
        self.latest_result = result
        return result

    async def request(self, query: str) -> Optional[T]:
        """Submit and wait. None means a newer query superseded this one."""
        task = self.submit(query)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    def cancel(self) -> None:
        """Drop whatever is pending; its result will never be published."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._generation += 1
