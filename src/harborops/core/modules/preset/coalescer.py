"""Coalescing of concurrent identical requests into one shared call."""

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from functools import partial

import structlog

logger = structlog.get_logger(__name__)


class RequestCoalescer[T]:
    """Shares one in-flight call per key among all concurrent callers.

    A failed call is evicted at once so the next caller retries; every
    caller that joined it receives the error. A successful call is evicted
    when it finishes, or kept for `ttl` seconds when a ttl is set.
    """

    def __init__(self, ttl: float = 0.0) -> None:
        self._ttl = ttl
        self._tasks: dict[Hashable, asyncio.Future[T]] = {}
        self._expires_at: dict[Hashable, float] = {}

    @property
    def pending(self) -> int:
        """Number of cached entries, running or finished within the ttl."""
        return len(self._tasks)

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """Await the shared call for `key`, starting it with `factory` if none is cached."""
        task = self._tasks.get(key)
        if task is not None and task.done() and self._is_expired(key):
            self._evict(key)
            task = None

        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(partial(self._on_done, key))
            logger.debug("coalesced_request_started", key=key)
        else:
            logger.debug("coalesced_request_joined", key=key)

        # A cancelled caller must not cancel the call for the others
        return await asyncio.shield(task)

    def invalidate(self, key: Hashable) -> None:
        """Forget the entry for `key`; callers already waiting still get its result."""
        self._evict(key)

    def invalidate_where(self, predicate: Callable[[Hashable], bool]) -> None:
        for key in [key for key in self._tasks if predicate(key)]:
            self._evict(key)

    def clear(self) -> None:
        self._tasks.clear()
        self._expires_at.clear()

    def _is_expired(self, key: Hashable) -> bool:
        return asyncio.get_running_loop().time() >= self._expires_at.get(key, 0.0)

    def _evict(self, key: Hashable) -> None:
        self._tasks.pop(key, None)
        self._expires_at.pop(key, None)

    def _on_done(self, key: Hashable, task: asyncio.Future[T]) -> None:
        if self._tasks.get(key) is not task:
            return
        if task.cancelled() or task.exception() is not None:
            self._evict(key)
            logger.warning("coalesced_request_failed", key=key, cancelled=task.cancelled())
            return
        if self._ttl <= 0:
            self._evict(key)
        else:
            self._expires_at[key] = asyncio.get_running_loop().time() + self._ttl
