"""
In-flight request de-duplication.

Concurrent calls with the same key share one execution of the factory:

    dedup = RequestDeduplicator()
    a, b = await asyncio.gather(
        dedup.get("k", fetch),
        dedup.get("k", fetch),
    )   # fetch() ran once, a == b

The key leaves the in-flight table as soon as the shared task finishes
(success or failure), so the next call runs the factory again. Waiters await
through asyncio.shield(): cancelling one waiter never cancels the shared task
for the others.

All state lives on the event loop thread; no lock is needed as long as every
caller runs on the same loop.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestDeduplicator:
    """Collapses concurrent identical requests into one shared outcome."""

    def __init__(self):
        self._pending: Dict[str, "asyncio.Future[Any]"] = {}

    async def get(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Await the outcome for `key`, starting `factory()` only if nothing is in flight.

        Args:
            key: Request identity
            factory: Zero-argument callable returning an awaitable

        Returns:
            The shared result; the shared exception is raised to every waiter
        """
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            # Registered before any waiter, so the key is released before
            # waiters resume.
            task.add_done_callback(lambda done, k=key: self._release(k, done))
        else:
            logger.debug(f"Joining in-flight request '{key}'")

        return await asyncio.shield(task)

    def _release(self, key: str, task: "asyncio.Future[Any]") -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"In-flight request '{key}' failed: {task.exception()!r}")

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def clear(self) -> None:
        """Forget all in-flight keys. Running tasks still complete for their waiters."""
        self._pending.clear()
