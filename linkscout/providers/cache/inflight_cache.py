"""De-duplication of concurrent identical requests.

When two lookups ask for the same URL at the same time (the Apple Music
source and the resolver's album lookup, or two releases sharing a track),
only one network call should happen.  :class:`InflightRequestCache` maps a
request key to the task performing it; later callers await that task
instead of starting their own.  Entries remove themselves when the task
finishes, so the cache never serves stale results: it de-duplicates, it
does not memoise.

An instance is owned by whoever builds the HTTP client, which keeps the
state injectable and resettable between tests.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import structlog

logger = structlog.get_logger(logger_name=__name__)


class InflightRequestCache:
    """Key -> pending task map with self-clearing entries."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task[Any]] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    async def run(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Return the result of ``factory()``, sharing it with concurrent callers.

        If a task for *key* is already running, its outcome (result or
        exception) is returned to this caller too and *factory* is not
        called.  Cancelling one waiter does not cancel the shared task.
        """
        task = self._pending.get(key)
        if task is not None:
            logger.debug("http_request_deduplicated", key=key)
            return await asyncio.shield(task)

        task = asyncio.ensure_future(factory())
        self._pending[key] = task
        task.add_done_callback(lambda finished, k=key: self._forget(k, finished))
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    def clear(self) -> None:
        """Forget every pending entry; running tasks are left to finish."""
        self._pending.clear()
