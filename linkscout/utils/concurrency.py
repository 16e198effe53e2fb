"""Concurrency helpers for fanning out catalog lookups.

The resolver launches every applicable lookup at once and only merges the
outcomes after all of them have settled.  :func:`throttled_gather` is the
primitive for that: ``asyncio.gather`` with an optional semaphore and
``return_exceptions`` semantics so one failing lookup never cancels the
others.

Unlike a process-wide semaphore, the semaphore here is always passed in by
the caller, so two resolvers (or two test cases) never share throttling
state.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with optional semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore bounding how many awaitables run at once.
        ``None`` runs them all immediately.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input awaitables.
    """
    if semaphore is None:
        return await asyncio.gather(*coros, return_exceptions=return_exceptions)

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
