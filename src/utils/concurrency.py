"""Shared concurrency primitives for the ticketing boundary.

The matching and itinerary core is synchronous; concurrency only exists
where the app talks to ticketing APIs.  Two patterns are exposed:

1. **throttled_gather** -- ``asyncio.gather`` with each awaitable wrapped in
   a semaphore acquire/release.  Used to fan out to every enabled ticketing
   source at once while keeping the number of in-flight requests bounded.

2. **batched_gather** -- run a coroutine factory over a list of items in
   fixed-width batches with a short pause between batches.  Used for
   artist-centric APIs (Bandsintown) that have an implicit per-minute rate
   limit; failures are logged and the batch continues.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")
_I = TypeVar("_I")

# Shared across all ticketing providers so that bursts from concurrent
# API requests do not stack up against the same upstream.
_SOURCE_SEMAPHORE = asyncio.Semaphore(5)

_logger: structlog.BoundLogger = get_logger(__name__)


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
        Optional semaphore for concurrency control.  Defaults to the
        module-level ``_SOURCE_SEMAPHORE``.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = _SOURCE_SEMAPHORE

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


async def batched_gather(
    fn: Callable[[_I], Awaitable[list[Any]]],
    items: list[_I],
    batch_size: int = 10,
    delay_seconds: float = 0.1,
    logger: structlog.BoundLogger | None = None,
    error_msg: str = "batch_item_failed",
) -> list[Any]:
    """Call ``fn`` for every item in fixed-size batches and flatten the results.

    Items in a batch run concurrently; batches run one after another with
    ``delay_seconds`` between them.  A failing item is logged and
    contributes nothing.

    Parameters
    ----------
    fn:
        Async callable returning a list of results for one item.
    items:
        Inputs, processed in order.
    batch_size:
        Number of concurrent calls per batch.
    delay_seconds:
        Pause between consecutive batches (not after the last one).
    logger:
        Optional structured logger for warnings on failures.
    error_msg:
        Event name logged for each failed item.

    Returns
    -------
    list[Any]
        Flattened results of every successful call, in item order.
    """
    if logger is None:
        logger = _logger
    if batch_size < 1:
        batch_size = 1

    all_results: list[Any] = []
    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        raw_results = await asyncio.gather(
            *(fn(item) for item in batch), return_exceptions=True
        )
        for item, result in zip(batch, raw_results):
            if isinstance(result, Exception):
                logger.warning(error_msg, item=str(item), error=str(result))
            elif isinstance(result, BaseException):
                raise result
            elif isinstance(result, list):
                all_results.extend(result)
            else:
                all_results.append(result)

        if start + batch_size < len(items) and delay_seconds > 0:
            await asyncio.sleep(delay_seconds)

    return all_results
