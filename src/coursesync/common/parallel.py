"""Bounded fan-out/fan-in over asyncio tasks.

``parallel_map`` runs a coroutine function over a batch with at most
``max_workers`` items in flight. Results keep the index alignment of the input
no matter which item finishes first, and per-item failures are collected instead
of aborting the batch. ``for_each`` is the side-effect-only variant.

A ``timeout`` bounds the whole batch: when it expires, in-flight items are
cancelled and items that never started are skipped, so their result slots stay
``None``. Cancelling the calling task propagates as usual.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

log = getLogger(__name__)

DEFAULT_MAX_WORKERS = 10


def resolve_worker_count(max_workers: int, item_count: int) -> int:
    """Clamp ``max_workers`` to ``[1, item_count]``, defaulting non-positive values."""

    workers = max_workers if max_workers > 0 else DEFAULT_MAX_WORKERS
    return max(1, min(workers, item_count))


async def parallel_map[T, R](
    items: Sequence[T],
    fn: Callable[[int, T], Awaitable[R]],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float | None = None,
) -> tuple[list[R | None], list[Exception]]:
    """Apply ``fn(index, item)`` to every item with bounded concurrency.

    Returns ``(results, errors)``. ``results[i]`` belongs to ``items[i]``; it is
    ``None`` when the item raised or was skipped by the timeout. ``errors`` holds
    the exceptions raised by ``fn`` in completion order.
    """

    if not items:
        return [], []

    results: list[R | None] = [None] * len(items)
    errors: list[Exception] = []

    async def run(index: int, item: T) -> None:
        results[index] = await fn(index, item)

    await _drain(items, run, errors, max_workers=max_workers, timeout=timeout)
    return results, errors


async def for_each[T](
    items: Sequence[T],
    fn: Callable[[int, T], Awaitable[object]],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float | None = None,
) -> list[Exception]:
    """Run ``fn(index, item)`` for side effects only and return the collected errors."""

    if not items:
        return []

    errors: list[Exception] = []

    async def run(index: int, item: T) -> None:
        await fn(index, item)

    await _drain(items, run, errors, max_workers=max_workers, timeout=timeout)
    return errors


async def _drain[T](
    items: Sequence[T],
    run: Callable[[int, T], Awaitable[None]],
    errors: list[Exception],
    *,
    max_workers: int,
    timeout: float | None,
) -> None:
    pending: asyncio.Queue[int] = asyncio.Queue()
    for index in range(len(items)):
        pending.put_nowait(index)

    async def worker() -> None:
        while True:
            try:
                index = pending.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                await run(index, items[index])
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

    workers = resolve_worker_count(max_workers, len(items))
    try:
        async with asyncio.timeout(timeout), asyncio.TaskGroup() as group:
            for _ in range(workers):
                group.create_task(worker())
    except TimeoutError:
        log.warning(
            "Parallel batch timed out after %ss with %d of %d items not started",
            timeout,
            pending.qsize(),
            len(items),
        )
