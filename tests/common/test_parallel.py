from __future__ import annotations

import asyncio

import pytest

from coursesync.common.parallel import for_each, parallel_map, resolve_worker_count


def test_parallel_map_empty_input_never_calls_fn() -> None:
    calls: list[int] = []

    async def fn(index: int, item: int) -> int:
        calls.append(index)
        return item

    results, errors = asyncio.run(parallel_map([], fn))

    assert results == []
    assert errors == []
    assert calls == []


def test_parallel_map_keeps_input_order() -> None:
    items = [5, 4, 3, 2, 1]

    async def fn(_index: int, item: int) -> int:
        # Later items finish first.
        await asyncio.sleep(item / 1000)
        return item * 10

    results, errors = asyncio.run(parallel_map(items, fn, max_workers=2))

    assert results == [50, 40, 30, 20, 10]
    assert errors == []


def test_parallel_map_respects_max_workers() -> None:
    in_flight = 0
    peak = 0

    async def fn(_index: int, _item: int) -> None:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1

    asyncio.run(parallel_map(list(range(10)), fn, max_workers=3))

    assert peak == 3


def test_parallel_map_collects_errors_without_aborting() -> None:
    async def fn(index: int, item: str) -> str:
        if index == 1:
            raise ValueError(f"bad item {item}")
        return item.upper()

    results, errors = asyncio.run(parallel_map(["a", "b", "c"], fn))

    assert results == ["A", None, "C"]
    assert len(errors) == 1
    assert isinstance(errors[0], ValueError)


def test_parallel_map_timeout_leaves_unfinished_slots_empty() -> None:
    async def fn(_index: int, item: float) -> float:
        await asyncio.sleep(item)
        return item

    results, errors = asyncio.run(
        parallel_map([0.0, 10.0, 10.0], fn, max_workers=3, timeout=0.05)
    )

    assert results == [0.0, None, None]
    assert errors == []


def test_parallel_map_propagates_cancellation() -> None:
    async def fn(_index: int, _item: int) -> None:
        await asyncio.sleep(10)

    async def scenario() -> None:
        task = asyncio.create_task(parallel_map([1, 2], fn))
        await asyncio.sleep(0.01)
        task.cancel()
        await task

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(scenario())


def test_for_each_returns_errors() -> None:
    seen: list[int] = []

    async def fn(_index: int, item: int) -> None:
        if item < 0:
            raise RuntimeError("negative")
        seen.append(item)

    errors = asyncio.run(for_each([1, -1, 2], fn, max_workers=1))

    assert sorted(seen) == [1, 2]
    assert [str(error) for error in errors] == ["negative"]


@pytest.mark.parametrize(
    ("max_workers", "item_count", "expected"),
    [(0, 50, 10), (-3, 5, 5), (4, 2, 2), (4, 100, 4), (4, 0, 1)],
)
def test_resolve_worker_count(max_workers: int, item_count: int, expected: int) -> None:
    assert resolve_worker_count(max_workers, item_count) == expected
