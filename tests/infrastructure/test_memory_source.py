"""Tests for the in-memory ordered query provider."""

import asyncio

import pytest

from chatfeed.domain.models import Comparison, ContinuationCursor, Direction, FeedQuery, Item
from chatfeed.errors import ProviderQueryFailure, StaleHandle
from chatfeed.infrastructure import InMemoryOrderedSource


def _messages(count: int):
    return [Item(id=f"m{i:02d}", key=100 + i) for i in range(count)]


def _ids(items):
    return [item.id for item in items]


@pytest.mark.asyncio
async def test_live_query_is_newest_first():
    source = InMemoryOrderedSource(_messages(10))
    handle = await source.query(FeedQuery().live().limited(3))

    assert _ids(handle.items()) == ["m09", "m08", "m07"]
    assert source.query_count == 1
    assert source.open_handles == 1


@pytest.mark.asyncio
async def test_continuation_orders_away_from_cursor():
    source = InMemoryOrderedSource(_messages(10))
    cursor = ContinuationCursor(104, Comparison.GE, Direction.FORWARD)
    handle = await source.query(FeedQuery().continue_from(cursor).limited(3))

    assert _ids(handle.items()) == ["m04", "m05", "m06"]


@pytest.mark.asyncio
async def test_update_selection_rebinds_and_notifies():
    source = InMemoryOrderedSource(_messages(10))
    handle = await source.query(FeedQuery().live().limited(3))
    calls = []
    handle.subscribe(lambda: calls.append(handle.items()))

    cursor = ContinuationCursor(103, Comparison.LE, Direction.BACKWARD)
    await handle.update_selection(FeedQuery().continue_from(cursor).limited(3))

    assert _ids(handle.items()) == ["m03", "m02", "m01"]
    assert len(calls) == 1
    assert source.selection_count == 1
    assert source.selections[-1] == "timestamp <= 103 ORDER BY timestamp DESC LIMIT 3"


@pytest.mark.asyncio
async def test_mutations_push_to_matching_handles():
    source = InMemoryOrderedSource(_messages(5))
    handle = await source.query(FeedQuery().live().limited(2))
    calls = []
    unsubscribe = handle.subscribe(lambda: calls.append(1))

    source.insert(Item(id="m05", key=105))
    assert _ids(handle.items()) == ["m05", "m04"]

    # Outside the selection: no notification.
    source.insert(Item(id="old", key=1))
    assert len(calls) == 1

    source.replace(Item(id="m05", key=105, payload="edited"))
    assert handle.items()[0].payload == "edited"
    assert len(calls) == 2

    unsubscribe()
    source.remove("m05")
    assert _ids(handle.items()) == ["m04", "m03"]
    assert len(calls) == 2


def test_replace_missing_raises():
    source = InMemoryOrderedSource()
    with pytest.raises(KeyError):
        source.replace(Item(id="x", key=1))


@pytest.mark.asyncio
async def test_fail_next_applies_once():
    source = InMemoryOrderedSource(_messages(5))
    source.fail_next()
    with pytest.raises(ProviderQueryFailure):
        await source.query(FeedQuery())
    handle = await source.query(FeedQuery().limited(2))

    source.fail_next(RuntimeError("boom"))
    with pytest.raises(RuntimeError):
        await handle.update_selection(FeedQuery().limited(3))
    # The previous selection stays bound.
    assert len(handle.items()) == 2


@pytest.mark.asyncio
async def test_fail_next_can_skip_calls():
    source = InMemoryOrderedSource(_messages(5))
    handle = await source.query(FeedQuery().limited(2))

    source.fail_next(skip=1)
    await handle.update_selection(FeedQuery().limited(3))
    assert len(handle.items()) == 3
    with pytest.raises(ProviderQueryFailure):
        await handle.update_selection(FeedQuery().limited(4))
    assert len(handle.items()) == 3

    await handle.update_selection(FeedQuery().limited(4))
    assert len(handle.items()) == 4
    assert source.selection_count == 3


@pytest.mark.asyncio
async def test_invalidated_handle_is_stale():
    source = InMemoryOrderedSource(_messages(5))
    handle = await source.query(FeedQuery())
    source.invalidate()

    assert handle.is_stale
    with pytest.raises(StaleHandle):
        handle.items()
    with pytest.raises(StaleHandle):
        await handle.update_selection(FeedQuery())


@pytest.mark.asyncio
async def test_pause_holds_selection():
    source = InMemoryOrderedSource(_messages(5))
    handle = await source.query(FeedQuery().limited(1))
    source.pause()
    task = asyncio.create_task(handle.update_selection(FeedQuery().limited(2)))
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert not task.done()
    assert len(handle.items()) == 1
    source.resume()
    await task
    assert len(handle.items()) == 2


@pytest.mark.asyncio
async def test_close_detaches_handle():
    source = InMemoryOrderedSource(_messages(3))
    handle = await source.query(FeedQuery())
    handle.close()
    assert source.open_handles == 0
    assert len(source) == 3
    assert _ids(source.all_items()) == ["m00", "m01", "m02"]
