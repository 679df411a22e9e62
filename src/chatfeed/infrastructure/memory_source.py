"""In-memory ordered query provider.

Reference implementation of :class:`~chatfeed.domain.source.OrderedQuerySource`
used by the scroll anchor harness, the CLI and the test-suite.  Live handles
are re-evaluated and pushed to their subscribers whenever the collection
changes; the ``filter`` text of a query is not interpreted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from chatfeed.domain.models import FeedQuery, Item, SortOrder
from chatfeed.errors import ProviderQueryFailure, StaleHandle

_logger = logging.getLogger(__name__)


class MemoryResultHandle:
    def __init__(self, source: "InMemoryOrderedSource", query: FeedQuery) -> None:
        self._source = source
        self._query = query.clone()
        self._results: Tuple[Item, ...] = source._evaluate(self._query)
        self._callbacks: List[Callable[[], None]] = []
        self._stale = False
        self._closed = False

    @property
    def query(self) -> FeedQuery:
        return self._query

    @property
    def is_stale(self) -> bool:
        return self._stale

    def items(self) -> Tuple[Item, ...]:
        if self._stale:
            raise StaleHandle("live result handle was invalidated")
        return self._results

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    async def update_selection(self, query: FeedQuery) -> None:
        self._source.selection_count += 1
        self._source.selections.append(query.to_selection())
        await self._source._before_selection()
        if self._stale:
            raise StaleHandle("live result handle was invalidated")
        failure = self._source._take_failure()
        if failure is not None:
            raise failure
        self._query = query.clone()
        self._refresh()

    def close(self) -> None:
        self._closed = True
        self._callbacks.clear()
        self._source._detach(self)

    def _invalidate(self) -> None:
        self._stale = True

    def _refresh(self) -> None:
        fresh = self._source._evaluate(self._query)
        if fresh == self._results:
            return
        self._results = fresh
        for callback in list(self._callbacks):
            callback()


class InMemoryOrderedSource:
    """Ordered collection of :class:`Item` with live, push-notifying queries."""

    def __init__(self, items: Iterable[Item] = (), *, latency: float = 0.0) -> None:
        self._items: Dict[str, Item] = {}
        for item in items:
            self._items[item.id] = item
        self._ordered: Optional[List[Item]] = None
        self._handles: List[MemoryResultHandle] = []
        self._latency = latency
        # Pending failures as [calls to let through first, error].
        self._failures: List[list] = []
        self._gate = asyncio.Event()
        self._gate.set()

        # Provider round trips: initial queries plus selection updates.
        self.query_count = 0
        self.selection_count = 0
        self.selections: List[str] = []

    # -- OrderedQuerySource ---------------------------------------------------

    async def query(self, query: FeedQuery) -> MemoryResultHandle:
        self.query_count += 1
        self.selections.append(query.to_selection())
        await self._before_selection()
        failure = self._take_failure()
        if failure is not None:
            raise failure
        handle = MemoryResultHandle(self, query)
        self._handles.append(handle)
        return handle

    # -- collection mutations ---------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    @property
    def open_handles(self) -> int:
        return len(self._handles)

    def all_items(self) -> List[Item]:
        return list(self._sorted())

    def insert(self, item: Item) -> None:
        self._items[item.id] = item
        self._changed()

    def extend(self, items: Iterable[Item]) -> None:
        for item in items:
            self._items[item.id] = item
        self._changed()

    def replace(self, item: Item) -> None:
        if item.id not in self._items:
            raise KeyError(item.id)
        self._items[item.id] = item
        self._changed()

    def remove(self, item_id: str) -> None:
        del self._items[item_id]
        self._changed()

    # -- fault injection --------------------------------------------------------

    def fail_next(self, error: Optional[Exception] = None, *, skip: int = 0) -> None:
        """Make a query or selection update raise *error*.

        The failure hits the next call, or the one after *skip* successful calls.
        """
        self._failures.append([skip, error or ProviderQueryFailure("selection rejected by provider")])

    def invalidate(self) -> None:
        """Invalidate every open handle, as a provider restart would."""
        for handle in self._handles:
            handle._invalidate()

    def pause(self) -> None:
        """Hold selection updates in flight until :meth:`resume`."""
        self._gate.clear()

    def resume(self) -> None:
        self._gate.set()

    # -- internals --------------------------------------------------------------

    async def _before_selection(self) -> None:
        if self._latency > 0:
            await asyncio.sleep(self._latency)
        else:
            await asyncio.sleep(0)
        await self._gate.wait()

    def _take_failure(self) -> Optional[Exception]:
        if not self._failures:
            return None
        pending = self._failures[0]
        if pending[0] > 0:
            pending[0] -= 1
            return None
        return self._failures.pop(0)[1]

    def _sorted(self) -> List[Item]:
        if self._ordered is None:
            self._ordered = sorted(self._items.values(), key=lambda item: item.sort_key)
        return self._ordered

    def _evaluate(self, query: FeedQuery) -> Tuple[Item, ...]:
        rows = [item for item in self._sorted() if query.accepts(item)]
        if query.order is SortOrder.DESC:
            rows.reverse()
        if query.limit is not None:
            rows = rows[: query.limit]
        return tuple(rows)

    def _changed(self) -> None:
        self._ordered = None
        for handle in list(self._handles):
            if not handle.is_stale:
                handle._refresh()

    def _detach(self, handle: MemoryResultHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)
        _logger.debug("Closed live handle for %s", handle.query.to_selection())
