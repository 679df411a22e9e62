"""Authoritative in-memory item window."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..domain.models import Direction, Item, ScrollMode, SortOrder

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowPage:
    """A normalized provider page, ready to replace the window."""

    items: Tuple[Item, ...]
    order: SortOrder
    limit: int
    has_more: bool


class WindowState:
    """Bounded window of items in display order (oldest first) plus the mode.

    The window is only mutated through :meth:`apply`; ``items`` keeps its
    identity while the contents are unchanged so consumers can compare by
    reference.
    """

    def __init__(self) -> None:
        self._items: Tuple[Item, ...] = ()
        self._index: dict[str, int] = {}
        self._mode = ScrollMode.LIVE
        self._order = SortOrder.DESC
        self._limit = 0
        self._has_more = False

    # -- properties --------------------------------------------------------

    @property
    def items(self) -> Tuple[Item, ...]:
        return self._items

    @property
    def mode(self) -> ScrollMode:
        return self._mode

    @mode.setter
    def mode(self, mode: ScrollMode) -> None:
        self._mode = ScrollMode(mode)

    @property
    def order(self) -> SortOrder:
        """Sort order of the fetch that produced the current window."""
        return self._order

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def has_more(self) -> bool:
        """Whether rows exist past the edge the last fetch was moving toward."""
        return self._has_more

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    # -- lookups -----------------------------------------------------------

    def index_of(self, item_id: str) -> Optional[int]:
        return self._index.get(item_id)

    def edge_item(self, direction: Direction) -> Optional[Item]:
        """Return the oldest item for ``BACKWARD``, the newest for ``FORWARD``."""
        if not self._items:
            return None
        return self._items[0] if direction is Direction.BACKWARD else self._items[-1]

    def at_boundary(self, direction: Direction) -> bool:
        if direction is Direction.BACKWARD:
            return self._order is SortOrder.DESC and not self._has_more
        if self._mode is ScrollMode.LIVE:
            return True
        return self._order is SortOrder.ASC and not self._has_more

    # -- mutation ----------------------------------------------------------

    @staticmethod
    def build(page: Sequence[Item], order: SortOrder, limit: int) -> WindowPage:
        """Normalize a provider page fetched with a one-row look-ahead.

        *page* is in query order, nearest-to-cursor first.  The result is
        truncated to *limit*, de-duplicated by id and sorted ascending.
        """
        rows = list(page)
        has_more = len(rows) > limit
        anomalies = []
        if len(rows) > limit + 1:
            anomalies.append(f"{len(rows)} rows for limit {limit}")

        seen: set[str] = set()
        unique: list[Item] = []
        for item in rows:
            if item.id in seen:
                continue
            seen.add(item.id)
            unique.append(item)
        if len(unique) != len(rows):
            anomalies.append(f"{len(rows) - len(unique)} duplicate ids")

        reverse = order is SortOrder.DESC
        ordered = sorted(unique, key=lambda item: item.sort_key, reverse=reverse)
        if ordered != unique:
            anomalies.append(f"rows not in {order.value} order")

        kept = ordered[:limit]
        if anomalies:
            LOGGER.warning("Normalized provider page: %s", "; ".join(anomalies))
        if reverse:
            kept.reverse()
        return WindowPage(items=tuple(kept), order=order, limit=limit, has_more=has_more)

    def apply(self, page: WindowPage) -> bool:
        """Replace the window with *page*.  Returns whether the items changed."""
        self._order = page.order
        self._limit = page.limit
        self._has_more = page.has_more
        if page.items == self._items:
            return False
        self._items = page.items
        self._index = {item.id: index for index, item in enumerate(page.items)}
        return True

    def clear(self) -> None:
        self._items = ()
        self._index = {}
        self._has_more = False
