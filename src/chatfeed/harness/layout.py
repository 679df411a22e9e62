"""Deterministic virtual list used to validate scroll anchoring."""

from __future__ import annotations

import bisect
import logging
import zlib
from typing import Callable, Dict, List, Optional, Sequence

from ..domain.models import Item
from ..gui.viewmodels.chat_scroll_manager import ChatScrollManager
from ..gui.viewmodels.snapshot import FeedSnapshot
from ..scroll.surface import MeasuredItem

LOGGER = logging.getLogger(__name__)

MIN_ROW_HEIGHT = 48
ROW_HEIGHT_SPREAD = 53


def row_height_for(item_id: str) -> float:
    """Stable pseudo-random row height (48-100px, mean close to 74px)."""
    return float(MIN_ROW_HEIGHT + zlib.crc32(item_id.encode("utf-8")) % ROW_HEIGHT_SPREAD)


class SimulatedListSurface:
    """A scroll surface laying out feed items top to bottom.

    Relayout keeps the numeric scroll offset, like a list without any
    anchoring, and reports the new content height to the bound manager.
    With ``native_anchoring`` the surface honours ``maintain_position``
    itself; otherwise the manager compensates with explicit scrolls.
    """

    def __init__(
        self,
        viewport_height: float,
        *,
        native_anchoring: bool = False,
        row_height: Callable[[str], float] = row_height_for,
    ) -> None:
        self._viewport_height = float(viewport_height)
        self._native = native_anchoring
        self._row_height = row_height

        self._items: Sequence[Item] = ()
        self._tops: List[float] = []
        self._heights: List[float] = []
        self._index: Dict[str, int] = {}
        self._content_height = 0.0
        self._offset = 0.0

        self._manager: Optional[ChatScrollManager] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.layout_passes = 0

    # -- binding -----------------------------------------------------------

    def bind(self, manager: ChatScrollManager) -> None:
        self._manager = manager
        manager.attach_surface(self)
        manager.on_layout(self._viewport_height)
        self._unsubscribe = manager.subscribe(self._on_snapshot)
        self._on_snapshot(manager.get_snapshot())

    def unbind(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._manager = None

    def _on_snapshot(self, snapshot: FeedSnapshot) -> None:
        if snapshot.items is self._items:
            return
        self._layout(snapshot.items)
        if self._manager is not None:
            self._manager.on_content_size_change(self._content_height)

    def _layout(self, items: Sequence[Item]) -> None:
        self._items = items
        self._tops = []
        self._heights = []
        self._index = {}
        top = 0.0
        for index, item in enumerate(items):
            height = self._row_height(item.id)
            self._tops.append(top)
            self._heights.append(height)
            self._index[item.id] = index
            top += height
        self._content_height = top
        self._offset = self._clamp(self._offset)
        self.layout_passes += 1

    # -- geometry ----------------------------------------------------------

    @property
    def supports_native_anchoring(self) -> bool:
        return self._native

    @property
    def scroll_offset(self) -> float:
        return self._offset

    @property
    def content_height(self) -> float:
        return self._content_height

    @property
    def viewport_height(self) -> float:
        return self._viewport_height

    @property
    def max_offset(self) -> float:
        return max(0.0, self._content_height - self._viewport_height)

    @property
    def at_top(self) -> bool:
        return self._offset <= 0.0

    @property
    def at_bottom(self) -> bool:
        return self._offset >= self.max_offset

    def measure_visible(self) -> List[MeasuredItem]:
        if not self._items:
            return []
        bottom = self._offset + self._viewport_height
        first = max(0, bisect.bisect_right(self._tops, self._offset) - 1)
        visible = []
        for index in range(first, len(self._items)):
            top = self._tops[index]
            if top >= bottom:
                break
            if top + self._heights[index] <= self._offset:
                continue
            visible.append(self._measure(index))
        return visible

    def measure_item(self, item_id: str) -> Optional[MeasuredItem]:
        index = self._index.get(item_id)
        if index is None:
            return None
        return self._measure(index)

    def _measure(self, index: int) -> MeasuredItem:
        return MeasuredItem(
            id=self._items[index].id,
            screen_y=self._tops[index] - self._offset,
            height=self._heights[index],
        )

    # -- scrolling ---------------------------------------------------------

    def scroll_to_offset(self, offset: float) -> None:
        self._offset = self._clamp(offset)
        self._emit_scroll()

    def scroll_to_end(self) -> None:
        self.scroll_to_offset(self.max_offset)

    def maintain_position(self, index: int, screen_y: float) -> None:
        if not (0 <= index < len(self._tops)):
            return
        self.scroll_to_offset(self._tops[index] - screen_y)

    def user_scroll_by(self, dy: float) -> float:
        """Scroll by *dy* as one drag gesture and return the applied delta."""
        target = self._clamp(self._offset + dy)
        applied = target - self._offset
        manager = self._manager
        if manager is not None:
            manager.on_scroll_begin_drag()
        self._offset = target
        self._emit_scroll()
        if manager is not None:
            manager.on_scroll_end_drag()
            manager.on_momentum_scroll_end()
        return applied

    def _emit_scroll(self) -> None:
        if self._manager is not None:
            self._manager.on_scroll(self._offset, self._content_height, self._viewport_height)

    def _clamp(self, offset: float) -> float:
        return min(max(0.0, offset), self.max_offset)
