"""Referentially stable feed snapshots for the rendering layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ...domain.models import Direction, Item, ScrollMode
from .signal import Signal

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedSnapshot:
    """Immutable view of the feed, in display order (oldest first)."""

    items: Tuple[Item, ...] = ()
    mode: ScrollMode = ScrollMode.LIVE
    loading: bool = False
    loading_direction: Optional[Direction] = None
    should_auto_scroll: bool = True
    error: Optional[Exception] = None

    def same_state(self, other: "FeedSnapshot") -> bool:
        # ``items`` is compared by identity: the window only swaps its tuple
        # when the contents changed.
        return (
            self.items is other.items
            and self.mode is other.mode
            and self.loading == other.loading
            and self.loading_direction is other.loading_direction
            and self.should_auto_scroll == other.should_auto_scroll
            and self.error is other.error
        )


class SnapshotPublisher:
    """Build snapshots on demand and notify listeners once per change.

    *build* returns a candidate snapshot from the current state; it is only
    kept when it differs from the current one, so :meth:`get_snapshot`
    returns the same object until an observable field changes.
    """

    def __init__(self, build: Callable[[], FeedSnapshot]) -> None:
        self._build = build
        self._current = FeedSnapshot()
        self._delivered: Optional[FeedSnapshot] = None
        self.changed = Signal()

    def get_snapshot(self) -> FeedSnapshot:
        candidate = self._build()
        if not candidate.same_state(self._current):
            self._current = candidate
        return self._current

    def subscribe(self, listener: Callable[[FeedSnapshot], None]) -> Callable[[], None]:
        return self.changed.connect(listener)

    def publish(self) -> bool:
        """Notify listeners if the state changed since the last delivery."""
        snapshot = self.get_snapshot()
        if snapshot is self._delivered:
            return False
        # Record before emitting so re-entrant publishes compare correctly.
        self._delivered = snapshot
        self.changed.emit(snapshot)
        return True

    @property
    def listener_count(self) -> int:
        return self.changed.handler_count

    def clear(self) -> None:
        self.changed.disconnect_all()
