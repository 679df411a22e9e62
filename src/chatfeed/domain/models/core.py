from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ScrollMode(str, Enum):
    # Tracks the newest edge and auto-extends on new arrivals.
    LIVE = "live"
    # Anchored below the newest edge, extending toward older items.
    BACKWARD = "backward"
    # Catching back up toward LIVE, extending toward newer items.
    FORWARD = "forward"


class SortOrder(Enum):
    ASC = "ASC"
    DESC = "DESC"


class Comparison(Enum):
    LE = "<="
    GE = ">="

    def holds(self, value: Any, boundary: Any) -> bool:
        if self is Comparison.LE:
            return value <= boundary
        return value >= boundary


class Direction(str, Enum):
    """Paging direction, relative to the live edge."""

    BACKWARD = "backward"
    FORWARD = "forward"

    @property
    def mode(self) -> ScrollMode:
        return ScrollMode(self.value)

    @property
    def order(self) -> SortOrder:
        return SortOrder.DESC if self is Direction.BACKWARD else SortOrder.ASC

    @property
    def comparison(self) -> Comparison:
        return Comparison.LE if self is Direction.BACKWARD else Comparison.GE


@dataclass(frozen=True)
class Item:
    """A single feed entry (a chat message).

    ``key`` is the comparable ordering key, typically an integer timestamp.
    Two items may share a key; ``sort_key`` breaks the tie on ``id`` so the
    window order is always strict.
    """

    id: str
    key: Any
    payload: Any = None

    @property
    def sort_key(self) -> tuple[Any, str]:
        return (self.key, self.id)


@dataclass(frozen=True)
class ScrollMetrics:
    gap_to_top: float = 0.0
    gap_to_bottom: float = 0.0
    buffer_threshold: float = 0.0
    item_count: int = 0

    @property
    def near_top(self) -> bool:
        return self.gap_to_top < self.buffer_threshold

    @property
    def near_bottom(self) -> bool:
        return self.gap_to_bottom < self.buffer_threshold


@dataclass(frozen=True)
class Anchor:
    """Visual reference point recorded before a window mutation."""

    item_id: str
    index_in_window: int
    screen_y: float
