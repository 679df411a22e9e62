from dataclasses import dataclass
from typing import Any, Optional

from .core import Comparison, Direction, Item, SortOrder


@dataclass(frozen=True)
class ContinuationCursor:
    """Ordering-key boundary used to request the next page in a direction."""

    boundary: Any
    comparison: Comparison
    direction: Direction

    @classmethod
    def from_item(cls, item: Item, direction: Direction) -> "ContinuationCursor":
        return cls(boundary=item.key, comparison=direction.comparison, direction=direction)


@dataclass
class FeedQuery:
    """Feed query object - Fluent API for building a provider selection"""

    filter: str = ""
    order_by: str = "timestamp"
    order: SortOrder = SortOrder.DESC
    limit: Optional[int] = None
    cursor: Optional[ContinuationCursor] = None

    def ordered(self, order: SortOrder):
        self.order = order
        return self

    def limited(self, limit: int):
        self.limit = limit
        return self

    def continue_from(self, cursor: ContinuationCursor):
        """Fluent API: restrict to the range past *cursor*, ordered away from it"""
        self.cursor = cursor
        self.order = cursor.direction.order
        return self

    def live(self):
        """Fluent API: the canonical live-edge selection (newest first)"""
        self.cursor = None
        self.order = SortOrder.DESC
        return self

    def clone(self) -> "FeedQuery":
        return FeedQuery(**self.__dict__)

    @property
    def is_live(self) -> bool:
        return self.cursor is None and self.order is SortOrder.DESC

    def accepts(self, item: Item) -> bool:
        """Whether *item* lies inside the cursor range (the filter is opaque)."""
        if self.cursor is None:
            return True
        return self.cursor.comparison.holds(item.key, self.cursor.boundary)

    def to_selection(self) -> str:
        clauses = [self.filter] if self.filter else []
        if self.cursor is not None:
            clauses.append(
                f"{self.order_by} {self.cursor.comparison.value} {self.cursor.boundary}"
            )
        selection = " AND ".join(clauses)
        selection = f"{selection} ORDER BY {self.order_by} {self.order.value}".strip()
        if self.limit is not None:
            selection += f" LIMIT {self.limit}"
        return selection
