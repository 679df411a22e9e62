from .core import Anchor, Comparison, Direction, Item, ScrollMetrics, ScrollMode, SortOrder
from .query import ContinuationCursor, FeedQuery

__all__ = [
    "Anchor",
    "Comparison",
    "ContinuationCursor",
    "Direction",
    "FeedQuery",
    "Item",
    "ScrollMetrics",
    "ScrollMode",
    "SortOrder",
]
