"""Windowed pagination and scroll anchoring for live-updating chat feeds."""

from __future__ import annotations

from .domain.models import (
    Anchor,
    Comparison,
    ContinuationCursor,
    Direction,
    FeedQuery,
    Item,
    ScrollMetrics,
    ScrollMode,
    SortOrder,
)
from .gui.viewmodels.chat_scroll_manager import ChatScrollManager
from .gui.viewmodels.snapshot import FeedSnapshot
from .infrastructure.memory_source import InMemoryOrderedSource
from .settings import ScrollSettings, load_settings

__all__ = [
    "Anchor",
    "ChatScrollManager",
    "Comparison",
    "ContinuationCursor",
    "Direction",
    "FeedQuery",
    "FeedSnapshot",
    "InMemoryOrderedSource",
    "Item",
    "ScrollMetrics",
    "ScrollMode",
    "ScrollSettings",
    "SortOrder",
    "load_settings",
]

__version__ = "0.1.0"
