from .bus import Event, EventBus, Subscription
from .feed_events import (
    MessageSentEvent,
    ModeChangedEvent,
    PageLoadedEvent,
    PaginationFailedEvent,
)

__all__ = [
    "Event",
    "EventBus",
    "MessageSentEvent",
    "ModeChangedEvent",
    "PageLoadedEvent",
    "PaginationFailedEvent",
    "Subscription",
]
