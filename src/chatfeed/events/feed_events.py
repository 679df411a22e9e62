from dataclasses import dataclass
from typing import Optional

from ..domain.models import ContinuationCursor, Direction, ScrollMode
from .bus import Event


@dataclass(kw_only=True)
class ModeChangedEvent(Event):
    previous: ScrollMode
    mode: ScrollMode


@dataclass(kw_only=True)
class PageLoadedEvent(Event):
    direction: Optional[Direction]
    cursor: Optional[ContinuationCursor] = None
    fetched: int = 0
    limit: int = 0
    window_size: int = 0


@dataclass(kw_only=True)
class PaginationFailedEvent(Event):
    direction: Direction
    cursor: ContinuationCursor
    message: str = ""


@dataclass(kw_only=True)
class MessageSentEvent(Event):
    item_id: Optional[str] = None
