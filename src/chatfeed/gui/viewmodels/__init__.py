from .base import BaseViewModel
from .chat_scroll_manager import ChatScrollManager
from .signal import Signal
from .snapshot import FeedSnapshot, SnapshotPublisher

__all__ = [
    "BaseViewModel",
    "ChatScrollManager",
    "FeedSnapshot",
    "Signal",
    "SnapshotPublisher",
]
