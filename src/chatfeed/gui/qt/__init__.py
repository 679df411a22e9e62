"""PySide6 adapter exposing feed snapshots as a list model."""

from .feed_list_model import FeedListModel
from .roles import Roles, role_names

__all__ = ["FeedListModel", "Roles", "role_names"]
