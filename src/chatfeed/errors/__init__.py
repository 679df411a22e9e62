"""Custom exception hierarchy for chatfeed."""

from __future__ import annotations


class ChatFeedError(Exception):
    """Base class for all custom errors raised by chatfeed."""


# --- 3-layer hierarchy ---

class DomainError(ChatFeedError):
    """Base class for domain-level errors."""


class InfrastructureError(ChatFeedError):
    """Base class for errors raised by or about the query provider."""


class ApplicationError(ChatFeedError):
    """Base class for application-level errors."""


# --- Domain errors ---

class DuplicateCursor(DomainError):
    """Raised when a continuation cursor equals the one issued last.

    Benign: rapid repeated scroll events produce it and it is swallowed by
    the pagination controller without issuing a query.
    """

    def __init__(self, cursor: object) -> None:
        super().__init__(f"continuation cursor already issued: {cursor!r}")
        self.cursor = cursor


class AnchorNotFoundError(DomainError):
    """Raised when the anchor item is missing from the replaced window."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"anchor item {item_id!r} is not in the window")
        self.item_id = item_id


# --- Infrastructure errors ---

class ProviderQueryFailure(InfrastructureError):
    """Raised when the provider rejects or fails a (continuation) query."""


class StaleHandle(InfrastructureError):
    """Raised when a live result handle was invalidated by the provider."""


# --- Application errors ---

class PaginationBusyError(ApplicationError):
    """Raised when a pagination cycle is requested while another is in flight."""


class NotInitializedError(ApplicationError):
    """Raised when the feed is used before ``initialize`` resolved."""


# --- Settings errors ---

class SettingsError(ChatFeedError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be read or parsed."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


__all__ = [
    "AnchorNotFoundError",
    "ApplicationError",
    "ChatFeedError",
    "DomainError",
    "DuplicateCursor",
    "InfrastructureError",
    "NotInitializedError",
    "PaginationBusyError",
    "ProviderQueryFailure",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
    "StaleHandle",
]
