"""Pure Python signal system without a Qt dependency.

Provides ``Signal`` for observer-pattern callbacks used by the snapshot
publisher and the view-model layer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

_logger = logging.getLogger(__name__)


class Signal:
    """Observer-pattern signal that does not depend on Qt.

    Handlers run in connection order on the emitting context.  Exceptions
    raised by individual handlers are caught and logged so that one failing
    handler does not prevent subsequent handlers from executing (same
    semantics as ``EventBus``).
    """

    def __init__(self) -> None:
        self._handlers: list[Callable] = []

    def connect(self, handler: Callable) -> Callable[[], None]:
        """Connect *handler* and return a callable that disconnects it.

        Connecting the same handler twice makes it run twice per emit, as Qt
        does.  Each returned disconnector drops one connection, at most once.
        """
        self._handlers.append(handler)
        connected = True

        def _disconnect() -> None:
            nonlocal connected
            if connected and handler in self._handlers:
                self._handlers.remove(handler)
            connected = False

        return _disconnect

    def disconnect(self, handler: Callable) -> None:
        self._handlers.remove(handler)

    def disconnect_all(self) -> None:
        self._handlers.clear()

    def emit(self, *args: Any, **kwargs: Any) -> None:
        for handler in list(self._handlers):
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                _logger.error("Signal handler %r failed: %s", handler, exc)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)
