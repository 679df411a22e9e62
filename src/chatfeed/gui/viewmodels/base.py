"""Base view-model, pure Python with no Qt dependency.

A view-model collects teardown callbacks while it wires itself up (event bus
subscriptions, signal connections, provider handles) and runs them in reverse
order from :meth:`BaseViewModel.dispose`.
"""

from __future__ import annotations

import logging
from typing import Callable, Type

from chatfeed.events.bus import EventBus, Subscription
from chatfeed.gui.viewmodels.signal import Signal

_logger = logging.getLogger(__name__)

Cleanup = Callable[[], None]


class BaseViewModel:
    """ViewModel base class without any Qt dependency."""

    def __init__(self) -> None:
        self._cleanups: list[Cleanup] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def pending_cleanups(self) -> int:
        return len(self._cleanups)

    def add_cleanup(self, callback: Cleanup) -> Cleanup:
        """Run *callback* on :meth:`dispose`, after cleanups added later."""
        self._cleanups.append(callback)
        return callback

    def subscribe_event(
        self,
        event_bus: EventBus,
        event_type: Type,
        handler: Callable,
    ) -> Subscription:
        """Subscribe to *event_type* until the view-model is disposed."""
        sub = event_bus.subscribe(event_type, handler)
        self.add_cleanup(lambda: event_bus.unsubscribe(sub))
        return sub

    def connect_signal(self, signal: Signal, handler: Callable) -> Cleanup:
        return self.add_cleanup(signal.connect(handler))

    def dispose(self) -> None:
        """Run every registered cleanup, newest first.

        A failing cleanup is logged and the remaining ones still run.
        """
        cleanups, self._cleanups = self._cleanups, []
        for callback in reversed(cleanups):
            try:
                callback()
            except Exception as exc:
                _logger.error("Cleanup %r failed: %s", callback, exc)
        self._disposed = True
