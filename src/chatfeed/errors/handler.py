import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from chatfeed.errors import ApplicationError, ChatFeedError, DomainError
from chatfeed.events.bus import Event, EventBus


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def severity_for(error: Exception) -> ErrorSeverity:
    """Default severity for *error* when the caller does not pick one.

    Rejected cursors and busy guards are expected during fast scrolling;
    provider and settings failures are errors; anything outside the
    ``ChatFeedError`` hierarchy is a bug.
    """
    if isinstance(error, (DomainError, ApplicationError)):
        return ErrorSeverity.WARNING
    if isinstance(error, ChatFeedError):
        return ErrorSeverity.ERROR
    return ErrorSeverity.CRITICAL


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)


UiCallback = Callable[[str, ErrorSeverity], None]


class ErrorHandler:
    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._ui_callback: Optional[UiCallback] = None
        self._last: Optional[ErrorOccurredEvent] = None

    @property
    def last_event(self) -> Optional[ErrorOccurredEvent]:
        return self._last

    def register_ui_callback(self, callback: UiCallback) -> Callable[[], None]:
        """Show ERROR and CRITICAL messages through *callback*.

        Returns a callable that unregisters it again.
        """
        self._ui_callback = callback

        def _unregister() -> None:
            if self._ui_callback is callback:
                self._ui_callback = None

        return _unregister

    def handle(
        self,
        error: Exception,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[dict] = None,
    ) -> ErrorOccurredEvent:
        severity = severity or severity_for(error)
        context = dict(context or {})
        operation = context.get("operation")
        prefix = f"[{operation}] " if operation else ""

        log_method = getattr(self._logger, severity.value, self._logger.error)
        log_method(
            "%s%s: %s",
            prefix,
            error.__class__.__name__,
            error,
            extra={"feed_context": context},
            exc_info=error if severity is ErrorSeverity.CRITICAL else None,
        )

        event = ErrorOccurredEvent(error=error, severity=severity, context=context)
        self._last = event
        self._events.publish(event)

        if self._ui_callback and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._ui_callback(str(error), severity)
        return event
