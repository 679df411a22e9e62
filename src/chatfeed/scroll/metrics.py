"""Scroll geometry tracking and gesture classification."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from .. import config
from ..domain.models import Direction, ScrollMetrics

LOGGER = logging.getLogger(__name__)


class ScrollMetricsTracker:
    """Derive :class:`ScrollMetrics` from scroll/layout events.

    Only samples correlated with a user gesture may trigger pagination.
    Scrolls issued by the engine itself run inside :meth:`programmatic_scroll`
    so their echo events are never mistaken for user input.
    """

    def __init__(
        self,
        buffer_ratio: float = config.MIN_BUFFER_RATIO,
        *,
        viewport_height: float = config.DEFAULT_VIEWPORT_HEIGHT,
        tolerance: float = config.ANCHOR_TOLERANCE_PX,
        require_gesture: bool = True,
    ) -> None:
        self._buffer_ratio = buffer_ratio
        self._tolerance = tolerance
        self._require_gesture = require_gesture

        self._offset = 0.0
        self._content_height = 0.0
        self._viewport_height = max(0.0, viewport_height)
        self._item_count = 0

        self._dragging = False
        self._momentum = False
        self._programmatic_depth = 0
        self._pending_target: Optional[float] = None

    # -- geometry ----------------------------------------------------------

    @property
    def offset(self) -> float:
        return self._offset

    @property
    def content_height(self) -> float:
        return self._content_height

    @property
    def viewport_height(self) -> float:
        return self._viewport_height

    @property
    def threshold(self) -> float:
        return self._viewport_height * self._buffer_ratio

    @property
    def metrics(self) -> ScrollMetrics:
        return ScrollMetrics(
            gap_to_top=self._offset,
            gap_to_bottom=self._content_height - self._offset - self._viewport_height,
            buffer_threshold=self.threshold,
            item_count=self._item_count,
        )

    def set_item_count(self, count: int) -> None:
        self._item_count = count

    def update_content(self, content_height: float) -> ScrollMetrics:
        self._content_height = max(0.0, content_height)
        return self.metrics

    def update_viewport(self, viewport_height: float) -> ScrollMetrics:
        self._viewport_height = max(0.0, viewport_height)
        return self.metrics

    # -- gestures ----------------------------------------------------------

    @property
    def gesture_active(self) -> bool:
        return self._dragging or self._momentum

    @property
    def is_programmatic(self) -> bool:
        return self._programmatic_depth > 0

    def begin_gesture(self) -> None:
        self._dragging = True
        self._momentum = False
        # A new touch supersedes any engine scroll still settling.
        self._pending_target = None

    def end_drag(self) -> None:
        # Momentum scrolling may still follow the release.
        self._dragging = False
        self._momentum = True

    def end_gesture(self) -> None:
        self._dragging = False
        self._momentum = False

    @contextmanager
    def programmatic_scroll(self, target: Optional[float] = None) -> Iterator[None]:
        """Mark scroll events raised while the block runs as engine-issued.

        When *target* is given, a later event landing on it (within
        tolerance) is treated as the deferred echo of the same scroll.
        """
        self._programmatic_depth += 1
        if target is not None:
            self._pending_target = target
        try:
            yield
        finally:
            self._programmatic_depth -= 1

    # -- sampling ----------------------------------------------------------

    def sample(
        self,
        offset: float,
        content_height: float,
        viewport_height: float,
    ) -> Optional[Direction]:
        """Record a scroll event and return the direction to paginate, if any."""

        delta = offset - self._offset
        self._offset = max(0.0, offset)
        self._content_height = max(0.0, content_height)
        self._viewport_height = max(0.0, viewport_height)

        if self._consume_programmatic(offset):
            return None
        if self._require_gesture and not self.gesture_active:
            return None

        metrics = self.metrics
        if delta < 0 and metrics.near_top:
            return Direction.BACKWARD
        if delta > 0 and metrics.near_bottom:
            return Direction.FORWARD
        return None

    def _consume_programmatic(self, offset: float) -> bool:
        target = self._pending_target
        on_target = target is not None and abs(offset - target) <= self._tolerance
        if self._programmatic_depth > 0:
            if on_target:
                self._pending_target = None
            return True
        # The echo, if deferred, is the next event after the scroll.
        self._pending_target = None
        if on_target:
            LOGGER.debug("Ignoring echo of programmatic scroll to %.1f", target)
            return True
        return False
