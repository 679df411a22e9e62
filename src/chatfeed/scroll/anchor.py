"""Visual anchoring across window mutations."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from .. import config
from ..domain.models import Anchor, Direction, Item
from ..errors import AnchorNotFoundError
from .metrics import ScrollMetricsTracker
from .surface import MeasuredItem, ScrollSurface

LOGGER = logging.getLogger(__name__)


class AnchorResolution(Enum):
    NONE = "none"
    NATIVE = "native"
    COMPENSATED = "compensated"
    FALLBACK = "fallback"


class AnchorTracker:
    """Keep one visible item at the same screen position across a commit.

    A pagination cycle *selects* its anchor when it starts (the same item
    the continuation cursor is derived from).  Immediately before every
    window commit the anchor is *captured* again from the surface, which is
    still showing the old layout.  Once the surface reports the new layout,
    :meth:`reconcile` restores the captured position.
    """

    def __init__(
        self,
        metrics: ScrollMetricsTracker,
        tolerance: float = config.ANCHOR_TOLERANCE_PX,
    ) -> None:
        self._metrics = metrics
        self._tolerance = tolerance
        self._cycle_anchor: Optional[Anchor] = None
        self._pending: Optional[Anchor] = None

    @property
    def cycle_anchor(self) -> Optional[Anchor]:
        return self._cycle_anchor

    @property
    def pending(self) -> Optional[Anchor]:
        return self._pending

    def select(
        self,
        surface: Optional[ScrollSurface],
        items: Sequence[Item],
        direction: Direction,
    ) -> Optional[Anchor]:
        """Choose the anchor for a cycle moving in *direction*."""
        self._cycle_anchor = self._locate(surface, items, direction, preferred=None)
        return self._cycle_anchor

    def capture(
        self,
        surface: Optional[ScrollSurface],
        items: Sequence[Item],
        direction: Optional[Direction] = None,
    ) -> Optional[Anchor]:
        """Record the anchor position right before a commit."""
        preferred = self._cycle_anchor.item_id if self._cycle_anchor else None
        self._pending = self._locate(surface, items, direction, preferred=preferred)
        return self._pending

    def reconcile(
        self,
        surface: Optional[ScrollSurface],
        items: Sequence[Item],
    ) -> AnchorResolution:
        """Restore the captured anchor after *surface* laid out *items*."""
        anchor = self._pending
        self._pending = None
        if anchor is None or surface is None:
            return AnchorResolution.NONE

        index = next((i for i, item in enumerate(items) if item.id == anchor.item_id), None)
        measured = surface.measure_item(anchor.item_id) if index is not None else None
        if index is None or measured is None:
            LOGGER.debug("%s; scrolling to the top of the page", AnchorNotFoundError(anchor.item_id))
            with self._metrics.programmatic_scroll(0.0):
                surface.scroll_to_offset(0.0)
            return AnchorResolution.FALLBACK

        if surface.supports_native_anchoring:
            with self._metrics.programmatic_scroll():
                surface.maintain_position(index, anchor.screen_y)
            return AnchorResolution.NATIVE

        delta = measured.screen_y - anchor.screen_y
        if delta == 0:
            return AnchorResolution.COMPENSATED
        target = surface.scroll_offset + delta
        LOGGER.debug("Compensating %.1fpx to keep %s at %.1f", delta, anchor.item_id, anchor.screen_y)
        with self._metrics.programmatic_scroll(target):
            surface.scroll_to_offset(target)
        residual = surface.measure_item(anchor.item_id)
        if residual is not None and abs(residual.screen_y - anchor.screen_y) > self._tolerance:
            LOGGER.warning(
                "Anchor %s drifted %.2fpx (offset clamped)",
                anchor.item_id,
                residual.screen_y - anchor.screen_y,
            )
        return AnchorResolution.COMPENSATED

    def retire(self) -> None:
        self._cycle_anchor = None

    def reset(self) -> None:
        self._cycle_anchor = None
        self._pending = None

    # -- internal ----------------------------------------------------------

    def _locate(
        self,
        surface: Optional[ScrollSurface],
        items: Sequence[Item],
        direction: Optional[Direction],
        preferred: Optional[str],
    ) -> Optional[Anchor]:
        if surface is None or not items:
            return None
        index = {item.id: i for i, item in enumerate(items)}
        visible = [entry for entry in surface.measure_visible() if entry.id in index]
        if not visible:
            return None
        chosen = self._choose(visible, direction, preferred)
        return Anchor(item_id=chosen.id, index_in_window=index[chosen.id], screen_y=chosen.screen_y)

    @staticmethod
    def _choose(
        visible: Sequence[MeasuredItem],
        direction: Optional[Direction],
        preferred: Optional[str],
    ) -> MeasuredItem:
        if preferred is not None:
            for entry in visible:
                if entry.id == preferred:
                    return entry
        if direction is Direction.BACKWARD:
            return visible[-1]
        if direction is Direction.FORWARD:
            return visible[0]
        for entry in visible:
            if entry.screen_y >= 0:
                return entry
        return visible[0]
