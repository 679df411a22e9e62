"""Protocol for the rendering surface hosting the feed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence


@dataclass(frozen=True)
class MeasuredItem:
    """On-screen geometry of one laid-out item.

    ``screen_y`` is the distance from the top of the viewport to the top of
    the item; negative when the item is partially scrolled out above.
    """

    id: str
    screen_y: float
    height: float

    @property
    def bottom(self) -> float:
        return self.screen_y + self.height


class ScrollSurface(Protocol):
    """Measurement and scrolling handles passed explicitly to the engine."""

    @property
    def supports_native_anchoring(self) -> bool: ...

    @property
    def scroll_offset(self) -> float: ...

    def measure_visible(self) -> Sequence[MeasuredItem]:
        """Return the items intersecting the viewport, top to bottom."""
        ...

    def measure_item(self, item_id: str) -> Optional[MeasuredItem]: ...

    def scroll_to_offset(self, offset: float) -> None: ...

    def scroll_to_end(self) -> None: ...

    def maintain_position(self, index: int, screen_y: float) -> None:
        """Keep the item at *index* of the current window at *screen_y*."""
        ...
