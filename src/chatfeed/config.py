"""Default configuration values for chatfeed."""

from __future__ import annotations

from typing import Final

# Fraction of the viewport height used as the pagination trigger.  When the
# distance to either end of the loaded content drops below this many
# viewports, the next page in that direction is requested.
MIN_BUFFER_RATIO: Final[float] = 0.75

# Each query loads this many viewports worth of rows so the window always
# exceeds one screen and leaves headroom before another round trip.
QUERY_FACTOR: Final[float] = 3.0
MIN_QUERY_FACTOR: Final[float] = 2.0

ESTIMATED_ROW_HEIGHT: Final[float] = 74.0
MIN_PAGE_SIZE: Final[int] = 20

# ``should_auto_scroll`` is true while in live mode and closer than this to
# the bottom of the content.
AUTO_SCROLL_THRESHOLD_PX: Final[float] = 50.0

# Sub-pixel tolerance for the "no visual jump" guarantee.  Also used to match
# the echo of an engine-issued scroll against its target offset.
ANCHOR_TOLERANCE_PX: Final[float] = 0.5

# Used until the rendering layer reports its first layout.
DEFAULT_VIEWPORT_HEIGHT: Final[float] = 600.0

DEFAULT_ORDER_FIELD: Final[str] = "timestamp"

# ---------------------------------------------------------------------------
# Scroll anchor harness
# ---------------------------------------------------------------------------

HARNESS_SCROLL_INCREMENT_PX: Final[float] = 10.0
HARNESS_MAX_CYCLES: Final[int] = 5000
HARNESS_PROGRESS_FREQUENCY: Final[int] = 50
# Pages worth of history seeded by the harness: five each way plus the live page.
HARNESS_PAGE_MULTIPLIER: Final[int] = 5 * 2 + 1
