from .anchor import AnchorResolution, AnchorTracker
from .metrics import ScrollMetricsTracker
from .pagination import PaginationController
from .surface import MeasuredItem, ScrollSurface
from .window_diff import WindowDiff, WindowDiffCalculator
from .window_state import WindowPage, WindowState

__all__ = [
    "AnchorResolution",
    "AnchorTracker",
    "MeasuredItem",
    "PaginationController",
    "ScrollMetricsTracker",
    "ScrollSurface",
    "WindowDiff",
    "WindowDiffCalculator",
    "WindowPage",
    "WindowState",
]
