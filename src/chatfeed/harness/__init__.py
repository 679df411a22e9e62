"""Pixel-accuracy harness for scroll anchoring."""

from .layout import SimulatedListSurface, row_height_for
from .scroll_test import (
    DeltaValidation,
    ScrollTestConfig,
    ScrollTestResult,
    ScrollTestStats,
    calculate_message_count,
    run_scroll_validation,
    seed_messages,
    validate_scroll_delta,
)

__all__ = [
    "DeltaValidation",
    "ScrollTestConfig",
    "ScrollTestResult",
    "ScrollTestStats",
    "SimulatedListSurface",
    "calculate_message_count",
    "row_height_for",
    "run_scroll_validation",
    "seed_messages",
    "validate_scroll_delta",
]
