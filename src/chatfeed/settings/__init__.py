"""Typed access to validated scroll engine settings."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Mapping

from jsonschema import ValidationError

from .. import config
from ..errors import SettingsLoadError, SettingsValidationError
from .schema import DEFAULT_SETTINGS, merge_with_defaults


@dataclass(frozen=True)
class ScrollSettings:
    buffer_ratio: float = config.MIN_BUFFER_RATIO
    query_factor: float = config.QUERY_FACTOR
    estimated_row_height: float = config.ESTIMATED_ROW_HEIGHT
    min_page_size: int = config.MIN_PAGE_SIZE
    auto_scroll_threshold: float = config.AUTO_SCROLL_THRESHOLD_PX
    anchor_tolerance: float = config.ANCHOR_TOLERANCE_PX
    default_viewport_height: float = config.DEFAULT_VIEWPORT_HEIGHT
    filter: str = ""
    order_by: str = config.DEFAULT_ORDER_FIELD

    def __post_init__(self) -> None:
        if self.query_factor < config.MIN_QUERY_FACTOR:
            raise SettingsValidationError(
                f"query_factor must be >= {config.MIN_QUERY_FACTOR}, got {self.query_factor}"
            )
        if self.buffer_ratio <= 0 or self.estimated_row_height <= 0 or self.min_page_size < 1:
            raise SettingsValidationError("buffer_ratio, estimated_row_height and min_page_size must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ScrollSettings":
        """Build settings from a (partial) settings document."""

        try:
            merged = merge_with_defaults(dict(data) if data else None)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        feed = merged.get("feed", {})
        return cls(
            **merged["scroll"],
            filter=feed.get("filter", ""),
            order_by=feed.get("order_by", config.DEFAULT_ORDER_FIELD),
        )

    def compute_limit(self, viewport_height: float) -> int:
        """Rows needed to cover ``query_factor`` viewports of *viewport_height*."""

        query_height = max(0.0, viewport_height) * self.query_factor
        return max(self.min_page_size, math.ceil(query_height / self.estimated_row_height))

    def buffer_threshold(self, viewport_height: float) -> float:
        return viewport_height * self.buffer_ratio

    def to_document(self) -> dict[str, Any]:
        values = asdict(self)
        feed = {"filter": values.pop("filter"), "order_by": values.pop("order_by")}
        return {"schema": DEFAULT_SETTINGS["schema"], "scroll": values, "feed": feed}


def load_settings(path: Path | None = None) -> ScrollSettings:
    """Load settings from the JSON file at *path*, or the defaults when ``None``."""

    if path is None:
        return ScrollSettings.from_mapping(None)
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SettingsLoadError(f"{path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise SettingsLoadError(f"{path}: expected a JSON object")
    return ScrollSettings.from_mapping(payload)


__all__ = ["ScrollSettings", "load_settings"]
