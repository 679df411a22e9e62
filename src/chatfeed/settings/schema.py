"""Schema helpers for the scroll engine settings."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from .. import config

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "chatfeed/settings.schema.json",
    "type": "object",
    "required": ["schema", "scroll"],
    "properties": {
        "schema": {"const": "chatfeed/settings@1"},
        "scroll": {
            "type": "object",
            "required": [
                "buffer_ratio",
                "query_factor",
                "estimated_row_height",
                "min_page_size",
            ],
            "properties": {
                "buffer_ratio": {"type": "number", "exclusiveMinimum": 0},
                "query_factor": {
                    "type": "number",
                    "minimum": config.MIN_QUERY_FACTOR,
                },
                "estimated_row_height": {"type": "number", "exclusiveMinimum": 0},
                "min_page_size": {"type": "integer", "minimum": 1},
                "auto_scroll_threshold": {"type": "number", "minimum": 0},
                "anchor_tolerance": {"type": "number", "exclusiveMinimum": 0},
                "default_viewport_height": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
        "feed": {
            "type": "object",
            "properties": {
                "filter": {"type": "string"},
                "order_by": {"type": "string", "minLength": 1},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "chatfeed/settings@1",
    "scroll": {
        "buffer_ratio": config.MIN_BUFFER_RATIO,
        "query_factor": config.QUERY_FACTOR,
        "estimated_row_height": config.ESTIMATED_ROW_HEIGHT,
        "min_page_size": config.MIN_PAGE_SIZE,
        "auto_scroll_threshold": config.AUTO_SCROLL_THRESHOLD_PX,
        "anchor_tolerance": config.ANCHOR_TOLERANCE_PX,
        "default_viewport_height": config.DEFAULT_VIEWPORT_HEIGHT,
    },
    "feed": {
        "filter": "",
        "order_by": config.DEFAULT_ORDER_FIELD,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in ("scroll", "feed") and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
