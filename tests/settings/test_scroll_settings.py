"""Tests for ScrollSettings validation and loading."""

import json

import pytest

from chatfeed.errors import SettingsLoadError, SettingsValidationError
from chatfeed.settings import ScrollSettings, load_settings
from chatfeed.settings.schema import DEFAULT_SETTINGS, merge_with_defaults


def test_defaults():
    settings = load_settings()
    assert settings.buffer_ratio == 0.75
    assert settings.query_factor == 3.0
    assert settings.order_by == "timestamp"


@pytest.mark.parametrize(
    "viewport, expected",
    [
        (740.0, 30),
        (600.0, 25),
        (0.0, 20),
        (-10.0, 20),
    ],
)
def test_compute_limit(viewport, expected):
    assert ScrollSettings().compute_limit(viewport) == expected


def test_buffer_threshold():
    assert ScrollSettings().buffer_threshold(740.0) == pytest.approx(555.0)


def test_query_factor_below_minimum_rejected():
    with pytest.raises(SettingsValidationError):
        ScrollSettings(query_factor=1.5)


def test_partial_document_merges_defaults():
    settings = ScrollSettings.from_mapping({"scroll": {"min_page_size": 10}, "feed": {"filter": "room = 'x'"}})
    assert settings.min_page_size == 10
    assert settings.query_factor == 3.0
    assert settings.filter == "room = 'x'"


def test_schema_violation_rejected():
    with pytest.raises(SettingsValidationError):
        ScrollSettings.from_mapping({"scroll": {"buffer_ratio": -1}})
    with pytest.raises(SettingsValidationError):
        ScrollSettings.from_mapping({"scroll": {"unknown": 1}})


def test_merge_does_not_mutate_defaults():
    merge_with_defaults({"scroll": {"min_page_size": 3}})
    assert DEFAULT_SETTINGS["scroll"]["min_page_size"] == 20


def test_to_document_round_trips():
    settings = ScrollSettings(min_page_size=7, filter="deleted = false")
    assert ScrollSettings.from_mapping(settings.to_document()) == settings


def test_load_from_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"scroll": {"query_factor": 2.5}}), encoding="utf-8")
    assert load_settings(path).query_factor == 2.5


def test_load_errors(tmp_path):
    with pytest.raises(SettingsLoadError):
        load_settings(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        load_settings(bad)
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        load_settings(broken)
