"""End-to-end scroll anchor validation on the simulated surface."""

import pytest

from chatfeed.harness import (
    ScrollTestConfig,
    calculate_message_count,
    row_height_for,
    run_scroll_validation,
    seed_messages,
    validate_scroll_delta,
)
from chatfeed.scroll.surface import MeasuredItem


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_validate_scroll_delta_accepts_uniform_shift():
    before = [MeasuredItem("a", 0.0, 50.0), MeasuredItem("b", 50.0, 50.0)]
    after = [MeasuredItem("a", 10.0, 50.0), MeasuredItem("b", 60.0, 50.0), MeasuredItem("c", 110.0, 50.0)]
    result = validate_scroll_delta(before, after, 10.0)
    assert result.valid
    assert result.tested_count == 2


def test_validate_scroll_delta_reports_jump():
    before = [MeasuredItem("a", 0.0, 50.0), MeasuredItem("b", 50.0, 50.0)]
    after = [MeasuredItem("a", 10.0, 50.0), MeasuredItem("b", 110.0, 50.0)]
    result = validate_scroll_delta(before, after, 10.0)
    assert not result.valid
    assert result.max_deviation == 50.0
    assert "b moved" in result.error


def test_validate_scroll_delta_needs_overlap():
    result = validate_scroll_delta([MeasuredItem("a", 0.0, 50.0)], [MeasuredItem("b", 0.0, 50.0)], 0.0)
    assert not result.valid
    assert result.tested_count == 0


def test_calculate_message_count():
    assert calculate_message_count(740) == 330
    assert calculate_message_count(600) == 275


def test_seed_messages_are_ordered():
    messages = seed_messages(3)
    assert [m.id for m in messages] == ["MSG_0000", "MSG_0001", "MSG_0002"]
    assert messages[0].key < messages[1].key < messages[2].key


def test_row_heights_are_stable():
    assert row_height_for("MSG_0001") == row_height_for("MSG_0001")
    assert 48 <= row_height_for("MSG_0042") <= 100


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("native", [False, True])
async def test_scroll_round_trip_is_pixel_stable(native):
    lines = []
    cfg = ScrollTestConfig(viewport_height=740.0, message_count=500, native_anchoring=native)
    result = await run_scroll_validation(cfg, report=lines.append)

    assert result.passed, result.error
    stats = result.stats
    assert stats.messages_created == 500
    assert stats.pagination_events_up > 0
    assert stats.pagination_events_down > 0
    assert stats.max_deviation <= 0.5
    assert stats.total_validations == stats.scroll_cycles_up + stats.scroll_cycles_down
    assert any(line.startswith("[Stats]") for line in lines)


@pytest.mark.asyncio
async def test_default_message_count():
    cfg = ScrollTestConfig(viewport_height=600.0)
    result = await run_scroll_validation(cfg, report=lambda _line: None)

    assert result.passed, result.error
    assert result.stats.messages_created == 275
