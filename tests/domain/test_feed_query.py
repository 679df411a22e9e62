"""Tests for the feed query builder and continuation cursors."""

import pytest

from chatfeed.domain.models import (
    Comparison,
    ContinuationCursor,
    Direction,
    FeedQuery,
    Item,
    ScrollMetrics,
    ScrollMode,
    SortOrder,
)


class TestDirection:
    def test_backward_maps_to_desc_and_le(self):
        assert Direction.BACKWARD.order is SortOrder.DESC
        assert Direction.BACKWARD.comparison is Comparison.LE
        assert Direction.BACKWARD.mode is ScrollMode.BACKWARD

    def test_forward_maps_to_asc_and_ge(self):
        assert Direction.FORWARD.order is SortOrder.ASC
        assert Direction.FORWARD.comparison is Comparison.GE
        assert Direction.FORWARD.mode is ScrollMode.FORWARD

    def test_accepts_plain_strings(self):
        assert Direction("backward") is Direction.BACKWARD


class TestItem:
    def test_sort_key_breaks_ties_on_id(self):
        a = Item(id="a", key=5)
        b = Item(id="b", key=5)
        assert sorted([b, a], key=lambda item: item.sort_key) == [a, b]


class TestContinuationCursor:
    def test_from_item_backward(self):
        cursor = ContinuationCursor.from_item(Item(id="m1", key=1700), Direction.BACKWARD)
        assert cursor.boundary == 1700
        assert cursor.comparison is Comparison.LE

    def test_cursors_compare_by_value(self):
        item = Item(id="m1", key=1700)
        first = ContinuationCursor.from_item(item, Direction.FORWARD)
        second = ContinuationCursor.from_item(Item(id="m2", key=1700), Direction.FORWARD)
        assert first == second
        assert first != ContinuationCursor.from_item(item, Direction.BACKWARD)


class TestFeedQuery:
    def test_live_selection(self):
        query = FeedQuery(filter="room = 'lobby' AND deleted = false").live().limited(30)
        assert query.is_live
        assert query.to_selection() == (
            "room = 'lobby' AND deleted = false ORDER BY timestamp DESC LIMIT 30"
        )

    def test_continuation_selection(self):
        cursor = ContinuationCursor(1700, Comparison.LE, Direction.BACKWARD)
        query = FeedQuery(filter="room = 'lobby'").continue_from(cursor).limited(31)
        assert not query.is_live
        assert query.to_selection() == (
            "room = 'lobby' AND timestamp <= 1700 ORDER BY timestamp DESC LIMIT 31"
        )

    def test_forward_continuation_orders_ascending(self):
        cursor = ContinuationCursor(1700, Comparison.GE, Direction.FORWARD)
        query = FeedQuery().continue_from(cursor)
        assert query.order is SortOrder.ASC
        assert query.to_selection() == "timestamp >= 1700 ORDER BY timestamp ASC"

    def test_live_clears_cursor(self):
        cursor = ContinuationCursor(1700, Comparison.GE, Direction.FORWARD)
        query = FeedQuery().continue_from(cursor).live()
        assert query.cursor is None
        assert query.order is SortOrder.DESC

    def test_clone_is_independent(self):
        base = FeedQuery(filter="x", limit=10)
        clone = base.clone().limited(20)
        assert base.limit == 10
        assert clone.limit == 20
        assert clone.filter == "x"

    @pytest.mark.parametrize(
        "comparison, key, expected",
        [
            (Comparison.LE, 99, True),
            (Comparison.LE, 100, True),
            (Comparison.LE, 101, False),
            (Comparison.GE, 99, False),
            (Comparison.GE, 100, True),
        ],
    )
    def test_accepts_respects_cursor(self, comparison, key, expected):
        direction = Direction.BACKWARD if comparison is Comparison.LE else Direction.FORWARD
        query = FeedQuery().continue_from(ContinuationCursor(100, comparison, direction))
        assert query.accepts(Item(id="x", key=key)) is expected


class TestScrollMetrics:
    def test_near_edges(self):
        metrics = ScrollMetrics(gap_to_top=100, gap_to_bottom=500, buffer_threshold=150, item_count=10)
        assert metrics.near_top
        assert not metrics.near_bottom
