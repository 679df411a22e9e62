"""Pure Python view-model for a live chat feed.

Wires the rendering layer's event sinks to the pagination controller, the
scroll metrics tracker and the anchor tracker, and exposes the resulting
state through :class:`~chatfeed.gui.viewmodels.snapshot.FeedSnapshot`
objects.  Pagination cycles run as :mod:`asyncio` tasks on the loop that
delivers the events; every sink itself is synchronous.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from ...domain.models import Direction, FeedQuery, Item, ScrollMetrics, ScrollMode
from ...domain.source import OrderedQuerySource
from ...errors import ChatFeedError, DuplicateCursor
from ...errors.handler import ErrorHandler
from ...events import EventBus, MessageSentEvent
from ...scroll import (
    AnchorResolution,
    AnchorTracker,
    PaginationController,
    ScrollMetricsTracker,
    ScrollSurface,
    WindowDiff,
)
from ...settings import ScrollSettings
from .base import BaseViewModel
from .snapshot import FeedSnapshot, SnapshotPublisher

LOGGER = logging.getLogger(__name__)


class ChatScrollManager(BaseViewModel):
    """Windowed pagination and scroll anchoring for one feed."""

    def __init__(
        self,
        base_query: Optional[FeedQuery] = None,
        settings: Optional[ScrollSettings] = None,
        *,
        event_bus: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
        require_gesture: bool = True,
    ) -> None:
        super().__init__()
        self._settings = settings or ScrollSettings()
        if base_query is None:
            base_query = FeedQuery(filter=self._settings.filter, order_by=self._settings.order_by)
        self._events = event_bus or EventBus()
        self._errors = error_handler or ErrorHandler(LOGGER, self._events)

        self._metrics = ScrollMetricsTracker(
            self._settings.buffer_ratio,
            viewport_height=self._settings.default_viewport_height,
            tolerance=self._settings.anchor_tolerance,
            require_gesture=require_gesture,
        )
        self._anchors = AnchorTracker(self._metrics, self._settings.anchor_tolerance)
        self._controller = PaginationController(
            base_query,
            self._settings,
            event_bus=self._events,
            error_handler=self._errors,
            before_commit=self._before_commit,
            on_change=self._on_window_change,
        )
        self._publisher = SnapshotPublisher(self._build_snapshot)

        self._surface: Optional[ScrollSurface] = None
        self._tasks: set[asyncio.Task] = set()
        self._scroll_to_end_pending = False
        self._destroyed = False

        self.add_cleanup(self._publisher.clear)
        self.add_cleanup(self._anchors.reset)
        self.add_cleanup(self._controller.close)
        self.subscribe_event(self._events, MessageSentEvent, self._on_message_sent_event)

    # -- state -------------------------------------------------------------

    @property
    def settings(self) -> ScrollSettings:
        return self._settings

    @property
    def event_bus(self) -> EventBus:
        return self._events

    @property
    def controller(self) -> PaginationController:
        return self._controller

    @property
    def surface(self) -> Optional[ScrollSurface]:
        return self._surface

    @property
    def items(self) -> Sequence[Item]:
        return self._controller.items

    @property
    def mode(self) -> ScrollMode:
        return self._controller.mode

    @property
    def loading(self) -> bool:
        return self._controller.loading

    @property
    def limit(self) -> int:
        return self._controller.limit

    @property
    def error(self) -> Optional[ChatFeedError]:
        return self._controller.error

    @property
    def metrics(self) -> ScrollMetrics:
        return self._metrics.metrics

    @property
    def at_earliest(self) -> bool:
        return self._controller.at_boundary(Direction.BACKWARD)

    @property
    def at_latest(self) -> bool:
        return self._controller.at_boundary(Direction.FORWARD)

    @property
    def should_auto_scroll(self) -> bool:
        return (
            self.mode is ScrollMode.LIVE
            and self._metrics.metrics.gap_to_bottom < self._settings.auto_scroll_threshold
        )

    # -- snapshots ---------------------------------------------------------

    def get_snapshot(self) -> FeedSnapshot:
        return self._publisher.get_snapshot()

    def subscribe(self, listener: Callable[[FeedSnapshot], None]) -> Callable[[], None]:
        return self._publisher.subscribe(listener)

    # -- lifecycle ---------------------------------------------------------

    async def initialize(
        self,
        source: OrderedQuerySource,
        viewport_height: Optional[float] = None,
    ) -> None:
        if viewport_height is None:
            viewport_height = self._metrics.viewport_height
        self._metrics.update_viewport(viewport_height)
        try:
            await self._controller.initialize(source, viewport_height)
        finally:
            self._publisher.publish()

    def attach_surface(self, surface: Optional[ScrollSurface]) -> None:
        """Provide the measurement/scroll handles of the rendering surface."""
        self._surface = surface
        self._anchors.reset()
        if surface is not None and self.mode is ScrollMode.LIVE:
            self._scroll_to_end_pending = True

    async def wait_idle(self) -> None:
        """Wait until no pagination cycle is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self.dispose()
        self._surface = None

    # -- event sinks -------------------------------------------------------

    def on_scroll(self, offset: float, content_size: float, viewport_size: float) -> None:
        direction = self._metrics.sample(offset, content_size, viewport_size)
        self._publisher.publish()
        if direction is not None:
            self._request_page(direction)

    def on_scroll_begin_drag(self) -> None:
        self._metrics.begin_gesture()

    def on_scroll_end_drag(self) -> None:
        self._metrics.end_drag()

    def on_momentum_scroll_end(self) -> None:
        self._metrics.end_gesture()

    def on_layout(self, viewport_size: float) -> None:
        self._metrics.update_viewport(viewport_size)
        self._controller.resize(viewport_size)
        self._publisher.publish()

    def on_content_size_change(self, size: float) -> None:
        self._metrics.update_content(size)
        surface = self._surface
        if surface is not None:
            resolution = self._anchors.reconcile(surface, self.items)
            if resolution is AnchorResolution.NONE and self._scroll_to_end_pending:
                self._scroll_to_end()
            with self._metrics.programmatic_scroll():
                self._metrics.sample(surface.scroll_offset, size, self._metrics.viewport_height)
        self._publisher.publish()

    def on_scroll_threshold_crossed(self, direction: Direction) -> Optional[asyncio.Task]:
        """Request the next page in *direction* regardless of gesture state."""
        return self._request_page(Direction(direction))

    async def paginate(self, direction: Direction) -> bool:
        task = self._request_page(Direction(direction))
        if task is None:
            return False
        return await task

    # -- explicit resets ---------------------------------------------------

    async def jump_to_live(self) -> None:
        await self.wait_idle()
        self._scroll_to_end_pending = True
        live = False
        try:
            live = await self._controller.set_live_mode()
        finally:
            self._anchors.reset()
            if live:
                self._scroll_to_end()
            else:
                self._scroll_to_end_pending = False
            self._publisher.publish()

    def on_message_sent(self) -> None:
        """Refresh after the local user posted; stick to the end when live."""
        live = self.mode is ScrollMode.LIVE
        if live:
            self._scroll_to_end_pending = True
        self._controller.on_provider_update()
        if live:
            self._scroll_to_end()
        self._publisher.publish()

    def _on_message_sent_event(self, event: MessageSentEvent) -> None:
        self.on_message_sent()

    # -- internal ----------------------------------------------------------

    def _request_page(self, direction: Direction) -> Optional[asyncio.Task]:
        if self._destroyed or not self._controller.can_paginate(direction):
            return None
        anchor = self._anchors.select(self._surface, self.items, direction)
        if anchor is not None:
            item = self.items[anchor.index_in_window]
        else:
            item = self._controller.window.edge_item(direction)
        if item is None:
            return None
        try:
            cursor = self._controller.start_cycle(direction, item)
        except DuplicateCursor as exc:
            LOGGER.debug("%s", exc)
            self._anchors.retire()
            return None
        self._publisher.publish()
        return self._spawn(self._run_cycle(self._controller.complete_cycle(cursor)))

    async def _run_cycle(self, cycle: Awaitable[bool]) -> bool:
        try:
            return await cycle
        finally:
            self._anchors.retire()
            self._publisher.publish()

    def _spawn(self, coro: Awaitable[bool]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _before_commit(self, direction: Optional[Direction]) -> None:
        surface = self._surface
        if surface is None or self._scroll_to_end_pending:
            return
        in_cycle = direction is not None or self._controller.loading
        if not in_cycle and self.should_auto_scroll:
            self._scroll_to_end_pending = True
            return
        self._anchors.capture(surface, self.items, direction)

    def _on_window_change(self, diff: WindowDiff) -> None:
        self._metrics.set_item_count(len(self.items))
        self._publisher.publish()

    def _scroll_to_end(self) -> None:
        self._scroll_to_end_pending = False
        if self._surface is None:
            return
        with self._metrics.programmatic_scroll():
            self._surface.scroll_to_end()

    def _build_snapshot(self) -> FeedSnapshot:
        return FeedSnapshot(
            items=self._controller.items,
            mode=self.mode,
            loading=self._controller.loading,
            loading_direction=self._controller.loading_direction,
            should_auto_scroll=self.should_auto_scroll,
            error=self._controller.error,
        )
