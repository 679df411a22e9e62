"""Pagination state machine for the item window.

The controller is the only owner of the :class:`WindowState` and its mode.
It binds a single live result handle from the provider and moves the
handle's selection in response to threshold crossings:

* ``LIVE``: newest ``limit`` rows, pushed by the provider as they change.
* ``BACKWARD``: the ``limit`` rows at or before a cursor, newest first.
* ``FORWARD``: the ``limit`` rows at or after a cursor, oldest first.

Every selection asks the provider for one row more than the window shows so
the controller knows whether the fetch reached the end of the range.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..domain.models import (
    ContinuationCursor,
    Direction,
    FeedQuery,
    Item,
    ScrollMode,
)
from ..domain.source import LiveResultHandle, OrderedQuerySource
from ..errors import (
    ChatFeedError,
    DuplicateCursor,
    NotInitializedError,
    PaginationBusyError,
    ProviderQueryFailure,
    StaleHandle,
)
from ..errors.handler import ErrorHandler, ErrorSeverity
from ..events import (
    EventBus,
    ModeChangedEvent,
    PageLoadedEvent,
    PaginationFailedEvent,
)
from ..settings import ScrollSettings
from .window_diff import WindowDiff, WindowDiffCalculator
from .window_state import WindowState

LOGGER = logging.getLogger(__name__)

BeforeCommit = Callable[[Optional[Direction]], None]
OnChange = Callable[[WindowDiff], None]


class PaginationController:
    def __init__(
        self,
        base_query: FeedQuery,
        settings: ScrollSettings,
        *,
        event_bus: EventBus,
        error_handler: ErrorHandler,
        before_commit: Optional[BeforeCommit] = None,
        on_change: Optional[OnChange] = None,
    ) -> None:
        self._base_query = base_query.clone()
        self._settings = settings
        self._events = event_bus
        self._errors = error_handler
        self._before_commit = before_commit
        self._on_change = on_change

        self._window = WindowState()
        self._handle: Optional[LiveResultHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._bound_query: Optional[FeedQuery] = None
        self._limit = settings.min_page_size

        self._loading = False
        self._loading_direction: Optional[Direction] = None
        self._cycle_mode: Optional[ScrollMode] = None
        self._last_cursor: Optional[ContinuationCursor] = None
        self._deferred_push = False
        # Forward range exhausted but the live rebind failed; the next
        # forward cycle only retries the live query.
        self._catch_up_pending = False
        self._error: Optional[ChatFeedError] = None

    # -- properties --------------------------------------------------------

    @property
    def window(self) -> WindowState:
        return self._window

    @property
    def items(self) -> Sequence[Item]:
        return self._window.items

    @property
    def mode(self) -> ScrollMode:
        return self._window.mode

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def loading_direction(self) -> Optional[Direction]:
        return self._loading_direction

    @property
    def error(self) -> Optional[ChatFeedError]:
        return self._error

    @property
    def last_cursor(self) -> Optional[ContinuationCursor]:
        return self._last_cursor

    @property
    def bound_query(self) -> Optional[FeedQuery]:
        return self._bound_query

    @property
    def initialized(self) -> bool:
        return self._handle is not None

    def compute_limit(self, viewport_height: float) -> int:
        return self._settings.compute_limit(viewport_height)

    def at_boundary(self, direction: Direction) -> bool:
        direction = Direction(direction)
        if direction is Direction.FORWARD and self._catch_up_pending:
            return False
        return self._window.at_boundary(direction)

    def can_paginate(self, direction: Direction) -> bool:
        return (
            self._handle is not None
            and not self._loading
            and not self._window.is_empty()
            and not self.at_boundary(direction)
        )

    # -- lifecycle ---------------------------------------------------------

    async def initialize(self, source: OrderedQuerySource, viewport_height: float) -> None:
        """Issue the initial live query and bind to its updates."""
        self._limit = self.compute_limit(viewport_height)
        query = self._live_query()
        self._loading = True
        try:
            handle = await source.query(self._look_ahead(query))
        except Exception as exc:
            error = self._as_feed_error(exc)
            self._error = error
            self._errors.handle(error, ErrorSeverity.ERROR, {"operation": "initialize"})
            if error is exc:
                raise
            raise error from exc
        finally:
            self._loading = False

        self._handle = handle
        self._bound_query = query
        self._unsubscribe = handle.subscribe(self.on_provider_update)
        LOGGER.info("Feed initialized (limit=%d): %s", self._limit, query.to_selection())
        self._commit(handle.items(), query, None)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self._before_commit = None
        self._on_change = None

    def resize(self, viewport_height: float) -> bool:
        """Adopt the limit for a new viewport.  Returns whether it changed.

        The new limit applies from the next selection.
        """
        limit = self.compute_limit(viewport_height)
        if limit == self._limit:
            return False
        LOGGER.debug("Page limit %d -> %d", self._limit, limit)
        self._limit = limit
        return True

    # -- provider pushes ---------------------------------------------------

    def on_provider_update(self) -> None:
        if self._handle is None or self._bound_query is None:
            return
        if self._loading:
            # Applied once the in-flight cycle settles.
            self._deferred_push = True
            LOGGER.debug("Deferring provider update during pagination")
            return
        try:
            page = self._handle.items()
        except StaleHandle as exc:
            LOGGER.warning("Ignoring update from stale handle: %s", exc)
            return
        self._commit(page, self._bound_query, None)

    # -- pagination cycle --------------------------------------------------

    def start_cycle(self, direction: Direction, anchor_item: Item) -> ContinuationCursor:
        """Claim the loading guard and derive the cursor for a new cycle.

        Raises :class:`PaginationBusyError` while another cycle is in flight
        and :class:`DuplicateCursor` when the cursor equals the last issued.
        """
        direction = Direction(direction)
        if self._handle is None:
            raise NotInitializedError("feed is not initialized")
        if self._loading:
            raise PaginationBusyError(f"{self._loading_direction} pagination in flight")
        cursor = ContinuationCursor.from_item(anchor_item, direction)
        if cursor == self._last_cursor:
            raise DuplicateCursor(cursor)

        self._last_cursor = cursor
        self._loading = True
        self._loading_direction = direction
        self._cycle_mode = self.mode
        self._set_mode(direction.mode)
        return cursor

    async def complete_cycle(self, cursor: ContinuationCursor) -> bool:
        """Fetch and commit the page for *cursor*.  Returns success."""
        direction = cursor.direction
        query = self._base_query.clone().continue_from(cursor)
        try:
            if direction is Direction.FORWARD and self._catch_up_pending:
                LOGGER.info("Retrying the live query after a failed catch-up")
                return await self._go_live(catch_up=True)
            try:
                page = await self._rebind(query)
            except ChatFeedError as exc:
                self._fail_cycle(cursor, exc)
                return False

            has_more = self._commit(page, query, direction)
            self._catch_up_pending = False
            self._error = None
            self._events.publish(
                PageLoadedEvent(
                    direction=direction,
                    cursor=cursor,
                    fetched=min(len(page), self._limit),
                    limit=self._limit,
                    window_size=len(self._window),
                )
            )
            if direction is Direction.FORWARD and not has_more:
                LOGGER.info("Caught up with the live edge")
                return await self._go_live(catch_up=True)
            return True
        finally:
            self._settle()

    async def paginate(self, direction: Direction, anchor_item: Optional[Item] = None) -> bool:
        """Run a whole cycle, returning ``False`` when it was not started."""
        direction = Direction(direction)
        if not self.can_paginate(direction):
            return False
        item = anchor_item or self._window.edge_item(direction)
        if item is None:
            return False
        try:
            cursor = self.start_cycle(direction, item)
        except DuplicateCursor as exc:
            LOGGER.debug("%s", exc)
            return False
        return await self.complete_cycle(cursor)

    async def set_live_mode(self) -> bool:
        """Return to the live edge with the canonical live query."""
        if self._handle is None:
            raise NotInitializedError("feed is not initialized")
        if self._loading:
            raise PaginationBusyError(f"{self._loading_direction} pagination in flight")
        self._loading = True
        self._cycle_mode = self.mode
        try:
            return await self._go_live()
        finally:
            self._settle()

    # -- internal ----------------------------------------------------------

    def _live_query(self) -> FeedQuery:
        return self._base_query.clone().live()

    def _look_ahead(self, query: FeedQuery) -> FeedQuery:
        return query.clone().limited(self._limit + 1)

    async def _rebind(self, query: FeedQuery) -> Sequence[Item]:
        assert self._handle is not None
        selection = self._look_ahead(query)
        LOGGER.debug("Selecting %s", selection.to_selection())
        try:
            await self._handle.update_selection(selection)
            page = self._handle.items()
        except Exception as exc:
            raise self._as_feed_error(exc) from exc
        self._bound_query = query
        return page

    async def _go_live(self, catch_up: bool = False) -> bool:
        query = self._live_query()
        try:
            page = await self._rebind(query)
        except ChatFeedError as exc:
            if catch_up:
                self._catch_up_pending = True
                self._last_cursor = None
            self._error = exc
            self._errors.handle(exc, ErrorSeverity.ERROR, {"operation": "live"})
            return False
        self._last_cursor = None
        self._catch_up_pending = False
        self._set_mode(ScrollMode.LIVE)
        self._commit(page, query, None)
        self._error = None
        self._events.publish(
            PageLoadedEvent(
                direction=None,
                fetched=min(len(page), self._limit),
                limit=self._limit,
                window_size=len(self._window),
            )
        )
        return True

    def _commit(self, page: Sequence[Item], query: FeedQuery, direction: Optional[Direction]) -> bool:
        candidate = WindowState.build(page, query.order, self._limit)
        diff = WindowDiffCalculator.calculate_diff(self._window.items, candidate.items)
        if diff.is_identical:
            self._window.apply(candidate)
            return candidate.has_more
        if self._before_commit is not None:
            self._before_commit(direction)
        self._window.apply(candidate)
        if self._on_change is not None:
            self._on_change(diff)
        return candidate.has_more

    def _fail_cycle(self, cursor: ContinuationCursor, error: ChatFeedError) -> None:
        if self._cycle_mode is not None:
            self._set_mode(self._cycle_mode)
        # The next qualifying scroll may retry the same range.
        self._last_cursor = None
        self._error = error
        self._errors.handle(
            error,
            ErrorSeverity.ERROR,
            {"operation": "paginate", "direction": cursor.direction.value, "boundary": cursor.boundary},
        )
        self._events.publish(
            PaginationFailedEvent(direction=cursor.direction, cursor=cursor, message=str(error))
        )

    def _settle(self) -> None:
        self._loading = False
        self._loading_direction = None
        self._cycle_mode = None
        if self._deferred_push:
            self._deferred_push = False
            self.on_provider_update()

    def _set_mode(self, mode: ScrollMode) -> None:
        previous = self._window.mode
        if previous is mode:
            return
        self._window.mode = mode
        LOGGER.info("Scroll mode %s -> %s", previous.value, mode.value)
        self._events.publish(ModeChangedEvent(previous=previous, mode=mode))

    @staticmethod
    def _as_feed_error(exc: Exception) -> ChatFeedError:
        if isinstance(exc, ChatFeedError):
            return exc
        return ProviderQueryFailure(f"{exc.__class__.__name__}: {exc}")
