"""Protocols for the external ordered-query provider.

The backing storage/sync engine is opaque to chatfeed.  It only needs to run
an ordered, limited selection and keep the result live.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

from .models import FeedQuery, Item


class LiveResultHandle(Protocol):
    """Live view over the current matches of a :class:`FeedQuery`."""

    def items(self) -> Sequence[Item]:
        """Return the current matches in query order.

        Raises :class:`~chatfeed.errors.StaleHandle` once invalidated.
        """
        ...

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call *callback* whenever the matches change; returns an unsubscriber."""
        ...

    async def update_selection(self, query: FeedQuery) -> None:
        """Atomically rebind the handle to *query*.

        On failure the previous selection stays bound.
        """
        ...

    def close(self) -> None: ...


class OrderedQuerySource(Protocol):
    async def query(self, query: FeedQuery) -> LiveResultHandle: ...
