import logging
from dataclasses import dataclass

from chatfeed.domain.models import ScrollMode
from chatfeed.events import EventBus, ModeChangedEvent
from chatfeed.events.bus import Event


@dataclass(kw_only=True)
class SimpleEvent(Event):
    payload: str = ""


def test_sync_subscribe_publish():
    bus = EventBus()
    received = []

    def handler(event: SimpleEvent):
        received.append(event.payload)

    bus.subscribe(SimpleEvent, handler)
    bus.publish(SimpleEvent(payload="hello"))

    assert received == ["hello"]


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    calls = []
    bus.subscribe(SimpleEvent, lambda e: calls.append(1))
    bus.subscribe(SimpleEvent, lambda e: calls.append(2))
    bus.publish(SimpleEvent())

    assert calls == [1, 2]


def test_events_are_routed_by_type():
    bus = EventBus()
    modes = []
    bus.subscribe(ModeChangedEvent, lambda e: modes.append(e.mode))
    bus.publish(SimpleEvent(payload="ignored"))
    bus.publish(ModeChangedEvent(previous=ScrollMode.LIVE, mode=ScrollMode.BACKWARD))

    assert modes == [ScrollMode.BACKWARD]


def test_unsubscribe():
    bus = EventBus()
    received = []
    sub = bus.subscribe(SimpleEvent, received.append)
    bus.unsubscribe(sub)
    bus.publish(SimpleEvent())

    assert received == []
    assert not sub.active
    assert bus.subscriber_count(SimpleEvent) == 0


def test_cancelled_subscription_is_skipped():
    bus = EventBus()
    received = []
    sub = bus.subscribe(SimpleEvent, received.append)
    sub.cancel()
    bus.publish(SimpleEvent())

    assert received == []


def test_failing_handler_is_logged(caplog):
    bus = EventBus(logging.getLogger("tests.bus"))
    received = []

    def bad(event):
        raise RuntimeError("boom")

    bus.subscribe(SimpleEvent, bad)
    bus.subscribe(SimpleEvent, received.append)
    with caplog.at_level(logging.ERROR, logger="tests.bus"):
        bus.publish(SimpleEvent())

    assert len(received) == 1
    assert "SimpleEvent" in caplog.text


def test_clear():
    bus = EventBus()
    sub = bus.subscribe(SimpleEvent, lambda e: None)
    bus.clear()
    assert not sub.active
    assert bus.subscriber_count(SimpleEvent) == 0


def test_events_have_ids():
    first, second = SimpleEvent(), SimpleEvent()
    assert first.event_id != second.event_id
