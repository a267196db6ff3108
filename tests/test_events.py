"""Tests for the notification EventBus."""
import gc

from localnotify.config import NotificationEvent
from localnotify.events import EventBus


class Listener:
    def __init__(self):
        self.received = []

    def handle(self, data):
        self.received.append(data)


class TestEventBus:
    def test_emit_reaches_all_subscribers(self):
        bus = EventBus()
        first, second = Listener(), Listener()
        bus.subscribe(NotificationEvent.NOTIFICATION_OPENED, first.handle)
        bus.subscribe(NotificationEvent.NOTIFICATION_OPENED, second.handle)

        bus.emit(NotificationEvent.NOTIFICATION_OPENED, {"id": 3})

        assert first.received == [{"id": 3}]
        assert second.received == [{"id": 3}]

    def test_events_are_isolated(self):
        bus = EventBus()
        listener = Listener()
        bus.subscribe(NotificationEvent.NOTIFICATION_OPENED, listener.handle)
        bus.emit(NotificationEvent.NOTIFICATION_DISMISSED, "x")
        assert listener.received == []

    def test_unsubscribe_stops_delivery(self):
        bus = EventBus()
        received = []
        sub = bus.subscribe(NotificationEvent.READY, lambda data: received.append(data))
        sub.unsubscribe()
        bus.emit(NotificationEvent.READY)
        assert received == []
        assert not sub.active

    def test_bound_method_is_weak(self):
        bus = EventBus()
        listener = Listener()
        bus.subscribe(NotificationEvent.READY, listener.handle)
        del listener
        gc.collect()
        bus.emit(NotificationEvent.READY)
        assert bus.subscriber_count(NotificationEvent.READY) == 0

    def test_lambda_is_kept_alive_by_subscription(self):
        bus = EventBus()
        received = []
        sub = bus.subscribe(NotificationEvent.READY, lambda data: received.append("ready"))
        gc.collect()
        bus.emit(NotificationEvent.READY)
        assert received == ["ready"]
        sub.unsubscribe()

    def test_failing_subscriber_does_not_block_others(self):
        bus = EventBus()
        listener = Listener()

        def broken(data):
            raise RuntimeError("boom")

        sub = bus.subscribe(NotificationEvent.NOTIFICATION_OPENED, broken, strong=True)
        bus.subscribe(NotificationEvent.NOTIFICATION_OPENED, listener.handle)

        bus.emit(NotificationEvent.NOTIFICATION_OPENED, "payload")

        assert listener.received == ["payload"]
        sub.unsubscribe()

    def test_clear_removes_everything(self):
        bus = EventBus()
        listener = Listener()
        bus.subscribe(NotificationEvent.READY, listener.handle)
        bus.clear()
        bus.emit(NotificationEvent.READY)
        assert listener.received == []
