"""Tests for the event bus."""

from schemagraph.core.events import EventBus


class TestEventBus:
    def test_emit_calls_listeners(self):
        bus = EventBus()
        received = []
        bus.on("ping", received.append)
        bus.emit("ping", 1)
        bus.emit("ping", 2)
        assert received == [1, 2]

    def test_once(self):
        bus = EventBus()
        received = []
        bus.once("ping", received.append)
        bus.emit("ping", 1)
        bus.emit("ping", 2)
        assert received == [1]
        assert bus.listener_count("ping") == 0

    def test_off(self):
        bus = EventBus()
        received = []
        bus.on("ping", received.append)
        bus.off("ping", received.append)
        bus.emit("ping", 1)
        assert received == []

    def test_off_removes_pending_once(self):
        bus = EventBus()
        received = []
        bus.once("ping", received.append)
        bus.off("ping", received.append)
        bus.emit("ping", 1)
        assert received == []
        assert bus.listener_count("ping") == 0

    def test_off_once_keeps_other_listeners(self):
        bus = EventBus()
        first, second = [], []
        bus.once("ping", first.append)
        bus.on("ping", second.append)
        bus.off("ping", first.append)
        bus.emit("ping", 1)
        assert first == []
        assert second == [1]

    def test_off_all(self):
        bus = EventBus()
        bus.on("ping", lambda *_: None)
        bus.on("ping", lambda *_: None)
        bus.off("ping")
        assert bus.listener_count("ping") == 0

    def test_failing_listener_isolated(self):
        bus = EventBus()
        received = []

        def broken(_):
            raise ValueError("listener failure")

        bus.on("ping", broken)
        bus.on("ping", received.append)
        bus.emit("ping", "payload")
        assert received == ["payload"]

    def test_emit_without_listeners(self):
        EventBus().emit("nothing")
