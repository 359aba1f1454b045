"""
Unit Tests for EventBus
=======================

Test Coverage
-------------
- Priority ordering
- Wildcard subscriptions
- One-shot listeners
- Listener error isolation
- Signature validation
"""

import pytest

from hunter.core.event.bus import EventBus, ListenerPriority


@pytest.fixture
def bus():
    return EventBus()


@pytest.mark.unit
class TestEventBusDelivery:
    async def test_listeners_run_in_priority_order(self, bus):
        calls = []
        bus.subscribe(
            "quest.completed",
            lambda data: calls.append("low"),
            priority=ListenerPriority.LOW,
            identifier="low",
        )
        bus.subscribe(
            "quest.completed",
            lambda data: calls.append("critical"),
            priority=ListenerPriority.CRITICAL,
            identifier="critical",
        )
        bus.subscribe("quest.completed", lambda data: calls.append("normal"), identifier="normal")

        await bus.publish("quest.completed", {"user_id": 1})

        assert calls == ["critical", "normal", "low"]

    async def test_async_listener_result_collected(self, bus):
        async def listener(data):
            return data["user_id"] * 2

        bus.subscribe("progression.level_up", listener)

        results = await bus.publish("progression.level_up", {"user_id": 21})

        assert results == [42]

    async def test_wildcard_matches_prefix(self, bus):
        seen = []
        bus.subscribe("progression.*", lambda data: seen.append(data["kind"]))

        await bus.publish("progression.level_up", {"kind": "level"})
        await bus.publish("progression.rank_up", {"kind": "rank"})
        await bus.publish("quest.completed", {"kind": "quest"})

        assert seen == ["level", "rank"]

    async def test_once_listener_fires_once(self, bus):
        seen = []
        bus.subscribe("dungeon.completed", lambda data: seen.append(data), once=True)

        await bus.publish("dungeon.completed", {"n": 1})
        await bus.publish("dungeon.completed", {"n": 2})

        assert seen == [{"n": 1}]
        assert bus.get_listener_count("dungeon.completed") == 0

    async def test_failing_listener_does_not_stop_others(self, bus):
        def broken(data):
            raise RuntimeError("listener failure")

        seen = []
        bus.subscribe("quest.completed", broken, priority=ListenerPriority.HIGH)
        bus.subscribe("quest.completed", lambda data: seen.append(data), identifier="audit")

        results = await bus.publish("quest.completed", {"user_id": 3})

        assert seen == [{"user_id": 3}]
        assert len(results) == 1
        assert bus.get_metrics_summary()["errors_by_event"] == {"quest.completed": 1}

    async def test_publish_without_listeners_returns_empty(self, bus):
        assert await bus.publish("nobody.listens", {}) == []


@pytest.mark.unit
class TestEventBusSubscriptions:
    def test_callback_with_wrong_arity_rejected(self, bus):
        with pytest.raises(ValueError):
            bus.subscribe("quest.completed", lambda a, b: None)

    def test_duplicate_identifier_rejected(self, bus):
        bus.subscribe("quest.completed", lambda data: None, identifier="audit")

        with pytest.raises(ValueError):
            bus.subscribe("quest.completed", lambda data: None, identifier="audit")

    def test_unsubscribe_and_clear(self, bus):
        bus.subscribe("quest.completed", lambda data: None, identifier="audit")
        bus.subscribe("progression.*", lambda data: None)

        assert bus.unsubscribe("quest.completed", "audit") is True
        assert bus.unsubscribe("quest.completed", "audit") is False

        bus.clear()
        assert bus.get_listener_count() == 0
