"""
Tests for beacon_os.engine.event_bus
"""
import asyncio
from datetime import date

import pytest

from beacon_os.engine.event_bus import Event, EventBus, make_event
from beacon_os.errors import EventTimeoutError, HandlerExecutionError, ValidationError
from beacon_os.models.events import (
    EventType,
    HousekeepingPayload,
    MessagePayload,
    ReservationPayload,
)


def reservation_event(reservation_id="r-1", event_type=EventType.RESERVATION_CREATED):
    payload = ReservationPayload(
        reservation_id=reservation_id,
        property_id="p-1",
        guest_id="g-1",
        check_in=date(2025, 7, 7),
        check_out=date(2025, 7, 14),
    )
    return make_event(event_type, payload, source="test")


class TestEvent:
    """Event construction"""

    def test_make_event_fills_metadata(self):
        event = reservation_event()
        assert event.event_type == EventType.RESERVATION_CREATED
        assert event.source == "test"
        assert event.event_id
        assert event.timestamp.tzinfo is not None
        assert event.correlation_id is None

    def test_make_event_rejects_mismatched_payload(self):
        with pytest.raises(ValidationError):
            make_event(EventType.RESERVATION_CREATED, MessagePayload(content="hi"))

    def test_with_correlation_returns_new_event(self):
        parent = reservation_event("r-parent")
        child = reservation_event("r-child")
        linked = child.with_correlation(parent.event_id)

        assert linked.correlation_id == parent.event_id
        assert child.correlation_id is None
        assert linked.event_id == child.event_id


class TestSubscription:
    """on / on_all / once"""

    def test_handler_invoked_exactly_once(self, bus):
        received = []
        bus.on(EventType.RESERVATION_CREATED, received.append)

        event = reservation_event()
        result = asyncio.run(bus.emit(EventType.RESERVATION_CREATED, event))

        assert received == [event]
        assert result.subscriber_count == 1
        assert result.success_count == 1
        assert result.failure_count == 0

    def test_unsubscribe_before_emit(self, bus):
        received = []
        unsubscribe = bus.on(EventType.RESERVATION_CREATED, received.append)
        unsubscribe()
        unsubscribe()

        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
        assert received == []

    def test_other_event_types_not_delivered(self, bus):
        received = []
        bus.on(EventType.RESERVATION_CHECKIN, received.append)

        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
        assert received == []

    def test_duplicate_registrations_are_independent(self, bus):
        calls = []

        def handler(event):
            calls.append(event.event_id)

        first = bus.on(EventType.RESERVATION_CREATED, handler)
        bus.on(EventType.RESERVATION_CREATED, handler)

        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
        assert len(calls) == 2

        first()
        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
        assert len(calls) == 3

    def test_wildcard_receives_every_type(self, bus):
        seen = []
        bus.on_all(lambda e: seen.append(e.event_type))

        async def scenario():
            await bus.emit(EventType.RESERVATION_CREATED, reservation_event())
            await bus.emit(
                EventType.HOUSEKEEPING_COMPLETED,
                make_event(EventType.HOUSEKEEPING_COMPLETED, HousekeepingPayload(task_id="t-1")),
            )

        asyncio.run(scenario())
        assert seen == [EventType.RESERVATION_CREATED, EventType.HOUSEKEEPING_COMPLETED]

    def test_typed_handlers_run_before_wildcard(self, bus):
        order = []
        bus.on_all(lambda e: order.append("wildcard"))
        bus.on(EventType.RESERVATION_CREATED, lambda e: order.append("typed"))

        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
        assert order == ["typed", "wildcard"]

    def test_once_fires_a_single_time(self, bus):
        calls = []
        bus.once(EventType.RESERVATION_CREATED, calls.append)

        async def scenario():
            await bus.emit(EventType.RESERVATION_CREATED, reservation_event("r-1"))
            await bus.emit(EventType.RESERVATION_CREATED, reservation_event("r-2"))

        asyncio.run(scenario())
        assert len(calls) == 1
        assert calls[0].payload.reservation_id == "r-1"
        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0

    def test_once_removed_even_when_handler_raises(self, bus):
        def boom(event):
            raise RuntimeError("boom")

        bus.once(EventType.RESERVATION_CREATED, boom)
        result = asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))

        assert result.failure_count == 1
        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0

    def test_listener_count_includes_wildcards(self, bus):
        bus.on(EventType.RESERVATION_CREATED, lambda e: None)
        bus.on(EventType.RESERVATION_CREATED, lambda e: None)
        bus.on_all(lambda e: None)

        assert bus.listener_count(EventType.RESERVATION_CREATED) == 3
        assert bus.listener_count(EventType.RESERVATION_CHECKIN) == 1

    def test_remove_all_listeners_for_type(self, bus):
        bus.on(EventType.RESERVATION_CREATED, lambda e: None)
        bus.on(EventType.RESERVATION_CHECKIN, lambda e: None)
        bus.on_all(lambda e: None)

        bus.remove_all_listeners(EventType.RESERVATION_CREATED)

        assert bus.listener_count(EventType.RESERVATION_CREATED) == 1
        assert bus.listener_count(EventType.RESERVATION_CHECKIN) == 2

    def test_remove_all_listeners_clears_wildcards(self, bus):
        bus.on(EventType.RESERVATION_CREATED, lambda e: None)
        bus.on_all(lambda e: None)

        bus.remove_all_listeners()
        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0


class TestEmit:
    """Dispatch semantics"""

    def test_failing_handler_does_not_block_later_handlers(self, bus):
        received = []

        def failing(event):
            raise ValueError("bad handler")

        bus.on(EventType.RESERVATION_CREATED, failing)
        bus.on(EventType.RESERVATION_CREATED, received.append)

        result = asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))

        assert len(received) == 1
        assert result.success_count == 1
        assert result.failure_count == 1
        assert isinstance(result.errors[0], HandlerExecutionError)
        assert isinstance(result.errors[0].cause, ValueError)

    def test_failing_async_handler_is_isolated(self, bus):
        received = []

        async def failing(event):
            raise RuntimeError("async failure")

        async def ok(event):
            received.append(event)

        bus.on(EventType.RESERVATION_CREATED, failing)
        bus.on(EventType.RESERVATION_CREATED, ok)

        result = asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))

        assert len(received) == 1
        assert result.failure_count == 1
        assert bus.get_statistics().total_failed == 1

    def test_cancelled_handler_is_isolated(self, bus):
        """A handler ending in CancelledError is a failure, not a cancelled emit"""
        ran = []

        async def cancelled(event):
            task = asyncio.ensure_future(asyncio.sleep(10))
            task.cancel()
            await task

        async def failing(event):
            ran.append("failing")
            raise RuntimeError("async failure")

        bus.on(EventType.RESERVATION_CREATED, cancelled)
        bus.on(EventType.RESERVATION_CREATED, failing)

        result = asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))

        assert ran == ["failing"]
        assert result.failure_count == 2
        assert result.success_count == 0
        assert [e.handler_name for e in result.errors] == ["cancelled", "failing"]
        assert isinstance(result.errors[0].cause, asyncio.CancelledError)
        assert bus.get_statistics().total_failed == 2

    def test_cancelling_the_emitter_propagates(self, bus):
        async def slow(event):
            await asyncio.sleep(10)

        bus.on(EventType.RESERVATION_CREATED, slow)

        async def scenario():
            task = asyncio.ensure_future(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())

    def test_async_handlers_run_concurrently(self, bus):
        order = []

        async def slow(event):
            order.append("slow start")
            await asyncio.sleep(0.01)
            order.append("slow end")

        async def fast(event):
            order.append("fast")

        bus.on(EventType.RESERVATION_CREATED, slow)
        bus.on(EventType.RESERVATION_CREATED, fast)

        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
        assert order.index("fast") < order.index("slow end")

    def test_reentrant_emit(self, bus):
        seen = []

        async def on_created(event):
            follow_up = reservation_event(event.payload.reservation_id, EventType.RESERVATION_CONFIRMED)
            await bus.emit(EventType.RESERVATION_CONFIRMED, follow_up.with_correlation(event.event_id))

        bus.on(EventType.RESERVATION_CREATED, on_created)
        bus.on(EventType.RESERVATION_CONFIRMED, seen.append)

        parent = reservation_event()
        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, parent))

        assert len(seen) == 1
        assert seen[0].correlation_id == parent.event_id

    def test_emit_without_subscribers(self, bus):
        result = asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))
        assert result.subscriber_count == 0
        assert result.success_count == 0


class TestWaitFor:
    """wait_for"""

    def test_resolves_with_matching_event(self, bus):
        async def scenario():
            waiter = asyncio.ensure_future(bus.wait_for(
                EventType.RESERVATION_CREATED,
                predicate=lambda e: e.payload.reservation_id == "r-2",
                timeout=1.0,
            ))
            await asyncio.sleep(0)
            await bus.emit(EventType.RESERVATION_CREATED, reservation_event("r-1"))
            await bus.emit(EventType.RESERVATION_CREATED, reservation_event("r-2"))
            return await waiter

        event = asyncio.run(scenario())
        assert event.payload.reservation_id == "r-2"
        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0

    def test_timeout_raises_and_cleans_up(self, bus):
        with pytest.raises(EventTimeoutError):
            asyncio.run(bus.wait_for(EventType.RESERVATION_CREATED, timeout=0.01))
        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0

    def test_timeout_error_is_a_timeout(self, bus):
        with pytest.raises(TimeoutError):
            asyncio.run(bus.wait_for(EventType.MAINTENANCE_REQUESTED, timeout=0.01))


class TestIntrospection:
    """History, statistics and subscribers"""

    def test_history_is_bounded(self):
        bus = EventBus(history_size=2)

        async def scenario():
            for i in range(3):
                await bus.emit(EventType.RESERVATION_CREATED, reservation_event(f"r-{i}"))

        asyncio.run(scenario())
        history = bus.get_history()
        assert [e.payload.reservation_id for e in history] == ["r-2", "r-1"]

    def test_history_filters_by_type(self, bus):
        async def scenario():
            await bus.emit(EventType.RESERVATION_CREATED, reservation_event())
            await bus.emit(
                EventType.RESERVATION_CHECKIN,
                reservation_event(event_type=EventType.RESERVATION_CHECKIN),
            )

        asyncio.run(scenario())
        assert len(bus.get_history(EventType.RESERVATION_CHECKIN)) == 1

    def test_statistics(self, bus):
        bus.on(EventType.RESERVATION_CREATED, lambda e: None)
        bus.on_all(lambda e: None)
        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))

        stats = bus.get_statistics()
        assert stats.total_published == 1
        assert stats.total_processed == 2
        assert stats.wildcard_count == 1

    def test_get_subscribers_names_handlers(self, bus):
        def notify_guest(event):
            pass

        bus.on(EventType.RESERVATION_CREATED, notify_guest)
        subscribers = bus.get_subscribers(EventType.RESERVATION_CREATED)
        assert "notify_guest" in subscribers[EventType.RESERVATION_CREATED.value]

    def test_clear(self, bus):
        bus.on(EventType.RESERVATION_CREATED, lambda e: None)
        asyncio.run(bus.emit(EventType.RESERVATION_CREATED, reservation_event()))

        bus.clear()
        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0
        assert bus.get_history() == []
        assert bus.get_statistics().total_published == 0
