"""
Tests for the BeaconOS orchestrator
"""
import asyncio
from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest

from beacon_os.engine.queue import QueueManager
from beacon_os.integrations.memory import InMemoryIntegration
from beacon_os.models.entities import PropertyStatus, ReservationStatus
from beacon_os.models.events import EventType, MaintenancePayload, ReservationPayload
from beacon_os.modules.messaging.types import MessageChannel
from beacon_os.orchestrator import BeaconOS, create_os
from beacon_os.pricing.engine import PricingEngine

RESERVATION = {
    "reservation_id": "r-1",
    "property_id": "p-1",
    "guest_id": "g-1",
    "check_in": "2025-07-07",
    "check_out": "2025-07-14",
}


def module_mocks():
    analytics = AsyncMock()
    analytics.track_event = Mock()
    return {
        "pricing": AsyncMock(),
        "messaging": AsyncMock(),
        "operations": AsyncMock(),
        "analytics": analytics,
    }


@pytest.fixture
def mocked(config, integration, bus):
    """BeaconOS over mock modules"""
    beacon = BeaconOS(config, integrations=integration, event_bus=bus, **module_mocks())
    asyncio.run(beacon.initialize())
    return beacon


@pytest.fixture
def beacon(config, integration, bus, clock):
    """BeaconOS over the real in-memory modules"""
    beacon = BeaconOS(
        config,
        integrations=integration,
        event_bus=bus,
        pricing=PricingEngine(bus, integration, config, clock=clock),
    )
    asyncio.run(beacon.initialize())
    return beacon


def emit(beacon, event_type, payload):
    return asyncio.run(beacon.emit(event_type, payload, source="test"))


class TestReservationBindings:
    """Reservation lifecycle fan-out"""

    def test_created(self, mocked):
        emit(mocked, EventType.RESERVATION_CREATED, RESERVATION)

        mocked.messaging.send_reservation_confirmation.assert_awaited_once_with("r-1")
        mocked.operations.schedule_pre_arrival_housekeeping.assert_awaited_once_with("r-1")
        mocked.pricing.recalculate_surrounding_dates.assert_awaited_once_with("p-1", date(2025, 7, 7))

    def test_failing_call_does_not_block_siblings(self, mocked):
        mocked.messaging.send_reservation_confirmation.side_effect = RuntimeError("SMTP down")

        result = emit(mocked, EventType.RESERVATION_CREATED, RESERVATION)

        mocked.operations.schedule_pre_arrival_housekeeping.assert_awaited_once()
        mocked.pricing.recalculate_surrounding_dates.assert_awaited_once()
        assert result.failure_count == 0

    def test_checkin(self, mocked):
        emit(mocked, EventType.RESERVATION_CHECKIN, RESERVATION)

        mocked.messaging.send_welcome_message.assert_awaited_once_with("r-1")
        mocked.analytics.track_stay_start.assert_awaited_once_with("r-1")

    def test_checkout(self, mocked):
        emit(mocked, EventType.RESERVATION_CHECKOUT, RESERVATION)

        mocked.operations.schedule_post_checkout_housekeeping.assert_awaited_once_with("r-1")
        mocked.messaging.schedule_review_request.assert_awaited_once_with("r-1")
        mocked.analytics.track_stay_complete.assert_awaited_once_with("r-1")

    def test_every_event_is_tracked(self, mocked):
        emit(mocked, EventType.RESERVATION_CONFIRMED, RESERVATION)
        emit(mocked, EventType.GUEST_CREATED, {"guest_id": "g-1"})
        assert mocked.analytics.track_event.call_count == 2


class TestOperationsBindings:

    def test_pre_arrival_clean_done(self, mocked):
        emit(mocked, EventType.HOUSEKEEPING_COMPLETED, {"task_id": "t-1", "property_id": "p-1", "type": "pre_arrival"})

        mocked.operations.update_property_status.assert_awaited_once_with("p-1", PropertyStatus.READY)
        mocked.messaging.send_property_ready_notification.assert_awaited_once_with("p-1")

    def test_turnover_clean_done(self, mocked):
        emit(mocked, EventType.HOUSEKEEPING_COMPLETED, {"task_id": "t-1", "property_id": "p-1", "type": "post_checkout"})

        mocked.operations.update_property_status.assert_awaited_once_with("p-1", PropertyStatus.READY)
        mocked.messaging.send_property_ready_notification.assert_not_awaited()

    @pytest.mark.parametrize("occupied, notified", [(True, True), (False, False)])
    def test_urgent_maintenance(self, mocked, occupied, notified):
        mocked.operations.is_property_occupied.return_value = occupied

        emit(mocked, EventType.MAINTENANCE_REQUESTED, {
            "request_id": "m-1", "property_id": "p-1", "issue": "No hot water", "priority": "urgent",
        })

        [request] = mocked.operations.notify_maintenance_team.await_args.args
        assert isinstance(request, MaintenancePayload)
        assert mocked.messaging.send_maintenance_notification.await_count == int(notified)

    def test_routine_maintenance_leaves_guest_alone(self, mocked):
        emit(mocked, EventType.MAINTENANCE_REQUESTED, {"request_id": "m-1", "property_id": "p-1", "issue": "Squeaky door"})

        mocked.operations.notify_maintenance_team.assert_awaited_once()
        mocked.operations.is_property_occupied.assert_not_awaited()
        mocked.messaging.send_maintenance_notification.assert_not_awaited()


class TestRegistration:

    def test_reregistering_replaces_bindings(self, mocked, bus):
        before = bus.listener_count(EventType.RESERVATION_CREATED)
        mocked.register_core_handlers()
        mocked.register_core_handlers()

        assert bus.listener_count(EventType.RESERVATION_CREATED) == before == 2

        emit(mocked, EventType.RESERVATION_CREATED, RESERVATION)
        mocked.messaging.send_reservation_confirmation.assert_awaited_once()

    def test_shutdown_unbinds(self, mocked, bus):
        asyncio.run(mocked.shutdown())

        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0
        assert not mocked.initialized
        mocked.pricing.shutdown.assert_awaited_once()

    def test_initialize_once(self, mocked):
        asyncio.run(mocked.initialize())
        mocked.pricing.initialize.assert_awaited_once()


class TestEmit:

    def test_plain_data_becomes_typed_payload(self, beacon, bus):
        result = emit(beacon, EventType.RESERVATION_CONFIRMED, RESERVATION)

        [event] = bus.get_history(EventType.RESERVATION_CONFIRMED)
        assert isinstance(event.payload, ReservationPayload)
        assert event.payload.check_in == date(2025, 7, 7)
        assert event.source == "test"
        assert result.subscriber_count == 1

    def test_bad_field_value_rejected(self, beacon):
        with pytest.raises(ValueError):
            emit(beacon, EventType.MAINTENANCE_REQUESTED, {"property_id": "p-1", "priority": "whenever"})

    def test_on(self, beacon):
        received = []
        beacon.on(EventType.GUEST_UPDATED, received.append)
        emit(beacon, EventType.GUEST_UPDATED, {"guest_id": "g-1", "loyalty_tier": "gold"})
        assert received[0].payload.loyalty_tier == "gold"

    def test_context(self, beacon):
        context = beacon.create_context(property_id="p-1")
        assert context.config is beacon.config
        assert context.property_id == "p-1"
        assert context.request_id != beacon.create_context().request_id


class TestJobs:

    def test_without_queue(self, beacon):
        assert beacon.queue is None
        assert asyncio.run(beacon.queue_job("messaging", "review_request", {})) is None

    def test_queue_built_from_redis_url(self, config, integration):
        config = config.model_copy(update={"REDIS_URL": "redis://localhost:6379"})
        beacon = BeaconOS(config, integrations=integration)

        assert isinstance(beacon.queue, QueueManager)
        job_id = asyncio.run(beacon.queue_job("reports", "nightly", {"day": "2025-06-01"}))
        [job] = beacon.queue.get_jobs("reports")
        assert job.id == job_id


class TestHealth:

    def test_healthy(self, beacon):
        health = asyncio.run(beacon.get_health())

        assert health["status"] == "healthy"
        assert set(health["modules"]) == {"pricing", "messaging", "operations", "analytics", "integrations"}
        assert health["version"] == "1.0.0"
        assert health["uptime"] >= 0

    def test_degraded_before_initialize(self, config, integration):
        health = asyncio.run(BeaconOS(config, integrations=integration).get_health())
        assert health["status"] == "degraded"
        assert health["modules"]["integrations"]

    def test_unhealthy(self, config):
        class DownPMS(InMemoryIntegration):
            async def health_check(self):
                raise ConnectionError("PMS unreachable")

        health = asyncio.run(BeaconOS(config, integrations=DownPMS()).get_health())
        assert health["status"] == "unhealthy"

    def test_create_os(self, config, integration):
        beacon = asyncio.run(create_os(config, integrations=integration))
        assert beacon.initialized


class TestStayLifecycle:
    """Real modules end to end"""

    def test_booking(self, beacon, bus):
        emit(beacon, EventType.RESERVATION_CREATED, RESERVATION)

        [confirmation] = beacon.messaging.channels.get_channel(MessageChannel.EMAIL).sent
        assert "SOS-12345" in confirmation.content

        [task] = beacon.operations.get_tasks("p-1")
        assert task.scheduled_for == date(2025, 7, 7)

        [rates] = bus.get_history(EventType.PROPERTY_RATE_CHANGED)
        assert rates.payload.details["anchor"] == "2025-07-07"

        counts = beacon.analytics.get_event_counts()
        assert counts["reservation.created"] == 1
        assert counts["message.sent"] == 1
        assert counts["housekeeping.scheduled"] == 1
        assert counts["property.rate_changed"] == 1

    def test_turnover_to_ready(self, beacon):
        emit(beacon, EventType.RESERVATION_CHECKOUT, RESERVATION)
        assert beacon.operations.get_property_status("p-1") == PropertyStatus.NEEDS_CLEANING
        assert beacon.analytics.get_stay("r-1").completed

        [task] = beacon.operations.get_tasks("p-1")
        asyncio.run(beacon.operations.complete_housekeeping(task.id))

        assert beacon.operations.get_property_status("p-1") == PropertyStatus.READY
        assert beacon.messaging.channels.get_channel(MessageChannel.SMS).sent == []

    def test_pre_arrival_clean_tells_guest(self, beacon):
        emit(beacon, EventType.RESERVATION_CREATED, RESERVATION)

        [task] = beacon.operations.get_tasks("p-1")
        asyncio.run(beacon.operations.complete_housekeeping(task.id))

        [ready] = beacon.messaging.channels.get_channel(MessageChannel.SMS).sent
        assert ready.reservation_id == "r-1"
        assert "is all cleaned and ready" in ready.content

    def test_urgent_maintenance_with_guest_in_house(self, beacon, reservation):
        reservation.status = ReservationStatus.CHECKED_IN

        emit(beacon, EventType.MAINTENANCE_REQUESTED, {
            "request_id": "m-1", "property_id": "p-1", "issue": "no hot water", "priority": "urgent",
        })

        assert len(beacon.operations.maintenance_requests) == 1
        [notice] = beacon.messaging.channels.get_channel(MessageChannel.SMS).sent
        assert "no hot water" in notice.content
