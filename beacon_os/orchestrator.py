"""
BeaconOS orchestrator

Owns the modules and wires domain events to them. The bindings hold no
business logic: each one fans out to module facades concurrently and a
failing call never blocks its siblings.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Union
import asyncio
import logging
import time
import uuid

from beacon_os.config import Settings, settings as default_settings
from beacon_os.engine.event_bus import (
    Event,
    EventBus,
    EventHandler,
    PublishResult,
    Unsubscribe,
    make_event,
)
from beacon_os.engine.queue import QueueManager
from beacon_os.integrations.base import IPropertyIntegration
from beacon_os.integrations.memory import InMemoryIntegration
from beacon_os.models.entities import PropertyStatus
from beacon_os.models.events import (
    BaseEventPayload,
    EventType,
    HousekeepingPayload,
    HousekeepingType,
    MaintenancePayload,
    MaintenancePriority,
    ReservationPayload,
    build_payload,
)
from beacon_os.modules.analytics import AnalyticsEngine
from beacon_os.modules.messaging import MessagingHub
from beacon_os.modules.operations import OperationsManager
from beacon_os.pricing.engine import PricingEngine

logger = logging.getLogger(__name__)


@dataclass
class BeaconContext:
    """Per-request context"""
    config: Settings
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: Optional[str] = None
    guest_id: Optional[str] = None
    property_id: Optional[str] = None
    reservation_id: Optional[str] = None


class BeaconOS:
    """
    Property-management orchestrator.

    Example:
        >>> beacon = BeaconOS(integrations=InMemoryIntegration([...]))
        >>> await beacon.initialize()
        >>> await beacon.emit(EventType.RESERVATION_CREATED, {"reservation_id": "r-1", "property_id": "p-1"})
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        integrations: Optional[IPropertyIntegration] = None,
        event_bus: Optional[EventBus] = None,
        queue: Optional[QueueManager] = None,
        pricing: Optional[PricingEngine] = None,
        messaging: Optional[MessagingHub] = None,
        operations: Optional[OperationsManager] = None,
        analytics: Optional[AnalyticsEngine] = None,
    ):
        self.config = config or default_settings
        self.event_bus = event_bus or EventBus(history_size=self.config.EVENT_HISTORY_SIZE)
        self.integrations = integrations or InMemoryIntegration()

        if queue is None and self.config.REDIS_URL:
            queue = QueueManager(self.config.REDIS_URL)
        self.queue = queue

        self.pricing = pricing or PricingEngine(self.event_bus, self.integrations, self.config)
        self.messaging = messaging or MessagingHub(
            self.event_bus, self.integrations, self.config, queue=self.queue
        )
        self.operations = operations or OperationsManager(self.event_bus, self.integrations)
        self.analytics = analytics or AnalyticsEngine()

        self._handler_subscriptions: List[Unsubscribe] = []
        self._initialized = False
        self._started_at = time.monotonic()

    # ==================== Lifecycle ====================

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        if self._initialized:
            return

        logger.info("Initializing BeaconOS")

        if self.queue is not None:
            await self.queue.initialize()

        await self.pricing.initialize()
        await self.messaging.initialize()
        await self.operations.initialize()
        await self.analytics.initialize()

        self.register_core_handlers()

        self._initialized = True
        logger.info("BeaconOS initialized")

    async def shutdown(self) -> None:
        logger.info("Shutting down BeaconOS")

        self.unregister_core_handlers()

        await self.pricing.shutdown()
        await self.messaging.shutdown()
        await self.operations.shutdown()
        await self.analytics.shutdown()

        if self.queue is not None:
            await self.queue.shutdown()

        self._initialized = False
        logger.info("BeaconOS shutdown complete")

    def create_context(self, **overrides: Any) -> BeaconContext:
        return BeaconContext(config=self.config, **overrides)

    # ==================== Events ====================

    async def emit(
        self,
        event_type: EventType,
        payload: Union[BaseEventPayload, Mapping[str, Any]],
        source: str = "beacon-os",
        correlation_id: Optional[str] = None,
    ) -> PublishResult:
        """
        Publish a domain event.

        Args:
            event_type: Event type
            payload: Typed payload, or plain data converted to it
            source: Emitting component
            correlation_id: Parent event ID

        Raises:
            ValidationError: payload does not match the event type
        """
        event_type = EventType(event_type)
        if not isinstance(payload, BaseEventPayload):
            payload = build_payload(event_type, dict(payload))
        event = make_event(event_type, payload, source=source, correlation_id=correlation_id)
        return await self.event_bus.emit(event_type, event)

    def on(self, event_type: EventType, handler: EventHandler) -> Unsubscribe:
        return self.event_bus.on(event_type, handler)

    async def queue_job(
        self,
        queue_name: str,
        job_name: str,
        data: Any,
        delay: Optional[timedelta] = None,
        priority: int = 0,
    ) -> Optional[str]:
        """Submit a background job; None when no queue is configured"""
        if self.queue is None:
            logger.warning(f"No job queue configured; {job_name} not queued")
            return None
        return await self.queue.add(queue_name, job_name, data, delay=delay, priority=priority)

    # ==================== Core bindings ====================

    def register_core_handlers(self) -> None:
        """Bind domain events to modules; re-registering replaces the previous bindings"""
        self.unregister_core_handlers()

        bindings = {
            EventType.RESERVATION_CREATED: self.handle_reservation_created,
            EventType.RESERVATION_CHECKIN: self.handle_reservation_checkin,
            EventType.RESERVATION_CHECKOUT: self.handle_reservation_checkout,
            EventType.HOUSEKEEPING_COMPLETED: self.handle_housekeeping_completed,
            EventType.MAINTENANCE_REQUESTED: self.handle_maintenance_requested,
        }
        for event_type, handler in bindings.items():
            self._handler_subscriptions.append(self.event_bus.on(event_type, handler))

        self._handler_subscriptions.append(self.event_bus.on_all(self.analytics.track_event))
        logger.info(f"Registered {len(bindings)} core event bindings")

    def unregister_core_handlers(self) -> None:
        for unsubscribe in self._handler_subscriptions:
            unsubscribe()
        self._handler_subscriptions = []

    async def handle_reservation_created(self, event: Event) -> None:
        reservation = event.payload
        if not isinstance(reservation, ReservationPayload):
            return
        await self._fan_out(event, {
            "send_reservation_confirmation": self.messaging.send_reservation_confirmation(
                reservation.reservation_id
            ),
            "schedule_pre_arrival_housekeeping": self.operations.schedule_pre_arrival_housekeeping(
                reservation.reservation_id
            ),
            "recalculate_surrounding_dates": self.pricing.recalculate_surrounding_dates(
                reservation.property_id, reservation.check_in
            ),
        })

    async def handle_reservation_checkin(self, event: Event) -> None:
        reservation = event.payload
        if not isinstance(reservation, ReservationPayload):
            return
        await self._fan_out(event, {
            "send_welcome_message": self.messaging.send_welcome_message(reservation.reservation_id),
            "track_stay_start": self.analytics.track_stay_start(reservation.reservation_id),
        })

    async def handle_reservation_checkout(self, event: Event) -> None:
        reservation = event.payload
        if not isinstance(reservation, ReservationPayload):
            return
        await self._fan_out(event, {
            "schedule_post_checkout_housekeeping": self.operations.schedule_post_checkout_housekeeping(
                reservation.reservation_id
            ),
            "schedule_review_request": self.messaging.schedule_review_request(reservation.reservation_id),
            "track_stay_complete": self.analytics.track_stay_complete(reservation.reservation_id),
        })

    async def handle_housekeeping_completed(self, event: Event) -> None:
        task = event.payload
        if not isinstance(task, HousekeepingPayload):
            return
        calls = {
            "update_property_status": self.operations.update_property_status(
                task.property_id, PropertyStatus.READY
            ),
        }
        if task.type == HousekeepingType.PRE_ARRIVAL:
            calls["send_property_ready_notification"] = self.messaging.send_property_ready_notification(
                task.property_id
            )
        await self._fan_out(event, calls)

    async def handle_maintenance_requested(self, event: Event) -> None:
        request = event.payload
        if not isinstance(request, MaintenancePayload):
            return
        calls = {"notify_maintenance_team": self.operations.notify_maintenance_team(request)}
        if request.priority == MaintenancePriority.URGENT:
            calls["notify_guest_if_occupied"] = self._notify_guest_if_occupied(request)
        await self._fan_out(event, calls)

    async def _notify_guest_if_occupied(self, request: MaintenancePayload) -> None:
        if await self.operations.is_property_occupied(request.property_id):
            await self.messaging.send_maintenance_notification(request.property_id, request.issue)

    async def _fan_out(self, event: Event, calls: Dict[str, Awaitable[Any]]) -> None:
        names = list(calls)
        results = await asyncio.gather(*calls.values(), return_exceptions=True)
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"{event.event_type.value} -> {name} failed: {result}",
                    exc_info=(type(result), result, result.__traceback__),
                )

    # ==================== Health ====================

    async def get_health(self) -> Dict[str, Any]:
        """healthy when every module is, degraded when some are, unhealthy when none are"""
        modules = {
            "pricing": await self._module_health(self.pricing.health_check()),
            "messaging": await self._module_health(self.messaging.health_check()),
            "operations": await self._module_health(self.operations.health_check()),
            "analytics": await self._module_health(self.analytics.health_check()),
            "integrations": await self._module_health(self.integrations.health_check()),
        }
        if all(modules.values()):
            status = "healthy"
        elif any(modules.values()):
            status = "degraded"
        else:
            status = "unhealthy"
        return {
            "status": status,
            "modules": modules,
            "uptime": round(time.monotonic() - self._started_at, 3),
            "version": self.config.VERSION,
        }

    @staticmethod
    async def _module_health(check: Awaitable[bool]) -> bool:
        try:
            return bool(await check)
        except Exception as e:
            logger.warning(f"Health check failed: {e}")
            return False


async def create_os(config: Optional[Settings] = None, **kwargs: Any) -> BeaconOS:
    """Create and initialize a BeaconOS instance"""
    beacon = BeaconOS(config, **kwargs)
    await beacon.initialize()
    return beacon
