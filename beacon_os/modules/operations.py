"""
Operations facade - housekeeping scheduling, property status, maintenance
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Dict, List, Optional
import logging
import uuid

from beacon_os.engine.event_bus import EventBus, make_event
from beacon_os.errors import NotFoundError
from beacon_os.models.entities import PropertyStatus
from beacon_os.models.events import (
    EventType,
    HousekeepingPayload,
    HousekeepingType,
    MaintenancePayload,
    MaintenancePriority,
    PropertyPayload,
)

if TYPE_CHECKING:
    from beacon_os.integrations.base import IPropertyIntegration

logger = logging.getLogger(__name__)


class TaskStatus:
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class HousekeepingTask:
    """A cleaning job for one property"""
    property_id: str
    type: HousekeepingType
    scheduled_for: date
    reservation_id: Optional[str] = None
    status: str = TaskStatus.SCHEDULED
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    completed_at: Optional[datetime] = None


class OperationsManager:
    """In-memory operations facade"""

    def __init__(self, event_bus: EventBus, integrations: "IPropertyIntegration"):
        self._event_bus = event_bus
        self._integrations = integrations
        self._tasks: Dict[str, HousekeepingTask] = {}
        self._statuses: Dict[str, PropertyStatus] = {}
        self.maintenance_requests: List[MaintenancePayload] = []
        self._initialized = False

    async def initialize(self) -> None:
        logger.info("Initializing operations manager")
        self._initialized = True

    async def shutdown(self) -> None:
        logger.info("Shutting down operations manager")
        self._initialized = False

    async def health_check(self) -> bool:
        return self._initialized

    # ==================== Housekeeping ====================

    async def schedule_pre_arrival_housekeeping(self, reservation_id: str) -> Optional[HousekeepingTask]:
        """Clean before the guest arrives (on the check-in date)"""
        reservation = await self._integrations.get_reservation(reservation_id)
        if reservation is None:
            logger.warning(f"Reservation {reservation_id} not found; no pre-arrival clean scheduled")
            return None
        return await self._schedule(
            reservation.property_id,
            HousekeepingType.PRE_ARRIVAL,
            reservation.check_in,
            reservation_id,
        )

    async def schedule_post_checkout_housekeeping(self, reservation_id: str) -> Optional[HousekeepingTask]:
        """Turnover clean on the check-out date; the property needs cleaning until done"""
        reservation = await self._integrations.get_reservation(reservation_id)
        if reservation is None:
            logger.warning(f"Reservation {reservation_id} not found; no post-checkout clean scheduled")
            return None
        task = await self._schedule(
            reservation.property_id,
            HousekeepingType.POST_CHECKOUT,
            reservation.check_out,
            reservation_id,
        )
        await self.update_property_status(reservation.property_id, PropertyStatus.NEEDS_CLEANING)
        return task

    async def _schedule(
        self,
        property_id: str,
        task_type: HousekeepingType,
        scheduled_for: date,
        reservation_id: Optional[str],
    ) -> HousekeepingTask:
        task = HousekeepingTask(
            property_id=property_id,
            type=task_type,
            scheduled_for=scheduled_for,
            reservation_id=reservation_id,
        )
        self._tasks[task.id] = task
        logger.info(f"Scheduled {task_type.value} housekeeping {task.id} at {property_id} for {scheduled_for}")

        await self._event_bus.emit(
            EventType.HOUSEKEEPING_SCHEDULED,
            make_event(EventType.HOUSEKEEPING_SCHEDULED, self._payload(task), source="operations"),
        )
        return task

    async def complete_housekeeping(self, task_id: str) -> HousekeepingTask:
        """
        Mark a task done and publish housekeeping.completed.

        Raises:
            NotFoundError: unknown task
        """
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Housekeeping task", task_id)

        task.status = TaskStatus.COMPLETED
        task.completed_at = datetime.now(timezone.utc)
        logger.info(f"Housekeeping {task_id} completed at {task.property_id}")

        await self._event_bus.emit(
            EventType.HOUSEKEEPING_COMPLETED,
            make_event(EventType.HOUSEKEEPING_COMPLETED, self._payload(task), source="operations"),
        )
        return task

    def get_tasks(self, property_id: Optional[str] = None) -> List[HousekeepingTask]:
        tasks = list(self._tasks.values())
        if property_id is not None:
            tasks = [t for t in tasks if t.property_id == property_id]
        return sorted(tasks, key=lambda t: t.scheduled_for)

    @staticmethod
    def _payload(task: HousekeepingTask) -> HousekeepingPayload:
        return HousekeepingPayload(
            task_id=task.id,
            property_id=task.property_id,
            type=task.type,
            reservation_id=task.reservation_id,
        )

    # ==================== Property status ====================

    async def update_property_status(self, property_id: str, status: PropertyStatus) -> None:
        status = PropertyStatus(status)
        previous = self._statuses.get(property_id)
        self._statuses[property_id] = status
        if previous == status:
            return

        logger.info(f"Property {property_id} status: {previous.value if previous else None} -> {status.value}")
        payload = PropertyPayload(
            property_id=property_id,
            status=status.value,
            details={"previous": previous.value if previous else None},
        )
        await self._event_bus.emit(
            EventType.PROPERTY_STATUS_CHANGED,
            make_event(EventType.PROPERTY_STATUS_CHANGED, payload, source="operations"),
        )

    def get_property_status(self, property_id: str) -> Optional[PropertyStatus]:
        return self._statuses.get(property_id)

    async def is_property_occupied(self, property_id: str) -> bool:
        """A guest is checked in right now"""
        return await self._integrations.get_current_reservation(property_id) is not None

    # ==================== Maintenance ====================

    async def notify_maintenance_team(self, request: MaintenancePayload) -> None:
        self.maintenance_requests.append(request)
        if request.priority == MaintenancePriority.URGENT:
            logger.warning(f"URGENT maintenance at {request.property_id}: {request.issue}")
        else:
            logger.info(f"Maintenance ({request.priority.value}) at {request.property_id}: {request.issue}")
