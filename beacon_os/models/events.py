"""
Domain events
Closed set of event types and the payload shape carried by each of them.
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import Any, Dict, Optional, Type, Union


class EventType(str, Enum):
    """Event type enum"""
    # Reservations
    RESERVATION_CREATED = "reservation.created"
    RESERVATION_CONFIRMED = "reservation.confirmed"
    RESERVATION_MODIFIED = "reservation.modified"
    RESERVATION_CANCELLED = "reservation.cancelled"
    RESERVATION_CHECKIN = "reservation.checkin"
    RESERVATION_CHECKOUT = "reservation.checkout"

    # Guests
    GUEST_CREATED = "guest.created"
    GUEST_UPDATED = "guest.updated"
    GUEST_LOYALTY_TIER_CHANGED = "guest.loyalty_tier_changed"

    # Properties
    PROPERTY_AVAILABILITY_CHANGED = "property.availability_changed"
    PROPERTY_RATE_CHANGED = "property.rate_changed"
    PROPERTY_STATUS_CHANGED = "property.status_changed"

    # Operations
    HOUSEKEEPING_SCHEDULED = "housekeeping.scheduled"
    HOUSEKEEPING_STARTED = "housekeeping.started"
    HOUSEKEEPING_COMPLETED = "housekeeping.completed"
    MAINTENANCE_REQUESTED = "maintenance.requested"
    MAINTENANCE_SCHEDULED = "maintenance.scheduled"
    MAINTENANCE_COMPLETED = "maintenance.completed"
    INSPECTION_SCHEDULED = "inspection.scheduled"
    INSPECTION_COMPLETED = "inspection.completed"

    # Messaging
    MESSAGE_SENT = "message.sent"
    MESSAGE_RECEIVED = "message.received"
    MESSAGE_AI_RESPONSE = "message.ai_response"

    # Payments
    PAYMENT_INITIATED = "payment.initiated"
    PAYMENT_COMPLETED = "payment.completed"
    PAYMENT_FAILED = "payment.failed"
    REFUND_INITIATED = "refund.initiated"
    REFUND_COMPLETED = "refund.completed"


class HousekeepingType(str, Enum):
    """Housekeeping task type"""
    PRE_ARRIVAL = "pre_arrival"
    POST_CHECKOUT = "post_checkout"
    MID_STAY = "mid_stay"
    DEEP_CLEAN = "deep_clean"


class MaintenancePriority(str, Enum):
    """Maintenance request priority"""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


@dataclass(frozen=True)
class BaseEventPayload:
    """Event payload base class"""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict"""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, (date, datetime)):
                result[key] = value.isoformat()
            elif isinstance(value, Enum):
                result[key] = value.value
        return result


@dataclass(frozen=True)
class ReservationPayload(BaseEventPayload):
    """Reservation lifecycle payload"""
    reservation_id: str = ""
    property_id: str = ""
    guest_id: str = ""
    check_in: Optional[date] = None
    check_out: Optional[date] = None


@dataclass(frozen=True)
class GuestPayload(BaseEventPayload):
    """Guest profile payload"""
    guest_id: str = ""
    loyalty_tier: Optional[str] = None


@dataclass(frozen=True)
class PropertyPayload(BaseEventPayload):
    """Property rate / status / availability payload"""
    property_id: str = ""
    status: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HousekeepingPayload(BaseEventPayload):
    """Housekeeping task payload"""
    task_id: str = ""
    property_id: str = ""
    type: HousekeepingType = HousekeepingType.POST_CHECKOUT
    reservation_id: Optional[str] = None


@dataclass(frozen=True)
class MaintenancePayload(BaseEventPayload):
    """Maintenance / inspection payload"""
    request_id: str = ""
    property_id: str = ""
    issue: str = ""
    priority: MaintenancePriority = MaintenancePriority.NORMAL


@dataclass(frozen=True)
class MessagePayload(BaseEventPayload):
    """Guest message payload"""
    message_id: str = ""
    sender: str = "guest"
    content: str = ""
    channel: str = "web"
    guest_id: Optional[str] = None
    property_id: Optional[str] = None
    reservation_id: Optional[str] = None
    in_reply_to: Optional[str] = None


@dataclass(frozen=True)
class PaymentPayload(BaseEventPayload):
    """Payment / refund payload"""
    payment_id: str = ""
    reservation_id: str = ""
    amount: float = 0.0
    currency: str = "USD"
    reason: Optional[str] = None


EventPayload = Union[
    ReservationPayload,
    GuestPayload,
    PropertyPayload,
    HousekeepingPayload,
    MaintenancePayload,
    MessagePayload,
    PaymentPayload,
]


# Event type -> payload class
EVENT_PAYLOAD_CLASSES: Dict[EventType, Type[BaseEventPayload]] = {
    EventType.RESERVATION_CREATED: ReservationPayload,
    EventType.RESERVATION_CONFIRMED: ReservationPayload,
    EventType.RESERVATION_MODIFIED: ReservationPayload,
    EventType.RESERVATION_CANCELLED: ReservationPayload,
    EventType.RESERVATION_CHECKIN: ReservationPayload,
    EventType.RESERVATION_CHECKOUT: ReservationPayload,
    EventType.GUEST_CREATED: GuestPayload,
    EventType.GUEST_UPDATED: GuestPayload,
    EventType.GUEST_LOYALTY_TIER_CHANGED: GuestPayload,
    EventType.PROPERTY_AVAILABILITY_CHANGED: PropertyPayload,
    EventType.PROPERTY_RATE_CHANGED: PropertyPayload,
    EventType.PROPERTY_STATUS_CHANGED: PropertyPayload,
    EventType.HOUSEKEEPING_SCHEDULED: HousekeepingPayload,
    EventType.HOUSEKEEPING_STARTED: HousekeepingPayload,
    EventType.HOUSEKEEPING_COMPLETED: HousekeepingPayload,
    EventType.MAINTENANCE_REQUESTED: MaintenancePayload,
    EventType.MAINTENANCE_SCHEDULED: MaintenancePayload,
    EventType.MAINTENANCE_COMPLETED: MaintenancePayload,
    EventType.INSPECTION_SCHEDULED: MaintenancePayload,
    EventType.INSPECTION_COMPLETED: MaintenancePayload,
    EventType.MESSAGE_SENT: MessagePayload,
    EventType.MESSAGE_RECEIVED: MessagePayload,
    EventType.MESSAGE_AI_RESPONSE: MessagePayload,
    EventType.PAYMENT_INITIATED: PaymentPayload,
    EventType.PAYMENT_COMPLETED: PaymentPayload,
    EventType.PAYMENT_FAILED: PaymentPayload,
    EventType.REFUND_INITIATED: PaymentPayload,
    EventType.REFUND_COMPLETED: PaymentPayload,
}


def payload_class_for(event_type: EventType) -> Type[BaseEventPayload]:
    """Payload class registered for an event type"""
    return EVENT_PAYLOAD_CLASSES[EventType(event_type)]


def build_payload(event_type: EventType, data: Dict[str, Any]) -> BaseEventPayload:
    """
    Build the typed payload for an event type from plain data.

    Unknown keys are dropped; enum and date fields are coerced from strings.

    Raises:
        ValueError: unknown event type or bad field value
    """
    payload_cls = payload_class_for(event_type)
    known = payload_cls.__dataclass_fields__
    kwargs = {k: v for k, v in data.items() if k in known}

    if payload_cls is HousekeepingPayload and "type" in kwargs:
        kwargs["type"] = HousekeepingType(kwargs["type"])
    if payload_cls is MaintenancePayload and "priority" in kwargs:
        kwargs["priority"] = MaintenancePriority(kwargs["priority"])
    if payload_cls is ReservationPayload:
        for key in ("check_in", "check_out"):
            if isinstance(kwargs.get(key), str):
                kwargs[key] = date.fromisoformat(kwargs[key])

    return payload_cls(**kwargs)
