from beacon_os.models.entities import (
    AvailabilityDay,
    Guest,
    Property,
    PropertyStatus,
    Reservation,
    ReservationStatus,
)
from beacon_os.models.events import (
    EVENT_PAYLOAD_CLASSES,
    BaseEventPayload,
    EventPayload,
    EventType,
    GuestPayload,
    HousekeepingPayload,
    HousekeepingType,
    MaintenancePayload,
    MaintenancePriority,
    MessagePayload,
    PaymentPayload,
    PropertyPayload,
    ReservationPayload,
    build_payload,
    payload_class_for,
)

__all__ = [
    "AvailabilityDay",
    "Guest",
    "Property",
    "PropertyStatus",
    "Reservation",
    "ReservationStatus",
    "EVENT_PAYLOAD_CLASSES",
    "BaseEventPayload",
    "EventPayload",
    "EventType",
    "GuestPayload",
    "HousekeepingPayload",
    "HousekeepingType",
    "MaintenancePayload",
    "MaintenancePriority",
    "MessagePayload",
    "PaymentPayload",
    "PropertyPayload",
    "ReservationPayload",
    "build_payload",
    "payload_class_for",
]
