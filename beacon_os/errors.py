"""
beacon_os/errors.py

Error taxonomy for the core.

- ValidationError: bad pricing request, surfaced to the caller
- NotFoundError: unknown property, surfaced to the caller
- IntegrationError: PMS collaborator failure, surfaced to the caller
- HandlerExecutionError: an event handler failed; logged by the bus, never raised to the emitter
- EventTimeoutError: wait_for deadline exceeded, raised to the waiter only
"""
from typing import Any, Optional


class BeaconError(Exception):
    """Base class for all BeaconOS errors."""


class ValidationError(BeaconError, ValueError):
    """Invalid input (e.g. check-out not after check-in)."""


class NotFoundError(BeaconError, LookupError):
    """A referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class IntegrationError(BeaconError):
    """An external collaborator (PMS, channel) failed."""


class HandlerExecutionError(BeaconError):
    """Wraps the exception raised by an event handler."""

    def __init__(self, event_type: str, handler_name: str, cause: BaseException):
        self.event_type = event_type
        self.handler_name = handler_name
        self.cause = cause
        super().__init__(f"Handler {handler_name} failed for {event_type}: {cause}")


class EventTimeoutError(BeaconError, TimeoutError):
    """No matching event arrived before the deadline."""

    def __init__(self, event_type: str, timeout: Optional[float] = None):
        self.event_type = event_type
        self.timeout = timeout
        super().__init__(f"Timeout waiting for event: {event_type}")


__all__ = [
    "BeaconError",
    "ValidationError",
    "NotFoundError",
    "IntegrationError",
    "HandlerExecutionError",
    "EventTimeoutError",
]
