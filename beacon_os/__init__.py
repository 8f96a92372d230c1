"""
BeaconOS - event-driven operations core for vacation rentals
"""
from beacon_os.config import Settings, settings
from beacon_os.engine.event_bus import Event, EventBus, PublishResult, make_event
from beacon_os.errors import (
    BeaconError,
    EventTimeoutError,
    HandlerExecutionError,
    IntegrationError,
    NotFoundError,
    ValidationError,
)
from beacon_os.models.events import EventType
from beacon_os.orchestrator import BeaconContext, BeaconOS, create_os
from beacon_os.pricing.engine import PricingEngine

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "settings",
    "Event",
    "EventBus",
    "PublishResult",
    "make_event",
    "BeaconError",
    "EventTimeoutError",
    "HandlerExecutionError",
    "IntegrationError",
    "NotFoundError",
    "ValidationError",
    "EventType",
    "BeaconContext",
    "BeaconOS",
    "create_os",
    "PricingEngine",
]
