from beacon_os.engine.event_bus import (
    Event,
    EventBus,
    EventBusStatistics,
    EventHandler,
    PublishResult,
    Unsubscribe,
    make_event,
)
from beacon_os.engine.queue import QueueManager, QueuedJob, QueueStats

__all__ = [
    "Event",
    "EventBus",
    "EventBusStatistics",
    "EventHandler",
    "PublishResult",
    "Unsubscribe",
    "make_event",
    "QueueManager",
    "QueuedJob",
    "QueueStats",
]
