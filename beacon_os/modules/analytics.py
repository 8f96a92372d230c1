"""
Analytics facade - event telemetry and stay tracking
"""
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional
import logging

from beacon_os.engine.event_bus import Event

logger = logging.getLogger(__name__)


@dataclass
class StayRecord:
    reservation_id: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def completed(self) -> bool:
        return self.completed_at is not None


class AnalyticsEngine:
    """In-memory analytics"""

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self._clock = clock
        self._event_counts: Counter = Counter()
        self._stays: Dict[str, StayRecord] = {}
        self._initialized = False

    async def initialize(self) -> None:
        logger.info("Initializing analytics engine")
        self._initialized = True

    async def shutdown(self) -> None:
        logger.info("Shutting down analytics engine")
        self._initialized = False

    async def health_check(self) -> bool:
        return self._initialized

    def track_event(self, event: Event) -> None:
        """Count every bus event by type"""
        self._event_counts[event.event_type.value] += 1

    async def track_stay_start(self, reservation_id: str) -> StayRecord:
        record = self._stays.setdefault(reservation_id, StayRecord(reservation_id))
        record.started_at = self._clock()
        logger.info(f"Stay started: {reservation_id}")
        return record

    async def track_stay_complete(self, reservation_id: str) -> StayRecord:
        record = self._stays.setdefault(reservation_id, StayRecord(reservation_id))
        record.completed_at = self._clock()
        if record.started_at is None:
            logger.warning(f"Stay {reservation_id} completed without a recorded start")
        logger.info(f"Stay completed: {reservation_id}")
        return record

    def get_stay(self, reservation_id: str) -> Optional[StayRecord]:
        return self._stays.get(reservation_id)

    def get_event_counts(self) -> Dict[str, int]:
        return dict(self._event_counts)

    def get_summary(self) -> Dict[str, int]:
        return {
            "events": sum(self._event_counts.values()),
            "stays_started": sum(1 for s in self._stays.values() if s.started_at is not None),
            "stays_completed": sum(1 for s in self._stays.values() if s.completed),
        }
