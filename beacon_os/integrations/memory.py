"""
In-memory PMS integration for development and tests
"""
from datetime import date
from typing import Dict, Iterable, List, Optional
import logging

from beacon_os.integrations.base import IPropertyIntegration
from beacon_os.models.entities import AvailabilityDay, Property, Reservation, ReservationStatus
from beacon_os.pricing.types import OccupancyData

logger = logging.getLogger(__name__)


class InMemoryIntegration(IPropertyIntegration):
    """Dict-backed PMS"""

    def __init__(
        self,
        properties: Optional[Iterable[Property]] = None,
        reservations: Optional[Iterable[Reservation]] = None,
    ):
        self._properties: Dict[str, Property] = {p.id: p for p in properties or []}
        self._reservations: Dict[str, Reservation] = {r.id: r for r in reservations or []}
        self._availability: Dict[str, Dict[date, AvailabilityDay]] = {}
        self._occupancy: Dict[str, Dict[date, OccupancyData]] = {}

    def add_property(self, prop: Property) -> None:
        self._properties[prop.id] = prop

    def add_reservation(self, reservation: Reservation) -> None:
        self._reservations[reservation.id] = reservation

    def set_availability(self, property_id: str, days: Iterable[AvailabilityDay]) -> None:
        bucket = self._availability.setdefault(property_id, {})
        for day in days:
            bucket[day.date] = day

    def set_occupancy(self, property_id: str, records: Iterable[OccupancyData]) -> None:
        bucket = self._occupancy.setdefault(property_id, {})
        for record in records:
            bucket[record.date] = record

    async def get_property(self, property_id: str) -> Optional[Property]:
        return self._properties.get(property_id)

    async def get_availability(self, property_id: str, start: date, end: date) -> List[AvailabilityDay]:
        days = self._availability.get(property_id, {})
        return [d for day, d in sorted(days.items()) if start <= day <= end]

    async def get_occupancy(self, property_id: str, start: date, end: date) -> List[OccupancyData]:
        records = self._occupancy.get(property_id, {})
        return [r for day, r in sorted(records.items()) if start <= day <= end]

    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self._reservations.get(reservation_id)

    async def get_current_reservation(self, property_id: str) -> Optional[Reservation]:
        for reservation in self._reservations.values():
            if reservation.property_id == property_id and reservation.status == ReservationStatus.CHECKED_IN:
                return reservation
        return None

    async def get_upcoming_reservation(self, property_id: str) -> Optional[Reservation]:
        upcoming = [
            r for r in self._reservations.values()
            if r.property_id == property_id
            and r.status in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)
        ]
        if not upcoming:
            return None
        return min(upcoming, key=lambda r: r.check_in)
