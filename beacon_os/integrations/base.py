"""
PMS integration interface - domain-agnostic collaborator contract

The app layer plugs in a concrete client (Track PMS, etc.) by implementing
IPropertyIntegration. The core only calls the methods below.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from beacon_os.models.entities import AvailabilityDay, Property, Reservation
from beacon_os.pricing.types import OccupancyData


class IPropertyIntegration(ABC):
    """Property management system interface"""

    @abstractmethod
    async def get_property(self, property_id: str) -> Optional[Property]:
        """Property facts, or None when unknown

        Raises:
            IntegrationError: PMS unreachable
        """

    @abstractmethod
    async def get_availability(self, property_id: str, start: date, end: date) -> List[AvailabilityDay]:
        """Per-night availability for [start, end]

        Raises:
            IntegrationError: PMS unreachable
        """

    async def get_occupancy(self, property_id: str, start: date, end: date) -> List[OccupancyData]:
        """Area occupancy signal per night; empty when the PMS has none"""
        return []

    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        """Reservation details"""
        return None

    async def get_current_reservation(self, property_id: str) -> Optional[Reservation]:
        """Reservation currently checked in at the property"""
        return None

    async def get_upcoming_reservation(self, property_id: str) -> Optional[Reservation]:
        """Next arriving reservation for the property"""
        return None

    async def health_check(self) -> bool:
        return True
