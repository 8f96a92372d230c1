"""
Core entities exchanged with external collaborators
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class PropertyStatus(str, Enum):
    """Property operational status"""
    READY = "ready"
    OCCUPIED = "occupied"
    NEEDS_CLEANING = "needs_cleaning"
    MAINTENANCE = "maintenance"


class ReservationStatus(str, Enum):
    """Reservation status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


@dataclass
class Property:
    """Property facts supplied by the PMS"""
    id: str
    name: str = ""
    base_rate: Optional[Decimal] = None
    bedrooms: int = 0
    sleeps: int = 0
    village: str = "hatteras"
    pet_friendly: bool = False
    amenities: List[str] = field(default_factory=list)
    wifi_network: Optional[str] = None
    wifi_password: Optional[str] = None
    door_code: Optional[str] = None


@dataclass
class AvailabilityDay:
    """One night of PMS availability"""
    date: date
    available: bool = True
    rate: Optional[Decimal] = None
    minimum_stay: Optional[int] = None


@dataclass
class Guest:
    """Guest contact info"""
    id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    loyalty_tier: str = "bronze"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Reservation:
    """Reservation as known to the PMS"""
    id: str
    property_id: str
    guest_id: str
    check_in: date
    check_out: date
    confirmation_number: str = ""
    guests: int = 1
    total_amount: Decimal = Decimal("0")
    status: ReservationStatus = ReservationStatus.CONFIRMED
    guest: Optional[Guest] = None
