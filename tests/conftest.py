"""
Shared fixtures
"""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from beacon_os.config import Settings
from beacon_os.engine.event_bus import EventBus
from beacon_os.integrations.memory import InMemoryIntegration
from beacon_os.models.entities import Guest, Property, Reservation, ReservationStatus
from beacon_os.pricing.engine import PricingEngine


def fixed_clock() -> datetime:
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    """Settings isolated from the environment and .env"""
    return Settings(
        _env_file=None,
        OPENAI_API_KEY=None,
        ENABLE_LLM=False,
        REDIS_URL=None,
    )


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def villa():
    return Property(
        id="p-1",
        name="Oceanfront Villa",
        base_rate=Decimal("300"),
        bedrooms=4,
        sleeps=8,
        village="avon",
        wifi_network="Villa_5G",
        wifi_password="sunrise",
        door_code="4321",
    )


@pytest.fixture
def guest():
    return Guest(id="g-1", first_name="Jane", last_name="Smith", email="jane@example.com")


@pytest.fixture
def reservation(guest):
    return Reservation(
        id="r-1",
        property_id="p-1",
        guest_id=guest.id,
        check_in=date(2025, 7, 7),
        check_out=date(2025, 7, 14),
        confirmation_number="SOS-12345",
        guests=4,
        total_amount=Decimal("3847.87"),
        status=ReservationStatus.CONFIRMED,
        guest=guest,
    )


@pytest.fixture
def integration(villa, reservation):
    return InMemoryIntegration(properties=[villa], reservations=[reservation])


@pytest.fixture
def engine(bus, integration, config, clock):
    return PricingEngine(bus, integration, config, clock=clock)
