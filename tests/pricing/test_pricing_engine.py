"""
Tests for beacon_os.pricing.engine
"""
import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from beacon_os.errors import IntegrationError, NotFoundError, ValidationError
from beacon_os.integrations.memory import InMemoryIntegration
from beacon_os.models.entities import AvailabilityDay, Property
from beacon_os.models.events import EventType, ReservationPayload
from beacon_os.engine.event_bus import make_event
from beacon_os.pricing.engine import PricingEngine
from beacon_os.pricing.fees import PromoCode, StaticPromoCodes
from beacon_os.pricing.strategies import PricingStrategy
from beacon_os.pricing.types import AdjustmentType, DiscountType, PriceAdjustment, PricingRequest

PEAK_WEEK = PricingRequest(property_id="p-1", check_in=date(2025, 7, 7), check_out=date(2025, 7, 14))


def quote(engine, request):
    return asyncio.run(engine.calculate_pricing(request))


class TestCalculatePricing:
    """Quote composition"""

    def test_peak_summer_week(self, engine):
        """$300 base, 7 nights in Peak Summer: 450 per night less the weekly discount"""
        response = quote(engine, PEAK_WEEK)

        weekday = [nr for nr in response.nightly_rates if nr.date.weekday() < 5]
        weekend = [nr for nr in response.nightly_rates if nr.date.weekday() >= 5]
        assert len(weekday) == 5
        assert all(nr.rate == Decimal("405.00") for nr in weekday)
        assert all(nr.rate == Decimal("435.00") for nr in weekend)
        assert all(nr.base_rate == Decimal("300") for nr in response.nightly_rates)

        seasonal = response.nightly_rates[0].adjustments[0]
        assert seasonal.type == AdjustmentType.SEASONAL
        assert seasonal.applied == Decimal("150")

    def test_length_of_stay_reported_once(self, engine):
        response = quote(engine, PEAK_WEEK)

        los = [a for a in response.adjustments if a.type == AdjustmentType.LENGTH_OF_STAY]
        assert len(los) == 1
        assert los[0].name == "Weekly Stay Discount"
        assert los[0].applied == Decimal("-315")

        types = [a.type for a in response.adjustments]
        assert len(types) == len(set(types))

    def test_totals(self, engine):
        response = quote(engine, PEAK_WEEK)

        assert response.subtotal == Decimal("2895.00")
        assert response.fees_total == Decimal("540.60")
        assert response.taxes == Decimal("412.27")
        assert response.total_amount == Decimal("3847.87")
        assert response.discount is None
        assert response.currency == "USD"

    def test_nights_match_dates(self, engine):
        response = quote(engine, PEAK_WEEK)
        assert response.nights == len(response.nightly_rates) == (PEAK_WEEK.check_out - PEAK_WEEK.check_in).days
        assert response.nightly_rates[0].date == PEAK_WEEK.check_in
        assert response.nightly_rates[-1].date == PEAK_WEEK.check_out - timedelta(days=1)

    def test_idempotent(self, engine):
        first = quote(engine, PEAK_WEEK)
        second = quote(engine, PEAK_WEEK)
        assert [nr.rate for nr in first.nightly_rates] == [nr.rate for nr in second.nightly_rates]
        assert first.total_amount == second.total_amount

    def test_quote_expiry(self, engine, clock):
        response = quote(engine, PEAK_WEEK)

        assert response.calculated_at == clock()
        assert response.expires_at - response.calculated_at == timedelta(hours=24)
        assert not response.is_expired(response.calculated_at + timedelta(hours=23))
        assert response.is_expired(response.calculated_at + timedelta(hours=25))

    def test_availability_rate_overrides_base(self, engine, integration):
        integration.set_availability("p-1", [
            AvailabilityDay(date=date(2025, 7, 8), rate=Decimal("500"), minimum_stay=7),
        ])
        response = quote(engine, PEAK_WEEK)

        tuesday = response.nightly_rates[1]
        assert tuesday.base_rate == Decimal("500")
        assert tuesday.minimum_stay == 7
        # 500 * 1.5 = 750, less 10% weekly
        assert tuesday.rate == Decimal("675.00")


class TestPricingErrors:
    """Rejected requests"""

    def test_checkout_equal_checkin_rejected(self, engine):
        request = PricingRequest(property_id="p-1", check_in=date(2025, 7, 7), check_out=date(2025, 7, 7))
        with pytest.raises(ValidationError):
            quote(engine, request)

    def test_inverted_dates_rejected(self, engine):
        request = PricingRequest(property_id="p-1", check_in=date(2025, 7, 8), check_out=date(2025, 7, 7))
        with pytest.raises(ValueError):
            quote(engine, request)

    def test_unknown_property(self, engine):
        request = PricingRequest(property_id="missing", check_in=date(2025, 7, 7), check_out=date(2025, 7, 9))
        with pytest.raises(NotFoundError):
            quote(engine, request)

    def test_integration_failure_propagates(self, bus, config, villa, clock):
        class BrokenPMS(InMemoryIntegration):
            async def get_availability(self, property_id, start, end):
                raise ConnectionError("PMS unreachable")

        engine = PricingEngine(bus, BrokenPMS([villa]), config, clock=clock)
        with pytest.raises(IntegrationError):
            quote(engine, PEAK_WEEK)


class TestPromoCodes:
    """Promo applied after tax"""

    @pytest.fixture
    def flat_engine(self, bus, integration, config, clock):
        integration.add_property(Property(id="p-2", name="Sound Cottage", base_rate=Decimal("250"), sleeps=4))
        return PricingEngine(bus, integration, config, seasons=[], clock=clock)

    def test_welcome10_on_1000_subtotal(self, flat_engine):
        base = PricingRequest(property_id="p-2", check_in=date(2025, 6, 9), check_out=date(2025, 6, 13))
        promo = PricingRequest(
            property_id="p-2", check_in=date(2025, 6, 9), check_out=date(2025, 6, 13), promo_code="welcome10"
        )

        without = quote(flat_engine, base)
        with_promo = quote(flat_engine, promo)

        assert without.subtotal == Decimal("1000.00")
        assert with_promo.discount.savings == Decimal("100.00")
        assert with_promo.taxes == without.taxes == Decimal("166.68")
        assert without.total_amount - with_promo.total_amount == Decimal("100.00")
        assert with_promo.total_amount == Decimal("1455.68")

    def test_unknown_promo_is_ignored(self, flat_engine):
        request = PricingRequest(
            property_id="p-2", check_in=date(2025, 6, 9), check_out=date(2025, 6, 13), promo_code="NOPE"
        )
        response = quote(flat_engine, request)
        assert response.discount is None
        assert response.total_amount == Decimal("1555.68")

    def test_total_never_negative(self, bus, integration, config, clock):
        promos = StaticPromoCodes([PromoCode("FREESTAY", DiscountType.FIXED, Decimal("100000"))])
        engine = PricingEngine(bus, integration, config, promo_codes=promos, clock=clock)
        request = PricingRequest(property_id="p-1", check_in=date(2025, 7, 7), check_out=date(2025, 7, 9),
                                 promo_code="FREESTAY")

        assert quote(engine, request).total_amount == Decimal("0")


class TestStrategies:
    """Strategy registration"""

    def test_default_order(self, engine):
        asyncio.run(engine.initialize())
        assert engine.strategies == ["seasonal", "occupancy", "dynamic", "custom_rules"]

    def test_dynamic_disabled_by_flag(self, bus, integration, config, clock):
        config = config.model_copy(update={"FEATURE_DYNAMIC_PRICING": False})
        engine = PricingEngine(bus, integration, config, clock=clock)
        asyncio.run(engine.initialize())
        assert "dynamic" not in engine.strategies

    def test_registered_strategy_sorted_by_priority(self, engine):
        class FlatSurcharge(PricingStrategy):
            name = "surcharge"
            priority = 5

            def calculate(self, request, current_rate, context):
                return [PriceAdjustment(type=AdjustmentType.CUSTOM, name="Surcharge", applied=Decimal("10"))]

        asyncio.run(engine.initialize())
        engine.register_strategy(FlatSurcharge())
        assert engine.strategies[0] == "surcharge"

        response = quote(engine, PEAK_WEEK)
        # (300 + 10) * 1.5 = 465, less round(46.5) = 47 weekly
        assert response.nightly_rates[0].rate == Decimal("418.00")


class TestRecommendations:
    """Advisory prices"""

    def test_peak_weekday(self, engine):
        rec = asyncio.run(engine.get_recommended_price("p-1", date(2025, 7, 9)))
        assert rec.recommended == Decimal("450")
        assert rec.min == Decimal("360")
        assert rec.max == Decimal("585")
        assert rec.confidence == 0.75
        assert rec.factors == ["Peak Summer season (50%)"]

    def test_peak_weekend(self, engine):
        rec = asyncio.run(engine.get_recommended_price("p-1", date(2025, 7, 12)))
        assert rec.recommended == Decimal("495")
        assert "Weekend premium (+10%)" in rec.factors

    def test_last_minute(self, engine):
        rec = asyncio.run(engine.get_recommended_price("p-1", date(2025, 6, 4)))
        # Summer 1.3 * last minute 0.85
        assert rec.recommended == Decimal("332")

    def test_early_bird_off_season(self, engine):
        rec = asyncio.run(engine.get_recommended_price("p-1", date(2025, 12, 3)))
        assert rec.recommended == Decimal("242")
        assert "Early bird rate (-5%)" in rec.factors

    def test_unknown_property_uses_default_rate(self, engine):
        rec = asyncio.run(engine.get_recommended_price("missing", date(2025, 7, 9)))
        assert rec.recommended == Decimal("450")

    def test_recalculate_surrounding_dates_publishes(self, engine, bus):
        changed = []
        bus.on(EventType.PROPERTY_RATE_CHANGED, changed.append)

        recs = asyncio.run(engine.recalculate_surrounding_dates("p-1", date(2025, 6, 3)))

        # window 05-27..06-10, past dates dropped
        assert [r.date for r in recs][0] == date(2025, 6, 1)
        assert len(recs) == 10
        assert len(changed) == 1
        assert changed[0].payload.property_id == "p-1"
        assert len(changed[0].payload.details["recommendations"]) == 10


class TestLifecycle:
    """Event subscriptions"""

    def test_cancellation_triggers_repricing(self, engine, bus):
        changed = []
        bus.on(EventType.PROPERTY_RATE_CHANGED, changed.append)

        async def scenario():
            await engine.initialize()
            payload = ReservationPayload(reservation_id="r-1", property_id="p-1", check_in=date(2025, 7, 7))
            await bus.emit(EventType.RESERVATION_CANCELLED, make_event(EventType.RESERVATION_CANCELLED, payload))

        asyncio.run(scenario())
        assert len(changed) == 1
        assert changed[0].payload.details["anchor"] == "2025-07-07"

    def test_created_is_left_to_orchestrator(self, engine, bus):
        asyncio.run(engine.initialize())
        assert bus.listener_count(EventType.RESERVATION_CREATED) == 0
        assert bus.listener_count(EventType.RESERVATION_MODIFIED) == 1

    def test_shutdown_unsubscribes(self, engine, bus):
        async def scenario():
            await engine.initialize()
            assert await engine.health_check()
            await engine.shutdown()

        asyncio.run(scenario())
        assert bus.listener_count(EventType.RESERVATION_CANCELLED) == 0
        assert not asyncio.run(engine.health_check())
