"""
beacon_os/pricing/engine.py

Pricing engine - composes prioritized strategies into a nightly-rate quote,
then applies fees, taxes and promo codes.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence
import logging

from beacon_os.config import Settings, settings as default_settings
from beacon_os.engine.event_bus import Event, EventBus, Unsubscribe, make_event
from beacon_os.errors import BeaconError, IntegrationError, NotFoundError
from beacon_os.models.entities import AvailabilityDay, Property
from beacon_os.models.events import EventType, PropertyPayload, ReservationPayload
from beacon_os.pricing.fees import (
    IPromoCodeSource,
    StaticPromoCodes,
    apply_promo_code,
    calculate_fees,
    calculate_taxes,
    default_fees,
)
from beacon_os.pricing.seasons import default_seasons, each_night, find_season, is_weekend
from beacon_os.pricing.strategies import (
    CustomRulePricingStrategy,
    DynamicPricingStrategy,
    OccupancyPricingStrategy,
    PricingStrategy,
    SeasonalPricingStrategy,
)
from beacon_os.pricing.types import (
    AdjustmentType,
    Fee,
    NightlyRate,
    NightlyRequest,
    PriceAdjustment,
    PriceRecommendation,
    PricingContext,
    PricingRequest,
    PricingResponse,
    PricingRule,
    PropertySnapshot,
    SeasonDefinition,
    ZERO,
    merge_adjustments,
    round_currency,
    round_whole,
    to_decimal,
)

if TYPE_CHECKING:
    from beacon_os.integrations.base import IPropertyIntegration

logger = logging.getLogger(__name__)

WEEKEND_PREMIUM = Decimal("0.10")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PricingEngine:
    """
    Dynamic pricing engine.

    Example:
        >>> engine = PricingEngine(event_bus, integrations)
        >>> await engine.initialize()
        >>> quote = await engine.calculate_pricing(PricingRequest(
        ...     property_id="p-1", check_in=date(2025, 7, 1), check_out=date(2025, 7, 8)))
        >>> quote.total_amount
    """

    def __init__(
        self,
        event_bus: EventBus,
        integrations: "IPropertyIntegration",
        config: Optional[Settings] = None,
        seasons: Optional[Sequence[SeasonDefinition]] = None,
        rules: Optional[Sequence[PricingRule]] = None,
        fees: Optional[Sequence[Fee]] = None,
        promo_codes: Optional[IPromoCodeSource] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._config = config or default_settings
        self._event_bus = event_bus
        self._integrations = integrations
        self._strategies: List[PricingStrategy] = []
        self._seasons: List[SeasonDefinition] = list(seasons) if seasons is not None else default_seasons()
        self._rules: List[PricingRule] = list(rules or [])
        self._fees: List[Fee] = list(fees) if fees is not None else default_fees()
        self._promo_codes = promo_codes or StaticPromoCodes()
        self._clock = clock
        self._subscriptions: List[Unsubscribe] = []
        self._initialized = False

    # ==================== Lifecycle ====================

    async def initialize(self) -> None:
        if self._initialized:
            return

        logger.info("Initializing pricing engine")

        if not self._strategies:
            for strategy in self.default_strategies():
                self.register_strategy(strategy)

        self._subscriptions = [
            self._event_bus.on(EventType.RESERVATION_CANCELLED, self._on_reservation_changed),
            self._event_bus.on(EventType.RESERVATION_MODIFIED, self._on_reservation_changed),
        ]

        self._initialized = True
        logger.info(f"Pricing engine initialized with strategies {self.strategies}")

    async def shutdown(self) -> None:
        logger.info("Shutting down pricing engine")
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []
        self._initialized = False

    async def health_check(self) -> bool:
        return self._initialized

    def default_strategies(self) -> List[PricingStrategy]:
        strategies: List[PricingStrategy] = [
            SeasonalPricingStrategy(),
            OccupancyPricingStrategy(),
        ]
        if self._config.FEATURE_DYNAMIC_PRICING:
            strategies.append(DynamicPricingStrategy())
        strategies.append(CustomRulePricingStrategy())
        return strategies

    def register_strategy(self, strategy: PricingStrategy) -> None:
        """Add a strategy, keeping the list sorted by ascending priority"""
        self._strategies.append(strategy)
        self._strategies.sort(key=lambda s: s.priority)
        logger.debug(f"Strategy {strategy.name} registered at priority {strategy.priority}")

    @property
    def strategies(self) -> List[str]:
        return [s.name for s in self._strategies]

    @property
    def seasons(self) -> List[SeasonDefinition]:
        return list(self._seasons)

    # ==================== Quotes ====================

    async def calculate_pricing(self, request: PricingRequest) -> PricingResponse:
        """
        Price a stay.

        Args:
            request: Property, dates, party size and optional promo code

        Returns:
            A quote valid for QUOTE_VALIDITY_HOURS

        Raises:
            ValidationError: check-out not after check-in
            NotFoundError: property unknown to the PMS
            IntegrationError: PMS lookup failed
        """
        request.validate()
        if not self._strategies:
            for strategy in self.default_strategies():
                self.register_strategy(strategy)

        prop = await self._fetch_property(request.property_id)
        availability = await self._call_integration(
            "availability",
            self._integrations.get_availability(request.property_id, request.check_in, request.check_out),
        )
        occupancy = await self._call_integration(
            "occupancy",
            self._integrations.get_occupancy(request.property_id, request.check_in, request.check_out),
        )

        now = self._clock()
        context = PricingContext(
            property=PropertySnapshot(
                id=prop.id,
                base_rate=self._base_rate_for(prop),
                bedrooms=prop.bedrooms,
                village=prop.village,
                sleeps=prop.sleeps,
            ),
            occupancy=tuple(occupancy),
            seasons=tuple(self._seasons),
            rules=tuple(self._rules),
            today=now.date(),
        )

        nightly_rates = self._calculate_nightly_rates(request, context, availability)
        nights = len(nightly_rates)
        subtotal = sum((nr.rate for nr in nightly_rates), ZERO)

        guests = request.guests or prop.sleeps or 1
        fees = calculate_fees(self._fees, subtotal, nights, guests)
        taxable_amount = subtotal + sum((f.calculated for f in fees), ZERO)
        taxes = calculate_taxes(taxable_amount, self._config.TAX_RATE)

        discount = None
        if request.promo_code:
            discount = apply_promo_code(self._promo_codes, request.promo_code, subtotal)

        total_amount = taxable_amount + taxes - (discount.savings if discount else ZERO)
        total_amount = max(round_currency(total_amount), ZERO)

        logger.info(
            f"Quoted {request.property_id} {request.check_in}..{request.check_out}: "
            f"{nights} nights, total {total_amount}"
        )

        return PricingResponse(
            property_id=request.property_id,
            check_in=request.check_in,
            check_out=request.check_out,
            nights=nights,
            base_rate=context.property.base_rate,
            nightly_rates=nightly_rates,
            adjustments=merge_adjustments(nightly_rates),
            subtotal=subtotal,
            fees=fees,
            taxes=taxes,
            total_amount=total_amount,
            discount=discount,
            currency=self._config.CURRENCY,
            calculated_at=now,
            expires_at=now + timedelta(hours=self._config.QUOTE_VALIDITY_HOURS),
        )

    def _calculate_nightly_rates(
        self,
        request: PricingRequest,
        context: PricingContext,
        availability: Iterable[AvailabilityDay],
    ) -> List[NightlyRate]:
        by_date = {day.date: day for day in availability}
        nightly_rates = []

        for night in each_night(request.check_in, request.check_out):
            avail_day = by_date.get(night)
            if avail_day is not None and avail_day.rate:
                base_rate = to_decimal(avail_day.rate)
            else:
                base_rate = context.property.base_rate

            night_request = NightlyRequest.for_night(request, night)
            adjustments: List[PriceAdjustment] = []
            rate = base_rate

            for strategy in self._strategies:
                for adj in strategy.calculate(night_request, rate, context):
                    adjustments.append(adj)
                    rate += adj.applied

            # Weekend premium is a fixed rule, not a strategy
            if is_weekend(night):
                premium = round_whole(base_rate * WEEKEND_PREMIUM)
                adjustments.append(PriceAdjustment(
                    type=AdjustmentType.WEEKEND,
                    name="Weekend Rate",
                    percentage=Decimal(10),
                    applied=premium,
                ))
                rate += premium

            nightly_rates.append(NightlyRate(
                date=night,
                rate=round_currency(rate),
                base_rate=base_rate,
                adjustments=adjustments,
                available=avail_day.available if avail_day is not None else True,
                minimum_stay=avail_day.minimum_stay if avail_day is not None else None,
            ))

        return nightly_rates

    # ==================== Recommendations ====================

    async def get_recommended_price(self, property_id: str, on_date: date) -> PriceRecommendation:
        """
        Advisory price: season x weekend x lead time.

        Independent of the strategy pipeline; used for display only.
        """
        prop = await self._call_integration("property", self._integrations.get_property(property_id))
        base_rate = self._base_rate_for(prop) if prop else to_decimal(self._config.DEFAULT_BASE_RATE)

        factors = []
        multiplier = Decimal("1")

        season = find_season(on_date, self._seasons)
        if season is not None:
            multiplier *= season.multiplier
            factors.append(f"{season.name} season ({round_whole((season.multiplier - 1) * 100)}%)")

        if is_weekend(on_date):
            multiplier *= Decimal("1.1")
            factors.append("Weekend premium (+10%)")

        days_out = (on_date - self._clock().date()).days
        if days_out <= 7:
            multiplier *= Decimal("0.85")
            factors.append("Last minute discount (-15%)")
        elif days_out >= 90:
            multiplier *= Decimal("0.95")
            factors.append("Early bird rate (-5%)")

        recommended = round_whole(base_rate * multiplier)
        return PriceRecommendation(
            recommended=recommended,
            min=round_whole(recommended * Decimal("0.8")),
            max=round_whole(recommended * Decimal("1.3")),
            confidence=0.75,
            factors=factors,
            date=on_date,
        )

    async def recalculate_surrounding_dates(
        self,
        property_id: str,
        around: Optional[date] = None,
    ) -> List[PriceRecommendation]:
        """
        Refresh advisory prices around a booking and publish them.

        Covers REPRICING_WINDOW_DAYS on each side of `around` (default
        today), skipping past dates, then emits property.rate_changed.
        """
        today = self._clock().date()
        anchor = around or today
        window = self._config.REPRICING_WINDOW_DAYS
        logger.info(f"Recalculating prices for property {property_id} around {anchor}")

        recommendations = []
        for offset in range(-window, window + 1):
            day = anchor + timedelta(days=offset)
            if day < today:
                continue
            recommendations.append(await self.get_recommended_price(property_id, day))

        payload = PropertyPayload(
            property_id=property_id,
            details={
                "anchor": anchor.isoformat(),
                "recommendations": {
                    r.date.isoformat(): str(r.recommended) for r in recommendations
                },
            },
        )
        event = make_event(EventType.PROPERTY_RATE_CHANGED, payload, source="pricing-engine")
        await self._event_bus.emit(EventType.PROPERTY_RATE_CHANGED, event)
        return recommendations

    # ==================== Helpers ====================

    def _base_rate_for(self, prop: Property) -> Decimal:
        if prop.base_rate:
            return to_decimal(prop.base_rate)
        return to_decimal(self._config.DEFAULT_BASE_RATE)

    async def _fetch_property(self, property_id: str) -> Property:
        prop = await self._call_integration("property", self._integrations.get_property(property_id))
        if prop is None:
            raise NotFoundError("Property", property_id)
        return prop

    async def _call_integration(self, what: str, awaitable):
        try:
            return await awaitable
        except BeaconError:
            raise
        except Exception as e:
            raise IntegrationError(f"PMS {what} lookup failed: {e}") from e

    async def _on_reservation_changed(self, event: Event) -> None:
        payload = event.payload
        if not isinstance(payload, ReservationPayload) or not payload.property_id:
            logger.warning(f"Ignoring {event.event_type.value} without property_id")
            return
        await self.recalculate_surrounding_dates(payload.property_id, payload.check_in)
