"""
Pricing types

Money is carried as Decimal. Cents round half up; whole-unit amounts round
halves toward +infinity, so a signed delta of -37.5 becomes -37.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_CEILING, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from beacon_os.errors import ValidationError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ONE = Decimal("1")
ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """Decimal from int/float/str without binary float noise"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_currency(value: Number) -> Decimal:
    """Round to cents"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value: Number) -> Decimal:
    """Round to whole currency units, halves toward +infinity"""
    return to_decimal(value).quantize(ONE, rounding=ROUND_HALF_CEILING)


class AdjustmentType(str, Enum):
    """Price adjustment type"""
    SEASONAL = "seasonal"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    LAST_MINUTE = "last_minute"
    EARLY_BIRD = "early_bird"
    LENGTH_OF_STAY = "length_of_stay"
    OCCUPANCY = "occupancy"
    DEMAND = "demand"
    CUSTOM = "custom"


class FeeType(str, Enum):
    """How a fee amount is applied"""
    FLAT = "flat"
    PERCENTAGE = "percentage"
    PER_NIGHT = "per_night"
    PER_PERSON = "per_person"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class PricingRequest:
    """
    A quote request.

    Attributes:
        property_id: Property to price
        check_in: Arrival date
        check_out: Departure date (exclusive night)
        guests: Party size; defaults to the property's capacity for per-person fees
        promo_code: Optional promo code
    """

    property_id: str
    check_in: date
    check_out: date
    guests: Optional[int] = None
    promo_code: Optional[str] = None

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def validate(self) -> None:
        """
        Raises:
            ValidationError: check-out not strictly after check-in, or bad guest count
        """
        if not self.property_id:
            raise ValidationError("property_id is required")
        if self.check_out <= self.check_in:
            raise ValidationError("Check-out must be after check-in")
        if self.guests is not None and self.guests <= 0:
            raise ValidationError("guests must be positive")


@dataclass(frozen=True)
class NightlyRequest:
    """One night of a stay, as seen by the strategies"""

    property_id: str
    stay_date: date
    check_in: date
    check_out: date
    guests: Optional[int] = None

    @property
    def nights(self) -> int:
        """Nights in the whole stay"""
        return (self.check_out - self.check_in).days

    @classmethod
    def for_night(cls, request: PricingRequest, stay_date: date) -> "NightlyRequest":
        return cls(
            property_id=request.property_id,
            stay_date=stay_date,
            check_in=request.check_in,
            check_out=request.check_out,
            guests=request.guests,
        )


@dataclass
class PriceAdjustment:
    """
    Signed currency delta applied to a nightly rate.

    Attributes:
        type: Adjustment type (merge key when aggregating)
        name: Display name
        applied: Currency delta, negative for discounts
        percentage: Percentage shown to the guest, if any
    """

    type: AdjustmentType
    name: str
    applied: Decimal
    percentage: Optional[Decimal] = None


@dataclass
class Fee:
    """Fee definition plus its calculated amount"""
    name: str
    type: FeeType
    amount: Decimal
    calculated: Decimal = ZERO


@dataclass
class Discount:
    """Promo discount"""
    code: str
    type: DiscountType
    amount: Decimal
    savings: Decimal


@dataclass
class NightlyRate:
    """
    Price for one calendar night.

    rate = base_rate + sum(adjustments.applied), rounded to cents once.
    """

    date: date
    rate: Decimal
    base_rate: Decimal
    adjustments: List[PriceAdjustment] = field(default_factory=list)
    available: bool = True
    minimum_stay: Optional[int] = None


@dataclass
class PricingResponse:
    """
    A time-boxed quote. Re-quoting after expires_at recomputes from scratch.
    """

    property_id: str
    check_in: date
    check_out: date
    nights: int
    base_rate: Decimal
    nightly_rates: List[NightlyRate]
    adjustments: List[PriceAdjustment]
    subtotal: Decimal
    fees: List[Fee]
    taxes: Decimal
    total_amount: Decimal
    calculated_at: datetime
    expires_at: datetime
    discount: Optional[Discount] = None
    currency: str = "USD"

    @property
    def fees_total(self) -> Decimal:
        return sum((f.calculated for f in self.fees), ZERO)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class SeasonDefinition:
    """
    A season by MM-DD range. start_date > end_date wraps through Dec 31.
    """

    id: str
    name: str
    start_date: str
    end_date: str
    multiplier: Decimal
    minimum_stay: Optional[int] = None

    def contains(self, day: date) -> bool:
        mmdd = day.strftime("%m-%d")
        if self.start_date > self.end_date:
            return mmdd >= self.start_date or mmdd <= self.end_date
        return self.start_date <= mmdd <= self.end_date


@dataclass(frozen=True)
class OccupancyData:
    """Occupancy signal for one night"""
    property_id: str
    date: date
    occupancy_rate: float  # 0-1 for the surrounding area
    booked: bool = False
    competitor_rates: Tuple[Decimal, ...] = ()


@dataclass(frozen=True)
class RuleConditions:
    """When a custom pricing rule applies; unset fields always match"""
    property_ids: Optional[Tuple[str, ...]] = None
    villages: Optional[Tuple[str, ...]] = None
    date_range: Optional[Tuple[date, date]] = None
    days_of_week: Optional[Tuple[int, ...]] = None  # 0 = Monday
    minimum_nights: Optional[int] = None
    maximum_nights: Optional[int] = None
    days_before_arrival_min: Optional[int] = None
    days_before_arrival_max: Optional[int] = None
    occupancy_min: Optional[float] = None
    occupancy_max: Optional[float] = None


@dataclass(frozen=True)
class RuleAdjustment:
    """
    Attributes:
        type: percentage of the running rate, or a fixed amount
        value: Percentage (e.g. 10 for 10%) or currency amount
        operation: add (surcharge) or subtract (discount)
    """
    type: DiscountType
    value: Decimal
    operation: str = "add"


@dataclass(frozen=True)
class PricingRule:
    """Operator-defined pricing rule"""
    id: str
    name: str
    adjustment: RuleAdjustment
    conditions: RuleConditions = RuleConditions()
    type: AdjustmentType = AdjustmentType.CUSTOM
    enabled: bool = True
    priority: int = 0


@dataclass(frozen=True)
class PropertySnapshot:
    """Property facts relevant to pricing"""
    id: str
    base_rate: Decimal
    bedrooms: int
    village: str
    sleeps: int = 0


@dataclass(frozen=True)
class PricingContext:
    """
    Read-only snapshot built for one calculation; never shared across requests.
    """

    property: PropertySnapshot
    occupancy: Tuple[OccupancyData, ...] = ()
    seasons: Tuple[SeasonDefinition, ...] = ()
    rules: Tuple[PricingRule, ...] = ()
    today: Optional[date] = None

    def occupancy_for(self, day: date) -> Optional[OccupancyData]:
        for record in self.occupancy:
            if record.date == day:
                return record
        return None


@dataclass
class PriceRecommendation:
    """Advisory price for one property/date"""
    recommended: Decimal
    min: Decimal
    max: Decimal
    confidence: float
    factors: List[str] = field(default_factory=list)
    date: Optional[date] = None


def merge_adjustments(nightly_rates: Sequence[NightlyRate]) -> List[PriceAdjustment]:
    """
    Aggregate adjustments across nights.

    Same type merges applied amounts; the first occurrence's name and
    percentage are kept.
    """
    merged: Dict[AdjustmentType, PriceAdjustment] = {}
    for nightly in nightly_rates:
        for adj in nightly.adjustments:
            existing = merged.get(adj.type)
            if existing is None:
                merged[adj.type] = PriceAdjustment(
                    type=adj.type,
                    name=adj.name,
                    applied=adj.applied,
                    percentage=adj.percentage,
                )
            else:
                existing.applied += adj.applied
    return list(merged.values())
