"""
Occupancy pricing strategy

Demand tiers from the area occupancy rate, plus a length-of-stay discount.
"""
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from beacon_os.pricing.strategies.base import PricingStrategy
from beacon_os.pricing.types import (
    AdjustmentType,
    NightlyRequest,
    PriceAdjustment,
    PricingContext,
    ONE,
    round_whole,
)


class DemandLevel(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


DEMAND_MULTIPLIERS: Dict[DemandLevel, Decimal] = {
    DemandLevel.VERY_LOW: Decimal("0.7"),
    DemandLevel.LOW: Decimal("0.85"),
    DemandLevel.MODERATE: Decimal("1.0"),
    DemandLevel.HIGH: Decimal("1.25"),
    DemandLevel.VERY_HIGH: Decimal("1.5"),
}

# (minimum nights, discount percent, name), longest first
LENGTH_OF_STAY_BRACKETS: Tuple[Tuple[int, int, str], ...] = (
    (28, 20, "Monthly Stay Discount"),
    (14, 15, "Extended Stay Discount"),
    (7, 10, "Weekly Stay Discount"),
)


def demand_level(occupancy_rate: float) -> DemandLevel:
    """Bucket an occupancy rate in [0, 1]"""
    if occupancy_rate >= 0.9:
        return DemandLevel.VERY_HIGH
    if occupancy_rate >= 0.75:
        return DemandLevel.HIGH
    if occupancy_rate >= 0.5:
        return DemandLevel.MODERATE
    if occupancy_rate >= 0.25:
        return DemandLevel.LOW
    return DemandLevel.VERY_LOW


def length_of_stay_bracket(nights: int) -> Optional[Tuple[int, int, str]]:
    """Highest bracket the stay qualifies for; brackets never stack"""
    for bracket in LENGTH_OF_STAY_BRACKETS:
        if nights >= bracket[0]:
            return bracket
    return None


class OccupancyPricingStrategy(PricingStrategy):
    """Demand tier multiplier and length-of-stay discount"""

    name = "occupancy"
    priority = 20

    def calculate(
        self,
        request: NightlyRequest,
        current_rate: Decimal,
        context: PricingContext,
    ) -> List[PriceAdjustment]:
        adjustments = []

        occupancy = context.occupancy_for(request.stay_date)
        if occupancy is not None:
            level = demand_level(occupancy.occupancy_rate)
            multiplier = DEMAND_MULTIPLIERS[level]
            if multiplier != ONE:
                adjustments.append(PriceAdjustment(
                    type=AdjustmentType.OCCUPANCY,
                    name=f"{level.value.replace('_', ' ').title()} Demand",
                    percentage=round_whole((multiplier - ONE) * 100),
                    applied=round_whole(current_rate * (multiplier - ONE)),
                ))

        bracket = length_of_stay_bracket(request.nights)
        if bracket is not None:
            _, percent, name = bracket
            adjustments.append(PriceAdjustment(
                type=AdjustmentType.LENGTH_OF_STAY,
                name=name,
                percentage=Decimal(-percent),
                applied=-round_whole(current_rate * Decimal(percent) / 100),
            ))

        return adjustments
