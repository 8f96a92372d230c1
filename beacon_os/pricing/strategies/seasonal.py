"""
Seasonal pricing strategy - Outer Banks seasonal multipliers
"""
from decimal import Decimal
from typing import List

from beacon_os.pricing.seasons import find_season
from beacon_os.pricing.strategies.base import PricingStrategy
from beacon_os.pricing.types import (
    AdjustmentType,
    NightlyRequest,
    PriceAdjustment,
    PricingContext,
    ONE,
    round_whole,
)


class SeasonalPricingStrategy(PricingStrategy):
    """Applies the matching season's multiplier"""

    name = "seasonal"
    priority = 10

    def calculate(
        self,
        request: NightlyRequest,
        current_rate: Decimal,
        context: PricingContext,
    ) -> List[PriceAdjustment]:
        season = find_season(request.stay_date, context.seasons)
        if season is None or season.multiplier == ONE:
            return []

        return [
            PriceAdjustment(
                type=AdjustmentType.SEASONAL,
                name=season.name,
                percentage=round_whole((season.multiplier - ONE) * 100),
                applied=round_whole(current_rate * (season.multiplier - ONE)),
            )
        ]
