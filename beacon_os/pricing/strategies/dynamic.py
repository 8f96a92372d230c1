"""
Dynamic pricing strategy

Lead-time discounts (last minute / early bird) and a demand nudge from the
night's occupancy record. The demand nudge layers on top of the occupancy
strategy's tiers.
"""
from datetime import date
from decimal import Decimal
from typing import List

from beacon_os.pricing.strategies.base import PricingStrategy
from beacon_os.pricing.types import (
    AdjustmentType,
    NightlyRequest,
    PriceAdjustment,
    PricingContext,
    round_whole,
)

LAST_MINUTE_WINDOW_DAYS = 7
LAST_MINUTE_STEP_PERCENT = 3
LAST_MINUTE_MAX_PERCENT = 25
EARLY_BIRD_DAYS = 90
EARLY_BIRD_PERCENT = 5
HIGH_DEMAND_THRESHOLD = 0.85
HIGH_DEMAND_PERCENT = 15
LOW_DEMAND_THRESHOLD = 0.4
LOW_DEMAND_PERCENT = 10


def last_minute_percent(days_out: int) -> int:
    """0% a week out, +3% per day closer, capped at 25%"""
    return min(LAST_MINUTE_MAX_PERCENT, (LAST_MINUTE_WINDOW_DAYS - days_out) * LAST_MINUTE_STEP_PERCENT)


class DynamicPricingStrategy(PricingStrategy):
    """Lead-time and demand-signal adjustments"""

    name = "dynamic"
    priority = 30

    def calculate(
        self,
        request: NightlyRequest,
        current_rate: Decimal,
        context: PricingContext,
    ) -> List[PriceAdjustment]:
        adjustments = []
        today = context.today or date.today()
        days_out = (request.check_in - today).days

        if 0 <= days_out <= LAST_MINUTE_WINDOW_DAYS:
            percent = last_minute_percent(days_out)
            if percent > 0:
                adjustments.append(PriceAdjustment(
                    type=AdjustmentType.LAST_MINUTE,
                    name="Last Minute Deal",
                    percentage=Decimal(-percent),
                    applied=-round_whole(current_rate * Decimal(percent) / 100),
                ))
        elif days_out >= EARLY_BIRD_DAYS:
            adjustments.append(PriceAdjustment(
                type=AdjustmentType.EARLY_BIRD,
                name="Early Booking Discount",
                percentage=Decimal(-EARLY_BIRD_PERCENT),
                applied=-round_whole(current_rate * Decimal(EARLY_BIRD_PERCENT) / 100),
            ))

        occupancy = context.occupancy_for(request.stay_date)
        if occupancy is not None:
            if occupancy.occupancy_rate >= HIGH_DEMAND_THRESHOLD:
                adjustments.append(PriceAdjustment(
                    type=AdjustmentType.DEMAND,
                    name="High Demand Premium",
                    percentage=Decimal(HIGH_DEMAND_PERCENT),
                    applied=round_whole(current_rate * Decimal(HIGH_DEMAND_PERCENT) / 100),
                ))
            elif occupancy.occupancy_rate <= LOW_DEMAND_THRESHOLD:
                adjustments.append(PriceAdjustment(
                    type=AdjustmentType.DEMAND,
                    name="Low Demand Discount",
                    percentage=Decimal(-LOW_DEMAND_PERCENT),
                    applied=-round_whole(current_rate * Decimal(LOW_DEMAND_PERCENT) / 100),
                ))

        return adjustments
