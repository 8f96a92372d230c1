"""
Custom rule strategy - operator-defined PricingRules from the context
"""
from decimal import Decimal
from typing import List

from beacon_os.pricing.strategies.base import PricingStrategy
from beacon_os.pricing.types import (
    DiscountType,
    NightlyRequest,
    PriceAdjustment,
    PricingContext,
    PricingRule,
    round_whole,
)


def rule_matches(rule: PricingRule, request: NightlyRequest, context: PricingContext) -> bool:
    """Every set condition must hold"""
    cond = rule.conditions
    day = request.stay_date

    if cond.property_ids is not None and context.property.id not in cond.property_ids:
        return False
    if cond.villages is not None and context.property.village not in cond.villages:
        return False
    if cond.date_range is not None and not (cond.date_range[0] <= day <= cond.date_range[1]):
        return False
    if cond.days_of_week is not None and day.weekday() not in cond.days_of_week:
        return False
    if cond.minimum_nights is not None and request.nights < cond.minimum_nights:
        return False
    if cond.maximum_nights is not None and request.nights > cond.maximum_nights:
        return False

    if cond.days_before_arrival_min is not None or cond.days_before_arrival_max is not None:
        if context.today is None:
            return False
        days_out = (request.check_in - context.today).days
        if cond.days_before_arrival_min is not None and days_out < cond.days_before_arrival_min:
            return False
        if cond.days_before_arrival_max is not None and days_out > cond.days_before_arrival_max:
            return False

    if cond.occupancy_min is not None or cond.occupancy_max is not None:
        occupancy = context.occupancy_for(day)
        if occupancy is None:
            return False
        if cond.occupancy_min is not None and occupancy.occupancy_rate < cond.occupancy_min:
            return False
        if cond.occupancy_max is not None and occupancy.occupancy_rate > cond.occupancy_max:
            return False

    return True


class CustomRulePricingStrategy(PricingStrategy):
    """Applies enabled, matching rules in ascending rule priority"""

    name = "custom_rules"
    priority = 40

    def calculate(
        self,
        request: NightlyRequest,
        current_rate: Decimal,
        context: PricingContext,
    ) -> List[PriceAdjustment]:
        adjustments = []
        rules = sorted((r for r in context.rules if r.enabled), key=lambda r: r.priority)

        for rule in rules:
            if not rule_matches(rule, request, context):
                continue

            adjustment = rule.adjustment
            if adjustment.type == DiscountType.PERCENTAGE:
                amount = round_whole(current_rate * adjustment.value / 100)
                percentage = adjustment.value
            else:
                amount = round_whole(adjustment.value)
                percentage = None

            sign = Decimal(-1) if adjustment.operation == "subtract" else Decimal(1)
            adjustments.append(PriceAdjustment(
                type=rule.type,
                name=rule.name,
                percentage=percentage * sign if percentage is not None else None,
                applied=amount * sign,
            ))

        return adjustments
