"""
Pricing strategy interface
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List

from beacon_os.pricing.types import NightlyRequest, PriceAdjustment, PricingContext


class PricingStrategy(ABC):
    """
    A pluggable pricing rule.

    Strategies run in ascending priority. Each one sees the running rate,
    i.e. the night's starting rate plus every adjustment made by the
    strategies before it.
    """

    name: str = ""
    priority: int = 0

    @abstractmethod
    def calculate(
        self,
        request: NightlyRequest,
        current_rate: Decimal,
        context: PricingContext,
    ) -> List[PriceAdjustment]:
        """
        Adjustments for one night.

        Args:
            request: The night being priced, with whole-stay dates
            current_rate: Running rate for the night
            context: Per-request pricing snapshot

        Returns:
            Zero or more adjustments
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.priority})"
