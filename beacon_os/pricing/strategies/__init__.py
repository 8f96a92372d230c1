from beacon_os.pricing.strategies.base import PricingStrategy
from beacon_os.pricing.strategies.seasonal import SeasonalPricingStrategy
from beacon_os.pricing.strategies.occupancy import OccupancyPricingStrategy, DemandLevel, demand_level
from beacon_os.pricing.strategies.dynamic import DynamicPricingStrategy
from beacon_os.pricing.strategies.custom_rules import CustomRulePricingStrategy

__all__ = [
    "PricingStrategy",
    "SeasonalPricingStrategy",
    "OccupancyPricingStrategy",
    "DemandLevel",
    "demand_level",
    "DynamicPricingStrategy",
    "CustomRulePricingStrategy",
]
