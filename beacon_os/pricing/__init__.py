from beacon_os.pricing.engine import PricingEngine
from beacon_os.pricing.fees import (
    IPromoCodeSource,
    PromoCode,
    StaticPromoCodes,
    apply_promo_code,
    calculate_fees,
    calculate_taxes,
    default_fees,
)
from beacon_os.pricing.seasons import default_seasons, find_season, is_weekend
from beacon_os.pricing.types import (
    AdjustmentType,
    Discount,
    DiscountType,
    Fee,
    FeeType,
    NightlyRate,
    OccupancyData,
    PriceAdjustment,
    PriceRecommendation,
    PricingRequest,
    PricingResponse,
    PricingRule,
    RuleAdjustment,
    RuleConditions,
    SeasonDefinition,
)

__all__ = [
    "PricingEngine",
    "IPromoCodeSource",
    "PromoCode",
    "StaticPromoCodes",
    "apply_promo_code",
    "calculate_fees",
    "calculate_taxes",
    "default_fees",
    "default_seasons",
    "find_season",
    "is_weekend",
    "AdjustmentType",
    "Discount",
    "DiscountType",
    "Fee",
    "FeeType",
    "NightlyRate",
    "OccupancyData",
    "PriceAdjustment",
    "PriceRecommendation",
    "PricingRequest",
    "PricingResponse",
    "PricingRule",
    "RuleAdjustment",
    "RuleConditions",
    "SeasonDefinition",
]
