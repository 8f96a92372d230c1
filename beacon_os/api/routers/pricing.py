"""
Pricing routes
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from beacon_os.api.deps import get_beacon
from beacon_os.api.schemas import (
    AdjustmentResponse,
    DiscountResponse,
    FeeResponse,
    NightlyRateResponse,
    PricingQuoteResponse,
    RecommendRequest,
    RecommendationResponse,
    money,
)
from beacon_os.orchestrator import BeaconOS
from beacon_os.pricing.types import PriceAdjustment, PricingRequest

router = APIRouter(prefix="/beacon/pricing", tags=["pricing"])


def _adjustment(adj: PriceAdjustment) -> AdjustmentResponse:
    return AdjustmentResponse(
        type=adj.type.value,
        name=adj.name,
        applied=money(adj.applied),
        percentage=money(adj.percentage) if adj.percentage is not None else None,
    )


@router.get("", response_model=PricingQuoteResponse)
async def get_quote(
    property_id: str,
    check_in: date,
    check_out: date,
    guests: Optional[int] = Query(None, ge=1),
    promo_code: Optional[str] = None,
    beacon: BeaconOS = Depends(get_beacon),
):
    """Quote a stay"""
    quote = await beacon.pricing.calculate_pricing(PricingRequest(
        property_id=property_id,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        promo_code=promo_code,
    ))

    discount = None
    if quote.discount is not None:
        discount = DiscountResponse(
            code=quote.discount.code,
            type=quote.discount.type.value,
            amount=money(quote.discount.amount),
            savings=money(quote.discount.savings),
        )

    return PricingQuoteResponse(
        property_id=quote.property_id,
        check_in=quote.check_in,
        check_out=quote.check_out,
        nights=quote.nights,
        currency=quote.currency,
        base_rate=money(quote.base_rate),
        nightly_rates=[
            NightlyRateResponse(
                date=nr.date,
                rate=money(nr.rate),
                base_rate=money(nr.base_rate),
                available=nr.available,
                minimum_stay=nr.minimum_stay,
                adjustments=[_adjustment(a) for a in nr.adjustments],
            )
            for nr in quote.nightly_rates
        ],
        adjustments=[_adjustment(a) for a in quote.adjustments],
        subtotal=money(quote.subtotal),
        fees=[
            FeeResponse(name=f.name, type=f.type.value, amount=money(f.amount), calculated=money(f.calculated))
            for f in quote.fees
        ],
        taxes=money(quote.taxes),
        discount=discount,
        total_amount=money(quote.total_amount),
        calculated_at=quote.calculated_at,
        expires_at=quote.expires_at,
    )


@router.post("/recommend", response_model=RecommendationResponse)
async def recommend_price(data: RecommendRequest, beacon: BeaconOS = Depends(get_beacon)):
    """Advisory price for one night"""
    rec = await beacon.pricing.get_recommended_price(data.property_id, data.date)
    return RecommendationResponse(
        date=rec.date or data.date,
        recommended=money(rec.recommended),
        min=money(rec.min),
        max=money(rec.max),
        confidence=rec.confidence,
        factors=rec.factors,
    )
