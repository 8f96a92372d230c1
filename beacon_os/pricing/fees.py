"""
Fee, tax and promo-code math
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
import logging

from beacon_os.pricing.types import (
    Discount,
    DiscountType,
    Fee,
    FeeType,
    Number,
    ZERO,
    round_currency,
    to_decimal,
)

logger = logging.getLogger(__name__)


def default_fees() -> List[Fee]:
    """Default fee schedule (overridable per engine)"""
    return [
        Fee(name="Cleaning Fee", type=FeeType.FLAT, amount=Decimal("250")),
        Fee(name="Service Fee", type=FeeType.PERCENTAGE, amount=Decimal("0.08")),
        Fee(name="Damage Protection", type=FeeType.FLAT, amount=Decimal("59")),
    ]


def calculate_fees(schedule: Sequence[Fee], subtotal: Decimal, nights: int, guests: int) -> List[Fee]:
    """
    Calculate each fee.

    Args:
        schedule: Fee definitions
        subtotal: Sum of nightly rates
        nights: Nights in the stay
        guests: Party size for per-person fees

    Returns:
        New Fee objects with `calculated` filled in
    """
    result = []
    for fee in schedule:
        if fee.type == FeeType.FLAT:
            calculated = fee.amount
        elif fee.type == FeeType.PERCENTAGE:
            calculated = round_currency(subtotal * fee.amount)
        elif fee.type == FeeType.PER_NIGHT:
            calculated = fee.amount * nights
        elif fee.type == FeeType.PER_PERSON:
            calculated = fee.amount * guests
        else:
            raise ValueError(f"Unknown fee type: {fee.type}")
        result.append(replace(fee, calculated=round_currency(calculated)))
    return result


def calculate_taxes(taxable_amount: Decimal, tax_rate: Number) -> Decimal:
    """Tax on subtotal + fees, rounded to cents"""
    return round_currency(taxable_amount * to_decimal(tax_rate))


@dataclass(frozen=True)
class PromoCode:
    """Promo code definition"""
    code: str
    type: DiscountType
    amount: Decimal  # fraction for percentage, currency for fixed


class IPromoCodeSource(ABC):
    """Promo code lookup"""

    @abstractmethod
    def lookup(self, code: str) -> Optional[PromoCode]:
        """Definition for a normalized (upper-case) code, or None"""


class StaticPromoCodes(IPromoCodeSource):
    """Fixed promo table"""

    def __init__(self, codes: Optional[Sequence[PromoCode]] = None):
        if codes is None:
            codes = [
                PromoCode("WELCOME10", DiscountType.PERCENTAGE, Decimal("0.10")),
                PromoCode("SAVE50", DiscountType.FIXED, Decimal("50")),
                PromoCode("OBX2024", DiscountType.PERCENTAGE, Decimal("0.15")),
            ]
        self._codes: Dict[str, PromoCode] = {c.code.upper(): c for c in codes}

    def lookup(self, code: str) -> Optional[PromoCode]:
        return self._codes.get(code)


def apply_promo_code(source: IPromoCodeSource, code: str, subtotal: Decimal) -> Optional[Discount]:
    """
    Resolve a promo code against the subtotal.

    Unknown codes and lookup failures give None; an invalid promo never
    blocks a booking.
    """
    normalized = code.strip().upper()
    if not normalized:
        return None

    try:
        promo = source.lookup(normalized)
    except Exception as e:
        logger.warning(f"Promo code lookup failed for {normalized}: {e}")
        return None

    if promo is None:
        logger.info(f"Ignoring unknown promo code {normalized}")
        return None

    if promo.type == DiscountType.PERCENTAGE:
        savings = round_currency(subtotal * promo.amount)
    else:
        savings = round_currency(promo.amount)

    return Discount(
        code=normalized,
        type=promo.type,
        amount=promo.amount,
        savings=max(savings, ZERO),
    )
