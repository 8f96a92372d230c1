"""
HTTP request/response schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from beacon_os.models.events import EventType
from beacon_os.modules.messaging.types import RecommendationType


# ============== Pricing ==============

class AdjustmentResponse(BaseModel):
    type: str
    name: str
    applied: float
    percentage: Optional[float] = None


class NightlyRateResponse(BaseModel):
    date: date
    rate: float
    base_rate: float
    available: bool = True
    minimum_stay: Optional[int] = None
    adjustments: List[AdjustmentResponse] = []


class FeeResponse(BaseModel):
    name: str
    type: str
    amount: float
    calculated: float


class DiscountResponse(BaseModel):
    code: str
    type: str
    amount: float
    savings: float


class PricingQuoteResponse(BaseModel):
    property_id: str
    check_in: date
    check_out: date
    nights: int
    currency: str
    base_rate: float
    nightly_rates: List[NightlyRateResponse]
    adjustments: List[AdjustmentResponse]
    subtotal: float
    fees: List[FeeResponse]
    taxes: float
    discount: Optional[DiscountResponse] = None
    total_amount: float
    calculated_at: datetime
    expires_at: datetime


class RecommendRequest(BaseModel):
    property_id: str
    date: date


class RecommendationResponse(BaseModel):
    date: date
    recommended: float
    min: float
    max: float
    confidence: float
    factors: List[str] = []


# ============== Concierge ==============

class HistoryEntry(BaseModel):
    role: str = Field(pattern="^(user|assistant)$")
    content: str


class ConciergeRequestBody(BaseModel):
    message: str = Field(min_length=1)
    guest_id: Optional[str] = None
    property_id: Optional[str] = None
    reservation_id: Optional[str] = None
    conversation_history: List[HistoryEntry] = []


class ConciergeResponseBody(BaseModel):
    response: str
    confidence: int
    escalate: bool
    escalate_reason: Optional[str] = None
    suggested_actions: List[str] = []


class RecommendationItem(BaseModel):
    name: str
    type: RecommendationType
    description: str
    distance: Optional[str] = None
    rating: Optional[float] = None
    price_level: Optional[int] = None
    note: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ============== Events / health ==============

class EventRequest(BaseModel):
    type: EventType
    payload: Dict[str, Any] = {}
    source: str = "api"


class PublishResponse(BaseModel):
    event_type: EventType
    subscriber_count: int
    success_count: int
    failure_count: int


class HealthResponse(BaseModel):
    status: str
    modules: Dict[str, bool]
    uptime: float
    version: str


def money(value: Decimal) -> float:
    return float(value)
