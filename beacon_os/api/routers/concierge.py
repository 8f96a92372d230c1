"""
Concierge routes
"""
from typing import List

from fastapi import APIRouter, Depends

from beacon_os.api.deps import get_beacon
from beacon_os.api.schemas import ConciergeRequestBody, ConciergeResponseBody, RecommendationItem
from beacon_os.modules.messaging.types import ConciergeRequest, RecommendationType
from beacon_os.orchestrator import BeaconOS

router = APIRouter(prefix="/beacon/concierge", tags=["concierge"])


@router.post("", response_model=ConciergeResponseBody)
async def ask_concierge(data: ConciergeRequestBody, beacon: BeaconOS = Depends(get_beacon)):
    """Ask the concierge a question"""
    response = await beacon.messaging.process_with_concierge(ConciergeRequest(
        message=data.message,
        guest_id=data.guest_id,
        property_id=data.property_id,
        reservation_id=data.reservation_id,
        conversation_history=[entry.model_dump() for entry in data.conversation_history],
    ))
    return ConciergeResponseBody(
        response=response.response,
        confidence=response.confidence,
        escalate=response.escalate,
        escalate_reason=response.escalate_reason,
        suggested_actions=response.suggested_actions,
    )


@router.get("/recommendations", response_model=List[RecommendationItem])
async def list_recommendations(
    location: str = "Hatteras Island",
    type: RecommendationType = RecommendationType.RESTAURANT,
    beacon: BeaconOS = Depends(get_beacon),
):
    """Curated local recommendations"""
    picks = await beacon.messaging.get_local_recommendations(location, type)
    return [RecommendationItem.model_validate(p) for p in picks]
