"""
Event ingestion - lets the PMS and channel webhooks publish domain events
"""
from fastapi import APIRouter, Depends, HTTPException, status

from beacon_os.api.deps import get_beacon
from beacon_os.api.schemas import EventRequest, PublishResponse
from beacon_os.orchestrator import BeaconOS

router = APIRouter(prefix="/beacon/events", tags=["events"])


@router.post("", response_model=PublishResponse, status_code=status.HTTP_202_ACCEPTED)
async def publish_event(data: EventRequest, beacon: BeaconOS = Depends(get_beacon)):
    """Publish a domain event"""
    try:
        result = await beacon.emit(data.type, data.payload, source=data.source)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return PublishResponse(
        event_type=result.event_type,
        subscriber_count=result.subscriber_count,
        success_count=result.success_count,
        failure_count=result.failure_count,
    )
