"""
Health route
"""
from fastapi import APIRouter, Depends

from beacon_os.api.deps import get_beacon
from beacon_os.api.schemas import HealthResponse
from beacon_os.orchestrator import BeaconOS

router = APIRouter(prefix="/beacon", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(beacon: BeaconOS = Depends(get_beacon)):
    return await beacon.get_health()
