"""
Request dependencies
"""
from fastapi import Request

from beacon_os.orchestrator import BeaconOS


def get_beacon(request: Request) -> BeaconOS:
    """The BeaconOS instance owned by the app"""
    return request.app.state.beacon
