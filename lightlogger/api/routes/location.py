"""
Location API Routes

Endpoints for starting/stopping location delivery and reading the
current location state.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from ..models import LocationStateResponse
from ..dependencies import get_authority
from ...core.location_authority import LocationAuthority

router = APIRouter()


@router.get("", response_model=LocationStateResponse)
async def get_location_state(authority: LocationAuthority = Depends(get_authority)):
    """
    Get the current fix, permission state and latest error.
    """
    return LocationStateResponse.from_state(authority.state)


@router.post("/start", response_model=LocationStateResponse)
def start_location(authority: LocationAuthority = Depends(get_authority)):
    """
    Start obtaining location.

    Requests permission if it has not been decided yet. Returns immediately;
    the permission outcome and the first fix show up in later state reads.
    """
    authority.start()
    logger.info("Location start requested via API")
    return LocationStateResponse.from_state(authority.state)


@router.post("/stop", response_model=LocationStateResponse)
def stop_location(authority: LocationAuthority = Depends(get_authority)):
    """
    Stop location delivery.
    """
    authority.stop()
    return LocationStateResponse.from_state(authority.state)
