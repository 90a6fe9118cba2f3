"""
Location API Models

Pydantic models for location state responses.
"""

from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field

from ...core import display
from ...core.location_authority import LocationState
from ...location import LocationSample, AuthorizationState, AccuracyAuthorization


class LocationSampleResponse(BaseModel):
    """A single location fix"""
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    horizontal_accuracy: Optional[float] = Field(None, description="Accuracy radius in meters, null if unknown")
    timestamp: datetime

    @classmethod
    def from_sample(cls, sample: LocationSample) -> 'LocationSampleResponse':
        return cls(
            latitude=sample.latitude,
            longitude=sample.longitude,
            horizontal_accuracy=(
                sample.horizontal_accuracy if sample.has_accuracy else None
            ),
            timestamp=sample.timestamp,
        )


class LocationDisplay(BaseModel):
    """Preformatted strings for rendering the location card"""
    latitude: str
    longitude: str
    accuracy_m: str
    time: str
    authorization_label: str
    authorization_tone: str
    accuracy_label: str


class LocationStateResponse(BaseModel):
    """Current location state"""
    authorization: AuthorizationState
    accuracy: AccuracyAuthorization
    has_fix: bool
    sample: Optional[LocationSampleResponse] = None
    last_error: Optional[str] = None
    display: LocationDisplay

    @classmethod
    def from_state(cls, state: LocationState) -> 'LocationStateResponse':
        sample = state.sample
        return cls(
            authorization=state.authorization,
            accuracy=state.accuracy,
            has_fix=state.has_fix,
            sample=LocationSampleResponse.from_sample(sample) if sample else None,
            last_error=state.last_error,
            display=LocationDisplay(
                latitude=display.format_latitude(sample),
                longitude=display.format_longitude(sample),
                accuracy_m=display.format_accuracy(sample),
                time=display.format_fix_time(sample),
                authorization_label=display.authorization_label(state.authorization),
                authorization_tone=display.authorization_tone(state.authorization),
                accuracy_label=display.accuracy_label(state.accuracy),
            ),
        )
