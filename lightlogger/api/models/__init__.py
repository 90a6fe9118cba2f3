"""
API Models Module

Pydantic models for API request/response schemas.
"""

# Location models
from .location import (
    LocationSampleResponse,
    LocationDisplay,
    LocationStateResponse,
)

# Record models
from .record import (
    RecordCreate,
    RecordResponse,
    RecordListResponse,
)

__all__ = [
    # Location
    'LocationSampleResponse', 'LocationDisplay', 'LocationStateResponse',

    # Record
    'RecordCreate', 'RecordResponse', 'RecordListResponse',
]
