"""
Record API Models

Pydantic models for brightness record requests and responses.
"""

from typing import Optional, List, Union
import math

from pydantic import BaseModel, Field

from ...storage import LightRecord


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


class RecordCreate(BaseModel):
    """Request to record a brightness reading at the current fix"""
    brightness: Union[float, str] = Field(..., description="Brightness in lux, as entered")


class RecordResponse(BaseModel):
    """A stored brightness record"""
    id: str = Field(..., description="Opaque identity for list diffing")
    index: int = Field(..., ge=1)
    latitude: Optional[float]
    longitude: Optional[float]
    horizontal_accuracy: Optional[float] = Field(None, description="Meters, null if unknown")
    timestamp: str = Field(..., description="ISO-8601 fix time")
    brightness: Optional[float]

    @classmethod
    def from_record(cls, record: LightRecord) -> 'RecordResponse':
        return cls(
            id=str(record.id),
            index=record.index,
            latitude=_finite_or_none(record.latitude),
            longitude=_finite_or_none(record.longitude),
            horizontal_accuracy=_finite_or_none(record.horizontal_accuracy),
            timestamp=record.timestamp,
            brightness=_finite_or_none(record.brightness),
        )


class RecordListResponse(BaseModel):
    """List of records"""
    records: List[RecordResponse]
    total: int
    can_export: bool
