"""
Record Store

This module provides the in-memory, append-only log of brightness
readings. Each record copies the location fix it was taken at, so it
stays valid however the live location changes afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple, Callable, Iterator, Dict, Any
import math
import uuid

from loguru import logger

from ..core.errors import InvalidInput
from ..core.observable import Observable
from ..location.base import LocationSample


def iso_timestamp(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with millisecond precision.

    Naive datetimes are treated as UTC.

    Example:
        2024-01-01T00:00:00.000Z
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_brightness(text: Optional[str]) -> float:
    """
    Parse a user-entered brightness value.

    Args:
        text: Raw input, surrounding whitespace ignored

    Returns:
        Brightness as float

    Raises:
        InvalidInput: If the text is empty, not a number, or not finite
    """
    if text is None or not text.strip():
        raise InvalidInput("Brightness is required")

    try:
        value = float(text.strip())
    except ValueError:
        raise InvalidInput(f"Brightness is not a number: {text!r}") from None

    if not math.isfinite(value):
        raise InvalidInput(f"Brightness must be a finite number: {text!r}")
    return value


@dataclass(frozen=True)
class LightRecord:
    """A brightness reading tagged with the fix it was taken at"""
    index: int
    latitude: float
    longitude: float
    horizontal_accuracy: float
    timestamp: str              # ISO-8601 of the fix time, not the append time
    brightness: float
    id: uuid.UUID = field(default_factory=uuid.uuid4, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (without the process-local id)"""
        return {
            'index': self.index,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'horizontal_accuracy': self.horizontal_accuracy,
            'timestamp': self.timestamp,
            'brightness': self.brightness,
        }


class RecordStore:
    """
    Ordered, append-only collection of LightRecords.

    The k-th record added since construction or the last clear() has
    index k. Intended for a single writer; callers sharing a store across
    threads must serialize add() and clear() themselves.
    """

    def __init__(self):
        self._records: Observable[Tuple[LightRecord, ...]] = Observable((), name="Record store")

    @property
    def records(self) -> Tuple[LightRecord, ...]:
        return self._records.value

    @property
    def count(self) -> int:
        return len(self._records.value)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[LightRecord]:
        return iter(self.snapshot())

    def snapshot(self) -> Tuple[LightRecord, ...]:
        """Immutable copy of the current records, for exports"""
        return self._records.value

    def subscribe(self, callback: Callable[[Tuple[LightRecord, ...]], None]) -> Callable[[], None]:
        """
        Observe the record list.

        The callback receives the current records immediately, then the
        full list after every change. Returns an unsubscribe function.
        """
        return self._records.subscribe(callback)

    def add(self, brightness: float, sample: Optional[LocationSample]) -> LightRecord:
        """
        Append a reading taken at the given fix.

        Args:
            brightness: Brightness value, stored as given
            sample: Location fix the reading belongs to

        Returns:
            The new record

        Raises:
            InvalidInput: If there is no location fix
        """
        if sample is None:
            raise InvalidInput("A location fix is required to record brightness")

        current = self._records.value
        record = LightRecord(
            index=len(current) + 1,
            latitude=sample.latitude,
            longitude=sample.longitude,
            horizontal_accuracy=sample.horizontal_accuracy,
            timestamp=iso_timestamp(sample.timestamp),
            brightness=brightness,
        )
        self._records.publish(current + (record,))

        logger.debug(
            f"Record {record.index} added: {brightness} at "
            f"{record.latitude:.6f}, {record.longitude:.6f}"
        )
        return record

    def clear(self) -> None:
        """Remove all records; the next add() starts again at index 1"""
        removed = self.count
        self._records.publish(())
        logger.info(f"Record store cleared ({removed} records removed)")
