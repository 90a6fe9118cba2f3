"""
Storage Module

In-memory storage for brightness readings. Nothing is persisted across
process restarts; exports are the only way data leaves the process.
"""

from .record_store import (
    LightRecord,
    RecordStore,
    iso_timestamp,
    parse_brightness,
)

__all__ = [
    'LightRecord',
    'RecordStore',
    'iso_timestamp',
    'parse_brightness',
]
