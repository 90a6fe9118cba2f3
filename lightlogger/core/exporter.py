"""
Exporters

This module encodes a snapshot of brightness records as CSV or GeoJSON.
Encoders are pure: they return a (filename, bytes) pair and leave saving
or sharing the bytes to the caller.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Sequence, NamedTuple, TYPE_CHECKING
import csv
import io
import json
import math

from loguru import logger

from .config import settings
from .errors import EncodingError

if TYPE_CHECKING:
    from ..storage.record_store import LightRecord


CSV_COLUMNS = ["index", "latitude", "longitude", "h_accuracy_m", "timestamp_iso", "brightness"]
CSV_HEADER = ",".join(CSV_COLUMNS)


class ExportType(str, Enum):
    """Export format types"""
    CSV = "csv"
    GEOJSON = "geojson"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return {
            ExportType.CSV: "text/csv",
            ExportType.GEOJSON: "application/geo+json",
        }[self]


class ExportFile(NamedTuple):
    """Encoded export ready to be saved or shared"""
    filename: str
    data: bytes


def format_number(value: float) -> str:
    """
    Format a CSV numeric field.

    Non-finite values become an empty field; magnitudes of at least 1 get
    6 fractional digits, smaller ones 8.
    """
    if not math.isfinite(value):
        return ""
    if abs(value) >= 1:
        return f"{value:.6f}"
    return f"{value:.8f}"


def export_filename(export_type: ExportType, now: Optional[datetime] = None) -> str:
    """Build `<prefix>_<YYYYmmdd_HHMMSS>.<ext>` from the local export time"""
    timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{settings.export.filename_prefix}_{timestamp}.{export_type.extension}"


def build_csv(records: Sequence['LightRecord'], now: Optional[datetime] = None) -> ExportFile:
    """
    Encode records as CSV.

    Args:
        records: Record snapshot, in store order
        now: Export time used for the filename (defaults to local now)

    Returns:
        ExportFile with UTF-8 CSV, lines joined by '\\n', no trailing newline
    """
    records = tuple(records)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for r in records:
        writer.writerow([
            str(r.index),
            format_number(r.latitude),
            format_number(r.longitude),
            format_number(r.horizontal_accuracy),
            r.timestamp,
            format_number(r.brightness),
        ])

    # No newline after the last row
    text = buffer.getvalue()[:-1]
    export = ExportFile(export_filename(ExportType.CSV, now), text.encode("utf-8"))
    logger.info(f"CSV export built: {export.filename} ({len(records)} records)")
    return export


def _require_finite(record: 'LightRecord', name: str, value: float) -> float:
    if not math.isfinite(value):
        raise EncodingError(
            f"Record {record.index} has non-finite {name} ({value}); "
            f"GeoJSON cannot represent NaN or Infinity"
        )
    return value


def record_to_feature(record: 'LightRecord') -> dict:
    """Convert a record to a GeoJSON Point feature"""
    longitude = _require_finite(record, "longitude", record.longitude)
    latitude = _require_finite(record, "latitude", record.latitude)
    return {
        "type": "Feature",
        "geometry": {
            "type": "Point",
            "coordinates": [longitude, latitude],  # GeoJSON: [lon, lat]
        },
        "properties": {
            "index": record.index,
            "brightness": _require_finite(record, "brightness", record.brightness),
            "timestamp": record.timestamp,
            "h_accuracy_m": _require_finite(record, "h_accuracy_m", record.horizontal_accuracy),
        },
    }


def build_geojson(records: Sequence['LightRecord'], now: Optional[datetime] = None) -> ExportFile:
    """
    Encode records as a GeoJSON FeatureCollection.

    Args:
        records: Record snapshot, in store order
        now: Export time used for the filename (defaults to local now)

    Returns:
        ExportFile with UTF-8 GeoJSON

    Raises:
        EncodingError: If any record holds a NaN or infinite number
    """
    records = tuple(records)
    collection = {
        "type": "FeatureCollection",
        "features": [record_to_feature(r) for r in records],
    }
    text = json.dumps(collection, indent=settings.export.geojson_indent, allow_nan=False)

    export = ExportFile(export_filename(ExportType.GEOJSON, now), text.encode("utf-8"))
    logger.info(f"GeoJSON export built: {export.filename} ({len(records)} records)")
    return export


def build_export(
    export_type: ExportType,
    records: Sequence['LightRecord'],
    now: Optional[datetime] = None
) -> ExportFile:
    """Build an export of the given type"""
    if export_type == ExportType.CSV:
        return build_csv(records, now)
    elif export_type == ExportType.GEOJSON:
        return build_geojson(records, now)
    raise ValueError(f"Unsupported export type: {export_type}")
