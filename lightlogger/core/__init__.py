"""
Core Module

This module provides core business logic and configuration for the
light logger: the location state machine, error types and exporters.
"""

from .config import settings, get_settings, Settings
from .errors import (
    LightLoggerError,
    PermissionDenied,
    LocationUnavailable,
    InvalidInput,
    EncodingError,
)
from .observable import Observable
from .location_authority import LocationAuthority, LocationState, PERMISSION_DENIED_MESSAGE
from .exporter import (
    ExportType,
    ExportFile,
    CSV_HEADER,
    format_number,
    build_csv,
    build_geojson,
    build_export,
)
from .logging_setup import configure_logging

__all__ = [
    # Config
    'settings',
    'get_settings',
    'Settings',
    # Errors
    'LightLoggerError',
    'PermissionDenied',
    'LocationUnavailable',
    'InvalidInput',
    'EncodingError',
    # Location
    'Observable',
    'LocationAuthority',
    'LocationState',
    'PERMISSION_DENIED_MESSAGE',
    # Export
    'ExportType',
    'ExportFile',
    'CSV_HEADER',
    'format_number',
    'build_csv',
    'build_geojson',
    'build_export',
    # Logging
    'configure_logging',
]
