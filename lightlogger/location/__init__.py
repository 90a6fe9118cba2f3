"""
Location Module

This module provides the abstraction layer between the app and the
platform's location services: the sample/permission data model, the
events providers push, and provider implementations.

Example usage:
    from lightlogger.location import create_provider

    provider = create_provider('mock', route='daan_park_walk')
    provider.set_event_sink(print)
    provider.request_when_in_use_authorization()
    provider.start_updating_location()
"""

from typing import Optional

from .base import (
    LocationProvider,
    ProviderType,
    LocationSample,
    AuthorizationState,
    AccuracyAuthorization,
    AuthorizationChanged,
    LocationUpdated,
    ProviderError,
    LocationEvent,
    EventSink,
)
from .mock import MockLocationProvider, MockRoute, ROUTES


def create_provider(provider_type: Optional[str] = None, **kwargs) -> LocationProvider:
    """
    Create a location provider.

    Args:
        provider_type: Provider name (uses settings if not specified)
        **kwargs: Provider-specific arguments

    Returns:
        LocationProvider instance

    Raises:
        ValueError: If the provider type is unknown
    """
    if provider_type is None:
        from ..core.config import settings
        provider_type = settings.location.provider

    try:
        kind = ProviderType(provider_type.lower())
    except ValueError:
        raise ValueError(f"Unknown location provider: {provider_type}") from None

    if kind == ProviderType.MOCK:
        return MockLocationProvider(**kwargs)

    raise ValueError(f"Unsupported location provider: {provider_type}")


__all__ = [
    'LocationProvider',
    'ProviderType',
    'LocationSample',
    'AuthorizationState',
    'AccuracyAuthorization',
    'AuthorizationChanged',
    'LocationUpdated',
    'ProviderError',
    'LocationEvent',
    'EventSink',
    'MockLocationProvider',
    'MockRoute',
    'ROUTES',
    'create_provider',
]
