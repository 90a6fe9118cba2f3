"""
API Dependencies

FastAPI dependency injection functions and the shared application
context holding the location provider, location authority and record store.
"""

from dataclasses import dataclass, field
import threading

from fastapi import Request
from loguru import logger

from ..core.config import settings
from ..core.location_authority import LocationAuthority
from ..location import LocationProvider, AuthorizationState, create_provider
from ..storage import RecordStore


@dataclass
class AppContext:
    """Objects shared by all requests"""
    provider: LocationProvider
    authority: LocationAuthority
    store: RecordStore = field(default_factory=RecordStore)
    # Handlers may run on several threadpool workers; the store has a single writer
    store_lock: threading.Lock = field(default_factory=threading.Lock)

    def shutdown(self) -> None:
        """Stop location delivery"""
        self.authority.stop()


def build_provider() -> LocationProvider:
    """Create the configured location provider"""
    cfg = settings.location
    kwargs = {}
    if cfg.provider.lower() == "mock":
        kwargs = {
            'route': cfg.mock_route,
            'grant': AuthorizationState(cfg.mock_grant),
            'interval': cfg.mock_interval,
        }
    return create_provider(cfg.provider, **kwargs)


def build_context() -> AppContext:
    """Create the application context from settings"""
    provider = build_provider()
    authority = LocationAuthority(provider)
    logger.info(f"Application context created with {type(provider).__name__}")
    return AppContext(provider=provider, authority=authority)


def get_context(request: Request) -> AppContext:
    """Application context dependency"""
    return request.app.state.context


def get_authority(request: Request) -> LocationAuthority:
    """Location authority dependency"""
    return get_context(request).authority


def get_store(request: Request) -> RecordStore:
    """Record store dependency"""
    return get_context(request).store
