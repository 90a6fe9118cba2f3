"""
Location Provider Base Classes

This module defines the location data model, the permission enums and
the events a provider pushes to its consumer, plus the abstract base
class every location provider implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Tuple, Union
import math

from loguru import logger


class AuthorizationState(Enum):
    """Location permission granted to the app"""
    NOT_DETERMINED = "not_determined"
    AUTHORIZED_ALWAYS = "authorized_always"
    AUTHORIZED_WHEN_IN_USE = "authorized_when_in_use"
    DENIED = "denied"
    RESTRICTED = "restricted"

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationState.AUTHORIZED_ALWAYS,
                        AuthorizationState.AUTHORIZED_WHEN_IN_USE)

    @property
    def is_refused(self) -> bool:
        return self in (AuthorizationState.DENIED, AuthorizationState.RESTRICTED)


class AccuracyAuthorization(Enum):
    """Precision granted on top of the permission itself"""
    FULL = "full"
    REDUCED = "reduced"


@dataclass(frozen=True)
class LocationSample:
    """A single resolved fix"""
    latitude: float
    longitude: float
    horizontal_accuracy: float = math.inf  # Meters, non-finite when unknown
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Treat naive timestamps as UTC"""
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, 'timestamp', self.timestamp.replace(tzinfo=timezone.utc))

    @property
    def has_accuracy(self) -> bool:
        return math.isfinite(self.horizontal_accuracy)


# Provider events

@dataclass(frozen=True)
class AuthorizationChanged:
    """Permission or accuracy authorization changed"""
    authorization: AuthorizationState
    accuracy: AccuracyAuthorization


@dataclass(frozen=True)
class LocationUpdated:
    """One or more new fixes, oldest first"""
    samples: Tuple[LocationSample, ...]

    @property
    def latest(self) -> Optional[LocationSample]:
        return self.samples[-1] if self.samples else None


@dataclass(frozen=True)
class ProviderError:
    """Provider failed to produce a fix"""
    message: str


LocationEvent = Union[AuthorizationChanged, LocationUpdated, ProviderError]
EventSink = Callable[[LocationEvent], None]


class LocationProvider(ABC):
    """
    Abstract base class for location providers.

    A provider is push-based: permission outcomes, fixes and failures are
    delivered to the registered event sink, possibly from a thread the
    consumer does not own. Requests made on the provider return immediately.
    """

    def __init__(self):
        self._sink: Optional[EventSink] = None

    def set_event_sink(self, sink: Optional[EventSink]) -> None:
        """Register the single consumer of this provider's events"""
        self._sink = sink

    def emit(self, event: LocationEvent) -> None:
        """Deliver an event to the registered sink"""
        sink = self._sink
        if sink is None:
            logger.debug(f"Dropping {type(event).__name__}: no event sink registered")
            return
        sink(event)

    @property
    @abstractmethod
    def authorization_status(self) -> AuthorizationState:
        """Current permission as known to the platform"""
        pass

    @property
    @abstractmethod
    def accuracy_authorization(self) -> AccuracyAuthorization:
        """Current accuracy authorization as known to the platform"""
        pass

    @property
    @abstractmethod
    def is_updating(self) -> bool:
        """Whether continuous delivery is active"""
        pass

    @abstractmethod
    def request_when_in_use_authorization(self) -> None:
        """
        Ask the user for permission.

        Returns immediately; the outcome arrives later as an
        AuthorizationChanged event.
        """
        pass

    @abstractmethod
    def start_updating_location(self) -> None:
        """Begin continuous delivery. Safe to call repeatedly."""
        pass

    @abstractmethod
    def stop_updating_location(self) -> None:
        """Stop continuous delivery"""
        pass


class ProviderType(Enum):
    """Available location provider implementations"""
    MOCK = "mock"
