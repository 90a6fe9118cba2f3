"""
Mock Location Provider

This module provides a simulated location provider for testing and
development without a real positioning device. It answers permission
requests with a configurable outcome and walks a route of waypoints.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Tuple
import random
import threading

from loguru import logger

from .base import (
    LocationProvider, LocationSample, AuthorizationState, AccuracyAuthorization,
    AuthorizationChanged, LocationUpdated, ProviderError
)


@dataclass
class MockRoute:
    """A named sequence of waypoints the mock provider cycles through"""
    name: str
    waypoints: List[Tuple[float, float]] = field(default_factory=list)
    accuracy_m: float = 5.0
    jitter_deg: float = 0.00001


# Predefined routes
ROUTES = {
    'taipei_101': MockRoute(
        name="Taipei 101 (static)",
        waypoints=[(25.0339, 121.5645)],
        accuracy_m=5.0,
    ),
    'daan_park_walk': MockRoute(
        name="Daan Forest Park loop",
        waypoints=[
            (25.0326, 121.5345),
            (25.0327, 121.5370),
            (25.0310, 121.5378),
            (25.0296, 121.5362),
            (25.0301, 121.5339),
        ],
        accuracy_m=8.0,
    ),
    'urban_canyon': MockRoute(
        name="Urban canyon (poor accuracy)",
        waypoints=[(25.0478, 121.5170), (25.0481, 121.5176)],
        accuracy_m=65.0,
        jitter_deg=0.0002,
    ),
}


class MockLocationProvider(LocationProvider):
    """
    Simulated location provider.

    Permission requests are answered with `grant` unless
    `respond_to_requests` is False, in which case the request stays pending
    until simulate_authorization() is called. When `autoplay` is True a
    background thread emits one fix per `interval` seconds while updating.
    """

    def __init__(
        self,
        route: str = 'taipei_101',
        grant: AuthorizationState = AuthorizationState.AUTHORIZED_WHEN_IN_USE,
        accuracy: AccuracyAuthorization = AccuracyAuthorization.FULL,
        initial_authorization: AuthorizationState = AuthorizationState.NOT_DETERMINED,
        interval: float = 1.0,
        autoplay: bool = True,
        respond_to_requests: bool = True,
    ):
        super().__init__()
        if route not in ROUTES:
            raise ValueError(f"Unknown mock route: {route}. Available: {', '.join(ROUTES)}")

        self.route = ROUTES[route]
        self.grant = grant
        self.interval = interval
        self.autoplay = autoplay
        self.respond_to_requests = respond_to_requests

        self._authorization = initial_authorization
        self._accuracy = accuracy
        self._is_updating = False
        self._waypoint_index = 0
        self._update_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

        self.permission_requests = 0
        self.start_calls = 0

        logger.info(f"Mock location provider initialized: {self.route.name}")

    @property
    def authorization_status(self) -> AuthorizationState:
        return self._authorization

    @property
    def accuracy_authorization(self) -> AccuracyAuthorization:
        return self._accuracy

    @property
    def is_updating(self) -> bool:
        return self._is_updating

    def request_when_in_use_authorization(self) -> None:
        self.permission_requests += 1
        logger.debug(f"Mock permission request #{self.permission_requests}")
        if self.respond_to_requests:
            self.simulate_authorization(self.grant)

    def start_updating_location(self) -> None:
        self.start_calls += 1
        with self._lock:
            if self._is_updating:
                return
            self._is_updating = True

        if self._authorization.is_refused:
            self.emit(ProviderError("Location access is not permitted"))

        if self.autoplay and self.interval > 0:
            self._stop_event.clear()
            self._update_thread = threading.Thread(
                target=self._update_loop,
                daemon=True
            )
            self._update_thread.start()

        logger.info("Mock location updates started")

    def stop_updating_location(self) -> None:
        with self._lock:
            if not self._is_updating:
                return
            self._is_updating = False

        self._stop_event.set()
        if self._update_thread and self._update_thread.is_alive():
            self._update_thread.join(timeout=2.0)
        self._update_thread = None

        logger.info("Mock location updates stopped")

    # Event simulation

    def simulate_authorization(
        self,
        authorization: AuthorizationState,
        accuracy: Optional[AccuracyAuthorization] = None
    ) -> None:
        """Change the platform permission and report it"""
        self._authorization = authorization
        if accuracy is not None:
            self._accuracy = accuracy
        self.emit(AuthorizationChanged(self._authorization, self._accuracy))

    def simulate_location(
        self,
        latitude: float,
        longitude: float,
        horizontal_accuracy: Optional[float] = None,
        timestamp: Optional[datetime] = None
    ) -> LocationSample:
        """Report a single fix"""
        sample = LocationSample(
            latitude=latitude,
            longitude=longitude,
            horizontal_accuracy=(
                horizontal_accuracy if horizontal_accuracy is not None
                else self.route.accuracy_m
            ),
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        self.emit(LocationUpdated((sample,)))
        return sample

    def simulate_error(self, message: str) -> None:
        """Report a provider failure"""
        self.emit(ProviderError(message))

    def next_sample(self) -> LocationSample:
        """Produce the next fix along the route"""
        waypoints = self.route.waypoints
        lat, lon = waypoints[self._waypoint_index % len(waypoints)]
        self._waypoint_index += 1

        jitter = self.route.jitter_deg
        return LocationSample(
            latitude=lat + random.gauss(0, jitter),
            longitude=lon + random.gauss(0, jitter),
            horizontal_accuracy=self.route.accuracy_m,
            timestamp=datetime.now(timezone.utc),
        )

    def _update_loop(self) -> None:
        """Background thread emitting fixes"""
        while not self._stop_event.is_set():
            if self._authorization.is_authorized:
                self.emit(LocationUpdated((self.next_sample(),)))
            self._stop_event.wait(self.interval)
