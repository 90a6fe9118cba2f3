"""
Location Authority

This module turns the push-based events of a location provider into one
authoritative, observable location state: the current fix, the permission
and accuracy authorization, and the latest error.

Providers may deliver events from any thread. Events are queued through
post() and applied by a single consumer, either the background dispatcher
or an explicit pump() call, so observers always see whole state snapshots.
"""

from dataclasses import dataclass, replace
from typing import Optional, Callable
import queue
import threading

from loguru import logger

from .config import settings
from .errors import LightLoggerError, PermissionDenied, LocationUnavailable
from .observable import Observable
from ..location.base import (
    LocationProvider, LocationSample, AuthorizationState, AccuracyAuthorization,
    AuthorizationChanged, LocationUpdated, ProviderError, LocationEvent
)


PERMISSION_DENIED_MESSAGE = (
    "Location permission denied: open Settings > Privacy & Security > "
    "Location Services, allow access for this app and enable Precise Location."
)


@dataclass(frozen=True)
class LocationState:
    """Snapshot of everything the location authority knows"""
    sample: Optional[LocationSample] = None
    authorization: AuthorizationState = AuthorizationState.NOT_DETERMINED
    accuracy: AccuracyAuthorization = AccuracyAuthorization.REDUCED
    error: Optional[LightLoggerError] = None

    @property
    def has_fix(self) -> bool:
        return self.sample is not None

    @property
    def last_error(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


class EventDispatcher(threading.Thread):
    """Worker thread applying queued provider events"""

    def __init__(self, authority: 'LocationAuthority'):
        super().__init__(daemon=True, name="location-dispatcher")
        self._authority = authority
        self._stop_event = threading.Event()

    def run(self):
        """Main dispatch loop"""
        events = self._authority._events
        while not self._stop_event.is_set():
            try:
                event = events.get(timeout=0.1)
            except queue.Empty:
                continue

            try:
                self._authority._apply(event)
            except Exception as e:
                logger.error(f"Location event dispatch error: {e}")
            finally:
                events.task_done()

    def stop(self):
        """Stop the dispatcher"""
        self._stop_event.set()


class LocationAuthority:
    """
    Bridges a LocationProvider into an observable LocationState.

    Authorization state machine:
        NOT_DETERMINED -> AUTHORIZED_ALWAYS | AUTHORIZED_WHEN_IN_USE | DENIED | RESTRICTED

    Refusal is terminal as far as this class is concerned; only a later
    AuthorizationChanged from the provider moves the state again.
    """

    def __init__(self, provider: LocationProvider, auto_dispatch: Optional[bool] = None):
        """
        Initialize the authority and register as the provider's event sink.

        Args:
            provider: Location provider to observe
            auto_dispatch: Apply events on a background thread
                (uses settings if not specified). When False, call pump().
        """
        self._provider = provider
        self._auto_dispatch = (
            settings.location.auto_dispatch if auto_dispatch is None else auto_dispatch
        )

        self._events: queue.Queue = queue.Queue()
        self._state: Observable[LocationState] = Observable(LocationState(), name="Location state")
        self._write_lock = threading.RLock()
        # Guards intake only; never held while calling out
        self._intake_lock = threading.Lock()
        self._dispatcher: Optional[EventDispatcher] = None
        self._permission_requested = False
        self._started = False

        provider.set_event_sink(self.post)
        logger.info(f"Location authority initialized ({'auto' if self._auto_dispatch else 'manual'} dispatch)")

    # Observable state

    @property
    def state(self) -> LocationState:
        return self._state.value

    @property
    def current_sample(self) -> Optional[LocationSample]:
        return self._state.value.sample

    @property
    def authorization(self) -> AuthorizationState:
        return self._state.value.authorization

    @property
    def accuracy(self) -> AccuracyAuthorization:
        return self._state.value.accuracy

    @property
    def last_error(self) -> Optional[str]:
        return self._state.value.last_error

    @property
    def is_started(self) -> bool:
        return self._started

    def subscribe(self, callback: Callable[[LocationState], None]) -> Callable[[], None]:
        """
        Observe state changes.

        The callback receives the current state immediately, then every new
        state. Returns a function that removes the subscription.
        """
        return self._state.subscribe(callback)

    # Lifecycle

    def start(self) -> None:
        """
        Begin obtaining location. Idempotent and non-blocking.

        Requests permission when it has not been decided yet, otherwise
        begins continuous delivery right away.
        """
        self._start_dispatcher()

        with self._write_lock:
            with self._intake_lock:
                self._started = True

            authorization = self._provider.authorization_status
            accuracy = self._provider.accuracy_authorization
            self._set(authorization=authorization, accuracy=accuracy)

            if authorization == AuthorizationState.NOT_DETERMINED:
                if not self._permission_requested:
                    self._permission_requested = True
                    logger.info("Requesting location permission")
                    self._provider.request_when_in_use_authorization()
            else:
                self._begin_updates()

    def stop(self) -> None:
        """
        Stop location delivery and the dispatcher thread.

        Events still queued are discarded and later provider events are
        dropped until the next start(). Safe to call from a subscriber.
        """
        with self._write_lock:
            with self._intake_lock:
                self._started = False
                dropped = self._discard_queued()

        self._provider.stop_updating_location()

        dispatcher = self._dispatcher
        if dispatcher is not None:
            dispatcher.stop()
            if dispatcher.is_alive() and not self._on_dispatcher_thread():
                dispatcher.join(timeout=2.0)
            self._dispatcher = None

        if dropped:
            logger.debug(f"Discarded {dropped} queued location events")
        logger.info("Location authority stopped")

    # Event delivery

    def post(self, event: LocationEvent) -> None:
        """Queue a provider event. Safe to call from any thread."""
        with self._intake_lock:
            if not self._started:
                logger.debug(f"Dropping {type(event).__name__}: location authority is stopped")
                return
            self._events.put(event)

    def pump(self) -> int:
        """
        Apply all queued events on the calling thread.

        When the background dispatcher is running this only waits until it
        has drained the queue. Called from a subscriber on the dispatcher
        thread it returns at once; the dispatcher applies the rest in order.

        Returns:
            Number of events applied by this call
        """
        if self._on_dispatcher_thread():
            return 0
        if self._dispatcher is not None and self._dispatcher.is_alive():
            self._events.join()
            return 0

        applied = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return applied
            try:
                self._apply(event)
            finally:
                self._events.task_done()
            applied += 1

    # Internals

    def _start_dispatcher(self) -> None:
        if not self._auto_dispatch:
            return
        if self._dispatcher is not None and self._dispatcher.is_alive():
            return
        self._dispatcher = EventDispatcher(self)
        self._dispatcher.start()

    def _on_dispatcher_thread(self) -> bool:
        return self._dispatcher is not None and threading.current_thread() is self._dispatcher

    def _discard_queued(self) -> int:
        discarded = 0
        while True:
            try:
                self._events.get_nowait()
            except queue.Empty:
                return discarded
            self._events.task_done()
            discarded += 1

    def _apply(self, event: LocationEvent) -> None:
        """Apply one provider event to the state"""
        with self._write_lock:
            if not self._started:
                return
            if isinstance(event, AuthorizationChanged):
                self._on_authorization_changed(event)
            elif isinstance(event, LocationUpdated):
                sample = event.latest
                if sample is None:
                    return
                self._set(sample=sample)
                logger.debug(
                    f"Location updated: {sample.latitude:.6f}, {sample.longitude:.6f} "
                    f"(±{sample.horizontal_accuracy:.1f} m)"
                )
            elif isinstance(event, ProviderError):
                self._set(error=LocationUnavailable(event.message))
                logger.warning(f"Location provider error: {event.message}")
            else:
                logger.warning(f"Ignoring unknown location event: {event!r}")

    def _on_authorization_changed(self, event: AuthorizationChanged) -> None:
        authorization = event.authorization
        logger.info(
            f"Location authorization: {authorization.value} "
            f"(accuracy: {event.accuracy.value})"
        )

        if authorization != AuthorizationState.NOT_DETERMINED:
            self._permission_requested = False

        if authorization.is_authorized:
            self._set(authorization=authorization, accuracy=event.accuracy)
            self._begin_updates()
        elif authorization.is_refused:
            self._set(
                authorization=authorization,
                accuracy=event.accuracy,
                error=PermissionDenied(PERMISSION_DENIED_MESSAGE)
            )
            logger.warning("Location permission refused")
        else:
            self._set(authorization=authorization, accuracy=event.accuracy)

    def _begin_updates(self) -> None:
        if not self._started:
            return
        self._provider.start_updating_location()

    def _set(self, **changes) -> None:
        """Replace the state snapshot and notify observers"""
        with self._write_lock:
            self._state.publish(replace(self._state.value, **changes))

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
