#!/usr/bin/env python3
"""
Location Authority Test Script

This script tests the location permission state machine and fix handling
using the mock location provider. No positioning hardware is needed.

Usage:
    python scripts/test_location.py         # Run all tests
    pytest scripts/test_location.py         # Run under pytest
"""

import sys
import os
import threading
from datetime import datetime, timezone

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lightlogger.core.errors import PermissionDenied, LocationUnavailable
from lightlogger.core.location_authority import LocationAuthority, LocationState
from lightlogger.location import (
    MockLocationProvider, AuthorizationState, AccuracyAuthorization,
    LocationSample, LocationUpdated, create_provider
)


def print_header(title: str):
    """Print a formatted header"""
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)


def print_result(name: str, success: bool, message: str = ""):
    """Print test result"""
    status = "[PASS]" if success else "[FAIL]"
    color = "\033[92m" if success else "\033[91m"
    reset = "\033[0m"
    print(f"  {color}{status}{reset} {name}")
    if message:
        print(f"         {message}")


def make_authority(**provider_kwargs):
    """Mock provider without a fix thread, authority with manual dispatch"""
    provider = MockLocationProvider(autoplay=False, **provider_kwargs)
    authority = LocationAuthority(provider, auto_dispatch=False)
    return provider, authority


def test_initial_state():
    _, authority = make_authority()
    state = authority.state
    assert state == LocationState()
    assert state.authorization == AuthorizationState.NOT_DETERMINED
    assert state.accuracy == AccuracyAuthorization.REDUCED
    assert authority.current_sample is None
    assert authority.last_error is None


def test_not_determined_to_denied():
    provider, authority = make_authority(grant=AuthorizationState.DENIED)
    authority.start()

    # The request is asynchronous: nothing changes until the event is applied
    assert provider.permission_requests == 1
    assert authority.authorization == AuthorizationState.NOT_DETERMINED
    assert authority.last_error is None

    authority.pump()
    assert authority.authorization == AuthorizationState.DENIED
    assert authority.last_error
    assert isinstance(authority.state.error, PermissionDenied)
    assert authority.current_sample is None
    assert not provider.is_updating


def test_restricted_sets_error():
    provider, authority = make_authority(grant=AuthorizationState.RESTRICTED)
    authority.start()
    authority.pump()
    assert authority.authorization == AuthorizationState.RESTRICTED
    assert isinstance(authority.state.error, PermissionDenied)
    assert not provider.is_updating


def test_denied_keeps_existing_sample():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    sample = provider.simulate_location(25.033, 121.565, 5.0)
    authority.pump()
    assert authority.current_sample == sample

    provider.simulate_authorization(AuthorizationState.DENIED)
    authority.pump()
    assert authority.authorization == AuthorizationState.DENIED
    assert authority.last_error
    assert authority.current_sample == sample


def test_not_determined_to_when_in_use():
    provider, authority = make_authority(grant=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    assert not provider.is_updating

    authority.pump()
    assert authority.authorization == AuthorizationState.AUTHORIZED_WHEN_IN_USE
    assert authority.accuracy == AccuracyAuthorization.FULL
    assert provider.is_updating
    assert provider.permission_requests == 1
    assert authority.last_error is None


def test_authorized_always_begins_delivery():
    provider, authority = make_authority(
        respond_to_requests=False,
        accuracy=AccuracyAuthorization.REDUCED,
    )
    authority.start()
    provider.simulate_authorization(AuthorizationState.AUTHORIZED_ALWAYS)
    authority.pump()
    assert authority.authorization == AuthorizationState.AUTHORIZED_ALWAYS
    assert authority.accuracy == AccuracyAuthorization.REDUCED
    assert provider.is_updating


def test_not_determined_event_is_noop():
    provider, authority = make_authority(respond_to_requests=False)
    authority.start()
    provider.simulate_authorization(AuthorizationState.NOT_DETERMINED)
    authority.pump()
    assert authority.authorization == AuthorizationState.NOT_DETERMINED
    assert authority.last_error is None
    assert not provider.is_updating


def test_start_is_idempotent():
    provider, authority = make_authority(respond_to_requests=False)
    authority.start()
    authority.start()
    authority.start()
    assert provider.permission_requests == 1
    assert authority.is_started


def test_already_authorized_starts_without_request():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    assert provider.permission_requests == 0
    assert provider.is_updating
    assert authority.authorization == AuthorizationState.AUTHORIZED_WHEN_IN_USE


def test_already_denied_starts_delivery():
    """A decided permission, even a refusal, goes straight to delivery"""
    provider, authority = make_authority(initial_authorization=AuthorizationState.DENIED)
    authority.start()
    assert provider.permission_requests == 0
    assert provider.start_calls == 1

    authority.pump()
    assert isinstance(authority.state.error, LocationUnavailable)


def test_location_last_write_wins():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    provider.simulate_location(25.0, 121.0, 50.0)
    latest = provider.simulate_location(25.1, 121.1, 500.0)
    authority.pump()
    # No accuracy-based rejection
    assert authority.current_sample == latest

    older = LocationSample(latitude=1.0, longitude=2.0, horizontal_accuracy=3.0)
    newer = LocationSample(latitude=4.0, longitude=5.0, horizontal_accuracy=6.0)
    authority.post(LocationUpdated((older, newer)))
    authority.pump()
    assert authority.current_sample == newer


def test_empty_location_batch_ignored():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    sample = provider.simulate_location(25.0, 121.0)
    authority.pump()

    authority.post(LocationUpdated(()))
    assert authority.pump() == 1
    assert authority.current_sample == sample


def test_provider_error_keeps_sample():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    sample = provider.simulate_location(25.0, 121.0, 5.0)
    provider.simulate_error("The operation couldn't be completed (kCLErrorLocationUnknown)")
    authority.pump()

    assert authority.last_error == "The operation couldn't be completed (kCLErrorLocationUnknown)"
    assert isinstance(authority.state.error, LocationUnavailable)
    assert authority.current_sample == sample
    assert provider.is_updating


def test_location_update_keeps_error():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    provider.simulate_error("Temporary failure")
    provider.simulate_location(25.0, 121.0)
    authority.pump()
    assert authority.current_sample is not None
    assert authority.last_error == "Temporary failure"


def test_authorization_and_accuracy_change_together():
    provider, authority = make_authority(respond_to_requests=False)
    seen = []
    authority.subscribe(lambda state: seen.append((state.authorization, state.accuracy)))

    authority.start()
    provider.simulate_authorization(
        AuthorizationState.AUTHORIZED_WHEN_IN_USE, AccuracyAuthorization.REDUCED
    )
    authority.pump()

    assert seen[-1] == (AuthorizationState.AUTHORIZED_WHEN_IN_USE, AccuracyAuthorization.REDUCED)
    assert (AuthorizationState.AUTHORIZED_WHEN_IN_USE, AccuracyAuthorization.FULL) not in seen


def test_late_subscriber_gets_current_state():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    sample = provider.simulate_location(25.0, 121.0)
    authority.pump()

    received = []
    unsubscribe = authority.subscribe(received.append)
    assert len(received) == 1
    assert received[0].sample == sample

    provider.simulate_location(26.0, 122.0)
    authority.pump()
    assert len(received) == 2

    unsubscribe()
    provider.simulate_location(27.0, 123.0)
    authority.pump()
    assert len(received) == 2


def test_failing_subscriber_does_not_break_delivery():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)

    def broken(state):
        raise RuntimeError("display crashed")

    authority.subscribe(broken)
    authority.start()
    sample = provider.simulate_location(25.0, 121.0)
    authority.pump()
    assert authority.current_sample == sample


def test_stop_quiesces_delivery():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    with authority:
        assert provider.is_updating
    assert not provider.is_updating
    assert not authority.is_started


def test_stop_discards_pending_authorization():
    """A permission answer still queued at stop() must not restart delivery"""
    provider, authority = make_authority()
    authority.start()
    assert provider.permission_requests == 1

    authority.stop()
    assert authority.pump() == 0
    assert not authority.is_started
    assert not provider.is_updating
    assert authority.authorization == AuthorizationState.NOT_DETERMINED


def test_stopped_authority_drops_events():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()
    authority.stop()

    for i in range(1000):
        provider.simulate_location(25.0 + i * 1e-5, 121.0)
    assert authority.pump() == 0
    assert authority.current_sample is None

    # Intake resumes on the next start
    authority.start()
    sample = provider.simulate_location(26.0, 122.0)
    assert authority.pump() == 1
    assert authority.current_sample == sample


def test_stopped_background_authority_does_not_queue():
    provider = MockLocationProvider(autoplay=False)
    authority = LocationAuthority(provider, auto_dispatch=True)
    authority.start()
    authority.stop()

    for i in range(1000):
        provider.simulate_location(25.0 + i * 1e-5, 121.0)
    assert authority._events.qsize() == 0
    assert not provider.is_updating


def test_subscriber_may_pump_and_stop():
    """pump() and stop() from a callback on the dispatcher thread return"""
    provider = MockLocationProvider(
        autoplay=False, initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE
    )
    authority = LocationAuthority(provider, auto_dispatch=True)
    done = threading.Event()
    errors = []

    def on_state(state):
        if state.sample is None:
            return
        try:
            authority.pump()
            authority.stop()
        except Exception as e:
            errors.append(e)
        finally:
            done.set()

    try:
        authority.start()
        authority.subscribe(on_state)
        provider.simulate_location(25.0, 121.0)
        assert done.wait(timeout=2.0), "subscriber blocked on the dispatcher thread"
        assert errors == []
        assert not authority.is_started
        assert not provider.is_updating
    finally:
        authority.stop()


def test_events_from_other_threads():
    provider, authority = make_authority(initial_authorization=AuthorizationState.AUTHORIZED_WHEN_IN_USE)
    authority.start()

    def deliver():
        for i in range(200):
            provider.simulate_location(25.0 + i * 1e-5, 121.0)

    thread = threading.Thread(target=deliver)
    thread.start()
    thread.join()

    assert authority.pump() == 200
    assert authority.current_sample.latitude == 25.0 + 199 * 1e-5


def test_background_dispatch():
    provider = MockLocationProvider(autoplay=False)
    authority = LocationAuthority(provider, auto_dispatch=True)
    try:
        authority.start()
        authority.pump()
        assert authority.authorization == AuthorizationState.AUTHORIZED_WHEN_IN_USE

        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        sample = provider.simulate_location(25.033, 121.565, 5.0, timestamp=ts)
        authority.pump()
        assert authority.current_sample == sample
    finally:
        authority.stop()


def test_mock_route_playback():
    provider = create_provider('mock', route='daan_park_walk', autoplay=False)
    first = provider.next_sample()
    assert abs(first.latitude - 25.0326) < 0.01
    assert first.horizontal_accuracy == 8.0
    assert first.timestamp.tzinfo is not None


def main():
    """Run all tests"""
    print("\n" + "=" * 60)
    print("  Light Logger - Location Authority Test Suite")
    print("=" * 60)

    tests = [
        ("Initial state", test_initial_state),
        ("NotDetermined -> Denied", test_not_determined_to_denied),
        ("Restricted sets error", test_restricted_sets_error),
        ("Denied keeps sample", test_denied_keeps_existing_sample),
        ("NotDetermined -> WhenInUse", test_not_determined_to_when_in_use),
        ("AuthorizedAlways begins delivery", test_authorized_always_begins_delivery),
        ("NotDetermined event no-op", test_not_determined_event_is_noop),
        ("Idempotent start", test_start_is_idempotent),
        ("Already authorized", test_already_authorized_starts_without_request),
        ("Already denied", test_already_denied_starts_delivery),
        ("Last write wins", test_location_last_write_wins),
        ("Empty batch ignored", test_empty_location_batch_ignored),
        ("Provider error keeps sample", test_provider_error_keeps_sample),
        ("Update keeps error", test_location_update_keeps_error),
        ("Atomic authorization change", test_authorization_and_accuracy_change_together),
        ("Late subscriber", test_late_subscriber_gets_current_state),
        ("Failing subscriber", test_failing_subscriber_does_not_break_delivery),
        ("Stop quiesces delivery", test_stop_quiesces_delivery),
        ("Stop discards pending authorization", test_stop_discards_pending_authorization),
        ("Stopped authority drops events", test_stopped_authority_drops_events),
        ("Stopped dispatcher queue stays empty", test_stopped_background_authority_does_not_queue),
        ("Subscriber may pump and stop", test_subscriber_may_pump_and_stop),
        ("Cross-thread events", test_events_from_other_threads),
        ("Background dispatch", test_background_dispatch),
        ("Mock route playback", test_mock_route_playback),
    ]

    print_header("Location Authority")
    results = []
    for name, test in tests:
        try:
            test()
            results.append(True)
            print_result(name, True)
        except AssertionError as e:
            results.append(False)
            print_result(name, False, str(e))

    passed = sum(results)
    print(f"\n  Passed: {passed}/{len(results)}\n")
    return 0 if passed == len(results) else 1


if __name__ == '__main__':
    sys.exit(main())
