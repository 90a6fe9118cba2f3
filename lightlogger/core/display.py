"""
Display Helpers

Formatting of location state for whatever renders it: status labels,
coordinate strings and the enable/disable predicates for user actions.
"""

from typing import Optional

from ..location.base import LocationSample, AuthorizationState, AccuracyAuthorization
from ..storage.record_store import parse_brightness
from .errors import InvalidInput


PLACEHOLDER = "—"

AUTHORIZATION_LABELS = {
    AuthorizationState.AUTHORIZED_ALWAYS: "Always",
    AuthorizationState.AUTHORIZED_WHEN_IN_USE: "While Using",
    AuthorizationState.DENIED: "Denied",
    AuthorizationState.RESTRICTED: "Restricted",
    AuthorizationState.NOT_DETERMINED: "Not Determined",
}

ACCURACY_LABELS = {
    AccuracyAuthorization.FULL: "Precise",
    AccuracyAuthorization.REDUCED: "Approximate",
}


def authorization_label(state: AuthorizationState) -> str:
    return AUTHORIZATION_LABELS.get(state, "Unknown")


def authorization_tone(state: AuthorizationState) -> str:
    """Status color hint: ok, warning or neutral"""
    if state.is_authorized:
        return "ok"
    if state.is_refused:
        return "warning"
    return "neutral"


def accuracy_label(accuracy: AccuracyAuthorization) -> str:
    return ACCURACY_LABELS.get(accuracy, "Unknown")


def format_latitude(sample: Optional[LocationSample]) -> str:
    if sample is None:
        return PLACEHOLDER
    return f"{sample.latitude:.6f}"


def format_longitude(sample: Optional[LocationSample]) -> str:
    if sample is None:
        return PLACEHOLDER
    return f"{sample.longitude:.6f}"


def format_accuracy(sample: Optional[LocationSample]) -> str:
    """Horizontal accuracy in meters with 2 decimals"""
    if sample is None or not sample.has_accuracy:
        return PLACEHOLDER
    return f"{sample.horizontal_accuracy:.2f}"


def format_fix_time(sample: Optional[LocationSample]) -> str:
    """Fix time in local time, e.g. 2024-01-01 08:00:00"""
    if sample is None:
        return PLACEHOLDER
    return sample.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def can_save(sample: Optional[LocationSample], brightness_text: Optional[str]) -> bool:
    """Whether a reading can be recorded: a fix exists and the input parses"""
    if sample is None:
        return False
    try:
        parse_brightness(brightness_text)
    except InvalidInput:
        return False
    return True


def can_export(record_count: int) -> bool:
    """Export and clear only make sense with at least one record"""
    return record_count > 0
