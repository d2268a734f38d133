# tracking/model.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# m/s -> mph, display only
MPS_TO_MPH = 2.23694


@dataclass(frozen=True)
class PositionSample:
    latitude: float              # degrees
    longitude: float             # degrees
    horizontal_accuracy: float   # meters, radius of uncertainty
    speed: float                 # m/s, negative = unknown
    timestamp: float             # seconds


class AuthorizationStatus(Enum):
    NOT_DETERMINED = "not_determined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED_WHEN_IN_USE = "when_in_use"
    AUTHORIZED_ALWAYS = "always"

    @property
    def description(self) -> str:
        return _AUTHORIZATION_DESCRIPTIONS[self]

    @property
    def is_authorized(self) -> bool:
        return self in (
            AuthorizationStatus.AUTHORIZED_WHEN_IN_USE,
            AuthorizationStatus.AUTHORIZED_ALWAYS,
        )


_AUTHORIZATION_DESCRIPTIONS = {
    AuthorizationStatus.NOT_DETERMINED: "Not Determined",
    AuthorizationStatus.RESTRICTED: "Restricted",
    AuthorizationStatus.DENIED: "Denied",
    AuthorizationStatus.AUTHORIZED_WHEN_IN_USE: "When In Use",
    AuthorizationStatus.AUTHORIZED_ALWAYS: "Always",
}


def describe_authorization(status: Optional[AuthorizationStatus]) -> str:
    """Display text for an authorization status, "N/A" before one is known."""
    if status is None:
        return "N/A"
    return status.description


class LocationErrorCode(Enum):
    DENIED = "denied"
    LOCATION_UNKNOWN = "location_unknown"
    NETWORK = "network"
    OTHER = "other"

    def message(self, detail: str = "") -> str:
        """User-facing message for this failure."""
        if self is LocationErrorCode.DENIED:
            return "Location access denied by user."
        if self is LocationErrorCode.LOCATION_UNKNOWN:
            return "Location data currently unavailable."
        if self is LocationErrorCode.NETWORK:
            return "Network error with location services."
        return f"Location manager failed with error: {detail}"


@dataclass(frozen=True)
class Announcement:
    text: str                # full sentence handed to speech
    pace_text: str           # e.g. "7:29 min/mile"
    distance_miles: float
    total_distance: float    # meters


@dataclass(frozen=True)
class RunSnapshot:
    """Read-only view of the run handed to the presentation layer."""
    last_location: Optional[PositionSample]
    current_speed: float         # m/s
    total_distance: float        # meters
    current_pace_text: str
    is_tracking: bool
    meters_per_mile: float
    authorization_status: Optional[AuthorizationStatus] = None

    @property
    def total_distance_miles(self) -> float:
        return self.total_distance / self.meters_per_mile

    @property
    def speed_mph(self) -> float:
        return self.current_speed * MPS_TO_MPH
