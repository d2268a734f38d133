"""
Tracking configuration.

The numeric constants are fixed in normal use; they are exposed here so
tests and alternative units can override them.
"""
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from tracking.model import AuthorizationStatus

METERS_PER_MILE = 1609.344
ANNOUNCEMENT_INTERVAL_MILES = 0.1
ACCURACY_THRESHOLD = 20.0  # meters

# RUNPACE_LOCATION_ACCESS values
LOCATION_ACCESS_POLICIES = {
    "when_in_use": AuthorizationStatus.AUTHORIZED_WHEN_IN_USE,
    "always": AuthorizationStatus.AUTHORIZED_ALWAYS,
    "denied": AuthorizationStatus.DENIED,
    "restricted": AuthorizationStatus.RESTRICTED,
}


class ConfigError(ValueError):
    """Raised when an environment setting cannot be used."""


@dataclass(frozen=True)
class TrackingConfig:
    meters_per_mile: float = METERS_PER_MILE
    announcement_interval_miles: float = ANNOUNCEMENT_INTERVAL_MILES
    accuracy_threshold: float = ACCURACY_THRESHOLD

    # Position feed
    feed_host: str = "0.0.0.0"
    feed_port: int = 5005
    fix_timeout: float = 10.0  # seconds without a packet -> location unknown
    location_access: AuthorizationStatus = AuthorizationStatus.AUTHORIZED_WHEN_IN_USE

    @property
    def announcement_interval(self) -> float:
        """Announcement interval in meters."""
        return self.announcement_interval_miles * self.meters_per_mile

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TrackingConfig":
        """
        Build a config from RUNPACE_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigError: on unparsable or non-positive values
        """
        env = os.environ if environ is None else environ

        access_name = env.get("RUNPACE_LOCATION_ACCESS", "when_in_use").strip().lower()
        if access_name not in LOCATION_ACCESS_POLICIES:
            raise ConfigError(
                f"RUNPACE_LOCATION_ACCESS must be one of "
                f"{', '.join(sorted(LOCATION_ACCESS_POLICIES))}, got '{access_name}'"
            )

        return cls(
            meters_per_mile=_positive_float(env, "RUNPACE_METERS_PER_MILE", METERS_PER_MILE),
            announcement_interval_miles=_positive_float(
                env, "RUNPACE_ANNOUNCEMENT_INTERVAL_MILES", ANNOUNCEMENT_INTERVAL_MILES
            ),
            accuracy_threshold=_positive_float(env, "RUNPACE_ACCURACY_THRESHOLD", ACCURACY_THRESHOLD),
            feed_host=env.get("RUNPACE_FEED_HOST", "0.0.0.0"),
            feed_port=_port(env, "RUNPACE_FEED_PORT", 5005),
            fix_timeout=_positive_float(env, "RUNPACE_FIX_TIMEOUT", 10.0),
            location_access=LOCATION_ACCESS_POLICIES[access_name],
        )


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'") from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _port(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'") from None
    if not 1 <= value <= 65535:
        raise ConfigError(f"{name} must be between 1 and 65535, got {value}")
    return value
