"""
Pace formatting.
"""
import math

STOPPED_PACE_TEXT = "0:00 min/mile (stopped)"


def seconds_per_mile(speed: float, meters_per_mile: float) -> float:
    """Seconds needed to cover one mile at ``speed`` m/s. Speed must be > 0."""
    return (1.0 / speed) * meters_per_mile


def format_pace(speed: float, meters_per_mile: float) -> str:
    """
    Format instantaneous speed as a "M:SS min/mile" pace.

    Minutes and seconds are truncated, not rounded. Zero, negative or
    non-finite speed gives the stopped text, as does a speed so small the
    pace overflows.
    """
    if not math.isfinite(speed) or speed <= 0:
        return STOPPED_PACE_TEXT

    total_seconds = seconds_per_mile(speed, meters_per_mile)
    if not math.isfinite(total_seconds):
        return STOPPED_PACE_TEXT
    minutes = int(total_seconds / 60)
    seconds = int(math.fmod(total_seconds, 60))
    return f"{minutes}:{seconds:02d} min/mile"
