"""
Run tracking: position samples in, distance / speed / pace and
spoken announcements out.
"""
from tracking.config import TrackingConfig
from tracking.engine import TrackingEngine
from tracking.model import (
    Announcement,
    AuthorizationStatus,
    LocationErrorCode,
    PositionSample,
    RunSnapshot,
)

__all__ = [
    'Announcement',
    'AuthorizationStatus',
    'LocationErrorCode',
    'PositionSample',
    'RunSnapshot',
    'TrackingConfig',
    'TrackingEngine',
]
