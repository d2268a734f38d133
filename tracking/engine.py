"""
Tracking engine: turns a stream of position samples into run metrics.

The engine owns all run state. Samples are fed one at a time in arrival
order; distance, speed and pace are updated and an announcement is produced
each time the run crosses the next announcement interval.

It never talks to the UI or speech output directly. Interested parties
register callbacks:

  - on_announcement(Announcement)  - a spoken status update is due
  - on_change(RunSnapshot)          - state changed (start/stop/sample)
"""
import logging
import math
import threading
from typing import Callable, Optional

from tracking.config import TrackingConfig
from tracking.geo import distance_between
from tracking.model import Announcement, PositionSample, RunSnapshot
from tracking.pace import format_pace

logger = logging.getLogger(__name__)

INITIAL_PACE_TEXT = "N/A"


class TrackingEngine:
    """
    Stateful processor for one active run.

    All mutators and snapshot reads happen under a single lock, so samples
    may be delivered from a worker thread while the UI reads metrics.
    Callbacks fire after the lock is released.
    """

    def __init__(
        self,
        config: Optional[TrackingConfig] = None,
        on_announcement: Optional[Callable[[Announcement], None]] = None,
        on_change: Optional[Callable[[RunSnapshot], None]] = None,
    ):
        self.config = config or TrackingConfig()
        self.on_announcement = on_announcement
        self.on_change = on_change

        self._lock = threading.Lock()

        # Run state
        self._previous_accepted: Optional[PositionSample] = None
        self._last_location: Optional[PositionSample] = None
        self._total_distance = 0.0        # meters
        self._current_speed = 0.0         # m/s
        self._current_pace_text = INITIAL_PACE_TEXT
        self._last_announced_distance = 0.0
        self._is_tracking = False

    # ------------------ Commands ------------------ #

    def start(self) -> None:
        """Begin a new run, discarding the accumulated distance."""
        with self._lock:
            self._total_distance = 0.0
            self._last_announced_distance = 0.0
            self._previous_accepted = None
            self._is_tracking = True
            snapshot = self._snapshot_locked()

        logger.info("Run tracking started")
        self._notify_change(snapshot)

    def stop(self) -> None:
        """Stop accepting samples. Metrics stay readable."""
        with self._lock:
            was_tracking = self._is_tracking
            self._is_tracking = False
            snapshot = self._snapshot_locked()

        if was_tracking:
            logger.info(
                "Run tracking stopped at %.2f miles",
                snapshot.total_distance_miles,
            )
        self._notify_change(snapshot)

    def process_sample(self, sample: PositionSample) -> Optional[Announcement]:
        """
        Feed one position sample.

        Returns the announcement produced by this sample, if any. Samples
        received while not tracking are ignored.
        """
        with self._lock:
            if not self._is_tracking:
                logger.debug("Ignoring sample while not tracking")
                return None

            self._last_location = sample
            self._current_speed = sample.speed

            if self._is_accepted(sample):
                if self._previous_accepted is not None:
                    self._total_distance += distance_between(self._previous_accepted, sample)
                self._previous_accepted = sample
            else:
                logger.debug(
                    "Sample excluded from distance (accuracy=%.1f m, speed=%.2f m/s)",
                    sample.horizontal_accuracy,
                    sample.speed,
                )

            self._current_pace_text = format_pace(
                self._current_speed, self.config.meters_per_mile
            )

            announcement = self._check_announcement()
            snapshot = self._snapshot_locked()

        if announcement is not None:
            logger.info("Announcement: %s", announcement.text)
            if self.on_announcement is not None:
                self.on_announcement(announcement)
        self._notify_change(snapshot)
        return announcement

    # ------------------ Reads ------------------ #

    def snapshot(self) -> RunSnapshot:
        with self._lock:
            return self._snapshot_locked()

    @property
    def is_tracking(self) -> bool:
        with self._lock:
            return self._is_tracking

    @property
    def total_distance(self) -> float:
        with self._lock:
            return self._total_distance

    @property
    def current_speed(self) -> float:
        with self._lock:
            return self._current_speed

    @property
    def current_pace_text(self) -> str:
        with self._lock:
            return self._current_pace_text

    @property
    def last_announced_distance(self) -> float:
        with self._lock:
            return self._last_announced_distance

    @property
    def previous_accepted(self) -> Optional[PositionSample]:
        with self._lock:
            return self._previous_accepted

    @property
    def last_location(self) -> Optional[PositionSample]:
        with self._lock:
            return self._last_location

    # ------------------ Internals ------------------ #

    def _is_accepted(self, sample: PositionSample) -> bool:
        # Negative speed is the positioning source's "invalid" marker; NaN and
        # infinite fields would poison the running total.
        if not all(
            math.isfinite(v)
            for v in (sample.latitude, sample.longitude, sample.horizontal_accuracy, sample.speed)
        ):
            return False
        return (
            sample.horizontal_accuracy < self.config.accuracy_threshold
            and sample.speed >= 0
        )

    def _check_announcement(self) -> Optional[Announcement]:
        interval = self.config.announcement_interval
        if self._total_distance < self._last_announced_distance + interval:
            return None

        distance_miles = self._total_distance / self.config.meters_per_mile
        text = (
            f"Your current pace is {self._current_pace_text}. "
            f"Total distance {distance_miles:.1f} miles."
        )
        # Steps by one interval even if the sample jumped several; later
        # samples catch up one interval at a time.
        self._last_announced_distance += interval
        return Announcement(
            text=text,
            pace_text=self._current_pace_text,
            distance_miles=distance_miles,
            total_distance=self._total_distance,
        )

    def _snapshot_locked(self) -> RunSnapshot:
        return RunSnapshot(
            last_location=self._last_location,
            current_speed=self._current_speed,
            total_distance=self._total_distance,
            current_pace_text=self._current_pace_text,
            is_tracking=self._is_tracking,
            meters_per_mile=self.config.meters_per_mile,
        )

    def _notify_change(self, snapshot: RunSnapshot) -> None:
        if self.on_change is not None:
            self.on_change(snapshot)
