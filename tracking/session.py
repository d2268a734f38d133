"""
Run session: glue between the position source, the tracking engine, the
speech output and the window.

The session holds the authorization state, refuses to start a run until
location access is granted, forwards each sample to the engine in arrival
order and passes announcements on to speech.
"""
import dataclasses
import logging
from typing import Callable, Optional

from PyQt5 import QtCore

from tracking.engine import TrackingEngine
from tracking.model import (
    Announcement,
    AuthorizationStatus,
    LocationErrorCode,
    PositionSample,
    RunSnapshot,
)

logger = logging.getLogger(__name__)


class RunSession(QtCore.QObject):
    """
    Signals:
        snapshot_changed(RunSnapshot) - metrics changed, redraw
        announcement_made(str) - announcement text, also sent to speech
        authorization_changed(AuthorizationStatus)
        error_reported(str) - user-facing error text
    """

    snapshot_changed = QtCore.pyqtSignal(object)
    announcement_made = QtCore.pyqtSignal(str)
    authorization_changed = QtCore.pyqtSignal(object)
    error_reported = QtCore.pyqtSignal(str)

    def __init__(
        self,
        engine: TrackingEngine,
        location_source,
        announce: Optional[Callable[[str], object]] = None,
        parent=None,
    ):
        """
        Args:
            engine: Tracking engine for the run
            location_source: LocationWorker (or anything with the same
                signals and request_authorization/start_updates/stop_updates)
            announce: Called with each announcement sentence (speech output)
        """
        super().__init__(parent)
        self.engine = engine
        self.location_source = location_source
        self.announce = announce
        self.authorization_status: Optional[AuthorizationStatus] = None

        self.engine.on_announcement = self._handle_announcement
        self.engine.on_change = self._handle_engine_change

        location_source.sample_received.connect(self.handle_sample)
        location_source.authorization_changed.connect(self.handle_authorization)
        location_source.location_error.connect(self.handle_location_error)

    # ------------------ Commands ------------------ #

    def request_authorization(self) -> None:
        self.location_source.request_authorization()

    def start_run(self) -> bool:
        """Start a new run. Returns False if location access is missing."""
        if self.authorization_status is None or not self.authorization_status.is_authorized:
            logger.warning("Location authorization not granted.")
            self.request_authorization()
            return False

        self.engine.start()
        self.location_source.start_updates()
        return True

    def stop_run(self) -> None:
        self.location_source.stop_updates()
        self.engine.stop()

    def snapshot(self) -> RunSnapshot:
        return dataclasses.replace(
            self.engine.snapshot(), authorization_status=self.authorization_status
        )

    # ------------------ Slots ------------------ #

    def handle_sample(self, sample: PositionSample) -> None:
        self.engine.process_sample(sample)

    def handle_authorization(self, status: AuthorizationStatus) -> None:
        self.authorization_status = status
        if status.is_authorized:
            logger.info("Location authorization granted.")
        elif status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
            logger.warning("Location authorization denied or restricted.")
        else:
            logger.info("Location authorization not determined.")
        self.authorization_changed.emit(status)
        self.snapshot_changed.emit(self.snapshot())

    def handle_location_error(self, code: LocationErrorCode, detail: str) -> None:
        message = code.message(detail)
        logger.error(message)
        self.error_reported.emit(message)

    def _handle_announcement(self, announcement: Announcement) -> None:
        self.announcement_made.emit(announcement.text)
        if self.announce is not None:
            self.announce(announcement.text)

    def _handle_engine_change(self, snapshot: RunSnapshot) -> None:
        self.snapshot_changed.emit(
            dataclasses.replace(snapshot, authorization_status=self.authorization_status)
        )
