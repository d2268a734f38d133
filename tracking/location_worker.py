# tracking/location_worker.py
"""
Position sources for the run tracker.

LocationWorker listens for position fixes on a UDP socket. Any GPS app
or bridge that can send one JSON datagram per fix will do:

    {"lat": 51.5007, "lon": -0.1246, "accuracy": 5.0, "speed": 3.2,
     "timestamp": 1718000000.0}

SimulatedLocationWorker generates a loop route instead, for running the
app without a device.

Both are QThreads and emit the same signals, so the rest of the app does
not care which one is in use.
"""

import json
import logging
import math
import socket
import time
from typing import Optional

import numpy as np
from PyQt5 import QtCore

from tracking.config import TrackingConfig
from tracking.geo import EARTH_RADIUS_M
from tracking.model import AuthorizationStatus, LocationErrorCode, PositionSample

logger = logging.getLogger(__name__)


class LocationWorker(QtCore.QThread):
    """
    UDP position feed.

    Samples are only delivered between start_updates() and stop_updates(),
    and only once location access has been authorized.
    """

    sample_received = QtCore.pyqtSignal(object)            # PositionSample
    authorization_changed = QtCore.pyqtSignal(object)      # AuthorizationStatus
    location_error = QtCore.pyqtSignal(object, str)        # (LocationErrorCode, detail)
    status_update = QtCore.pyqtSignal(str)

    def __init__(self, config: Optional[TrackingConfig] = None, parent=None):
        super().__init__(parent)
        self.config = config or TrackingConfig()
        self.host = self.config.feed_host
        self.port = self.config.feed_port
        self.running = False

        self.authorization_status = AuthorizationStatus.NOT_DETERMINED
        self._updating = False
        self._last_fix_at = time.monotonic()
        self._unknown_reported = False

        self._sock: Optional[socket.socket] = None

    # ------------------ Authorization / updates ------------------ #

    def request_authorization(self) -> AuthorizationStatus:
        """Resolve location access using the configured policy."""
        status = self.config.location_access
        self.authorization_status = status
        logger.info(f"Location authorization: {status.description}")
        self.authorization_changed.emit(status)
        return status

    def start_updates(self) -> bool:
        if not self.authorization_status.is_authorized:
            self.location_error.emit(LocationErrorCode.DENIED, "")
            return False
        self._last_fix_at = time.monotonic()
        self._unknown_reported = False
        self._updating = True
        self.status_update.emit("Location updates started.")
        return True

    def stop_updates(self) -> None:
        self._updating = False
        self.status_update.emit("Location updates stopped.")

    @property
    def is_updating(self) -> bool:
        return self._updating

    # ------------------ Core QThread loop ------------------ #

    def run(self):
        self.status_update.emit(
            f"Starting position feed listener on {self.host}:{self.port}..."
        )

        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((self.host, self.port))
            self._sock.settimeout(1.0)  # 1-second timeout to allow clean shutdown
        except OSError as e:
            logger.error(f"Could not open UDP socket: {e}")
            self.location_error.emit(LocationErrorCode.NETWORK, str(e))
            self.status_update.emit(f"ERROR: Could not open UDP socket: {e}")
            return

        self.status_update.emit("Position feed ready. Waiting for fixes.")
        self.running = True

        try:
            while self.running:
                try:
                    data, _addr = self._sock.recvfrom(2048)
                except socket.timeout:
                    self.check_fix_timeout(time.monotonic())
                    continue
                except OSError:
                    # Socket closed during shutdown
                    break

                self.handle_packet(data, time.time())
        finally:
            self._close_socket()
            self.status_update.emit("Position feed listener stopped.")

    def handle_packet(self, data: bytes, received_at: float) -> Optional[PositionSample]:
        """Parse one datagram and deliver it. Returns the sample if delivered."""
        try:
            sample = parse_position_packet(data, received_at)
        except ValueError as e:
            logger.warning(f"Bad position packet: {e}")
            self.location_error.emit(LocationErrorCode.OTHER, str(e))
            return None

        if sample is None:
            return None

        self._last_fix_at = time.monotonic()
        self._unknown_reported = False
        return self._deliver(sample)

    def check_fix_timeout(self, now: float) -> bool:
        """Report LOCATION_UNKNOWN once per gap in fixes. Returns True if reported."""
        if not self._updating or self._unknown_reported:
            return False
        if now - self._last_fix_at < self.config.fix_timeout:
            return False
        self._unknown_reported = True
        self.location_error.emit(LocationErrorCode.LOCATION_UNKNOWN, "")
        return True

    def _deliver(self, sample: PositionSample) -> Optional[PositionSample]:
        if not self._updating or not self.authorization_status.is_authorized:
            return None
        self.sample_received.emit(sample)
        return sample

    def _close_socket(self):
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as e:
                logger.debug(f"Error closing socket: {e}")
            self._sock = None

    def stop(self):
        self.running = False
        self._close_socket()


# ------------------ Packet parsing ------------------ #

def parse_position_packet(data: bytes, received_at: float) -> Optional[PositionSample]:
    """
    Parse a JSON position datagram into a PositionSample.

    Expected keys:
        "lat", "lon"      degrees
        "accuracy"        horizontal accuracy, meters
        "speed"           m/s, negative when the device does not know
        "timestamp"       optional, seconds; receive time is used if missing

    Packets carrying a "type" other than "position" are skipped (None).

    Raises:
        ValueError: if the packet is not valid JSON or a field is missing
    """
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"not a JSON packet: {e}") from None

    if not isinstance(payload, dict):
        raise ValueError("packet must be a JSON object")

    if payload.get("type", "position") != "position":
        return None

    try:
        sample = PositionSample(
            latitude=float(payload["lat"]),
            longitude=float(payload["lon"]),
            horizontal_accuracy=float(payload["accuracy"]),
            speed=float(payload["speed"]),
            timestamp=float(payload.get("timestamp", received_at)),
        )
    except KeyError as e:
        raise ValueError(f"missing field {e}") from None
    except (TypeError, ValueError) as e:
        raise ValueError(f"bad field value: {e}") from None

    # json.loads accepts NaN and Infinity
    for name in ("latitude", "longitude", "horizontal_accuracy", "speed", "timestamp"):
        if not math.isfinite(getattr(sample, name)):
            raise ValueError(f"non-finite {name}")
    return sample


# ------------------ Simulated source ------------------ #

def loop_route(
    center_lat: float,
    center_lon: float,
    radius_m: float,
    speed: float,
    rate_hz: float,
    n_points: int,
) -> np.ndarray:
    """
    Positions along a circular loop run at constant speed.

    Returns an (n_points, 2) array of (lat, lon) in degrees, one row per
    sample at ``rate_hz``.
    """
    circumference = 2 * np.pi * radius_m
    dist = np.arange(n_points) * (speed / rate_hz)
    angle = (dist / circumference) * (2 * np.pi)

    north = radius_m * np.sin(angle)
    east = radius_m * np.cos(angle) - radius_m  # start on the center's latitude

    lat = center_lat + np.degrees(north / EARTH_RADIUS_M)
    lon = center_lon + np.degrees(east / (EARTH_RADIUS_M * math.cos(math.radians(center_lat))))
    return np.column_stack([lat, lon])


class SimulatedLocationWorker(LocationWorker):
    """Background thread that runs a fake loop at a steady pace."""

    def __init__(
        self,
        config: Optional[TrackingConfig] = None,
        center_lat: float = 51.5073,
        center_lon: float = -0.1657,
        radius_m: float = 200.0,
        speed: float = 3.578,     # ~7:29 min/mile
        rate_hz: float = 1.0,
        noisy_every: int = 15,    # every Nth fix comes in with poor accuracy
        parent=None,
    ):
        super().__init__(config, parent)
        self.radius_m = radius_m
        self.speed = speed
        self.rate_hz = rate_hz
        self.noisy_every = noisy_every

        # One full lap worth of points, reused cyclically
        lap_points = int(np.ceil(2 * np.pi * radius_m / (speed / rate_hz)))
        self.route = loop_route(center_lat, center_lon, radius_m, speed, rate_hz, lap_points)
        self._step = 0

    def run(self):
        self.status_update.emit("Simulated position feed running.")
        self.running = True

        while self.running:
            if self._updating:
                self._deliver(self.next_sample(time.time()))
            time.sleep(1.0 / self.rate_hz)

        self.status_update.emit("Simulated position feed stopped.")

    def next_sample(self, timestamp: float) -> PositionSample:
        lat, lon = self.route[self._step % len(self.route)]
        self._step += 1

        noisy = self.noisy_every > 0 and self._step % self.noisy_every == 0
        return PositionSample(
            latitude=float(lat),
            longitude=float(lon),
            horizontal_accuracy=35.0 if noisy else 5.0,
            speed=self.speed,
            timestamp=timestamp,
        )

    def stop(self):
        self.running = False
