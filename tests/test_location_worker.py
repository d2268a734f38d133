import json
import time

import pytest

from tracking.config import TrackingConfig
from tracking.geo import haversine
from tracking.location_worker import (
    LocationWorker,
    SimulatedLocationWorker,
    loop_route,
    parse_position_packet,
)
from tracking.model import AuthorizationStatus, LocationErrorCode


def _packet(**fields):
    return json.dumps(fields).encode("utf-8")


class SignalRecorder:
    def __init__(self, worker):
        self.samples = []
        self.errors = []
        self.statuses = []
        worker.sample_received.connect(self.samples.append)
        worker.location_error.connect(lambda code, detail: self.errors.append((code, detail)))
        worker.authorization_changed.connect(self.statuses.append)


@pytest.fixture
def worker(qapp):
    return LocationWorker(TrackingConfig(fix_timeout=10.0))


# ------------------ parse_position_packet ------------------ #

def test_parse_full_packet():
    sample = parse_position_packet(
        _packet(lat=51.5, lon=-0.12, accuracy=4.0, speed=3.1, timestamp=100.0), 999.0
    )
    assert sample.latitude == 51.5
    assert sample.longitude == -0.12
    assert sample.horizontal_accuracy == 4.0
    assert sample.speed == 3.1
    assert sample.timestamp == 100.0


def test_parse_uses_receive_time_without_timestamp():
    sample = parse_position_packet(_packet(lat=1, lon=2, accuracy=3, speed=-1), 42.0)
    assert sample.timestamp == 42.0
    assert sample.speed == -1.0


def test_parse_skips_other_packet_types():
    assert parse_position_packet(_packet(type="heartbeat"), 0.0) is None


@pytest.mark.parametrize("data", [
    b"not json",
    b"\xff\xfe",
    b"[1, 2, 3]",
    _packet(lat=1, lon=2, speed=3),
    _packet(lat="north", lon=2, accuracy=3, speed=1),
    b'{"lat": 0, "lon": 0, "accuracy": 5, "speed": NaN}',
    b'{"lat": 0, "lon": Infinity, "accuracy": 5, "speed": 1}',
    b'{"lat": 0, "lon": 0, "accuracy": -Infinity, "speed": 1}',
    b'{"lat": 0, "lon": 0, "accuracy": 5, "speed": 1, "timestamp": NaN}',
])
def test_parse_rejects_bad_packets(data):
    with pytest.raises(ValueError):
        parse_position_packet(data, 0.0)


# ------------------ Authorization / delivery ------------------ #

def test_request_authorization_uses_policy(qapp):
    worker = LocationWorker(TrackingConfig(location_access=AuthorizationStatus.DENIED))
    rec = SignalRecorder(worker)

    assert worker.request_authorization() is AuthorizationStatus.DENIED
    assert worker.authorization_status is AuthorizationStatus.DENIED
    assert rec.statuses == [AuthorizationStatus.DENIED]


def test_start_updates_requires_authorization(worker):
    rec = SignalRecorder(worker)

    assert worker.start_updates() is False
    assert not worker.is_updating
    assert rec.errors == [(LocationErrorCode.DENIED, "")]


def test_packets_delivered_only_while_updating(worker):
    rec = SignalRecorder(worker)
    worker.request_authorization()
    data = _packet(lat=0, lon=0, accuracy=5, speed=3)

    assert worker.handle_packet(data, 1.0) is None
    assert rec.samples == []

    assert worker.start_updates()
    delivered = worker.handle_packet(data, 2.0)
    assert rec.samples == [delivered]

    worker.stop_updates()
    worker.handle_packet(data, 3.0)
    assert len(rec.samples) == 1


def test_bad_packet_reports_error(worker):
    rec = SignalRecorder(worker)
    worker.request_authorization()
    worker.start_updates()

    assert worker.handle_packet(b"garbage", 0.0) is None
    assert len(rec.errors) == 1
    assert rec.errors[0][0] is LocationErrorCode.OTHER


def test_non_finite_packet_reported_not_delivered(worker):
    rec = SignalRecorder(worker)
    worker.request_authorization()
    worker.start_updates()

    assert worker.handle_packet(b'{"lat": 0, "lon": 0, "accuracy": 5, "speed": NaN}', 0.0) is None
    assert rec.samples == []
    assert rec.errors[0][0] is LocationErrorCode.OTHER
    assert "non-finite speed" in rec.errors[0][1]


def test_fix_timeout_reported_once_per_gap(worker):
    rec = SignalRecorder(worker)
    worker.request_authorization()
    worker.start_updates()
    later = time.monotonic() + 11.0

    assert worker.check_fix_timeout(later) is True
    assert worker.check_fix_timeout(later + 5) is False
    assert rec.errors == [(LocationErrorCode.LOCATION_UNKNOWN, "")]

    # A fresh fix re-arms the check
    worker.handle_packet(_packet(lat=0, lon=0, accuracy=5, speed=3), 0.0)
    assert worker.check_fix_timeout(time.monotonic() + 11.0) is True


def test_fix_timeout_quiet_when_not_updating(worker):
    assert worker.check_fix_timeout(time.monotonic() + 100.0) is False


def test_run_reports_network_error_when_port_unavailable(qapp):
    worker = LocationWorker(TrackingConfig(feed_host="256.0.0.1"))
    rec = SignalRecorder(worker)

    worker.run()

    assert rec.errors and rec.errors[0][0] is LocationErrorCode.NETWORK


# ------------------ Simulated source ------------------ #

def test_loop_route_spacing_matches_speed():
    route = loop_route(51.5, -0.16, radius_m=200.0, speed=3.5, rate_hz=1.0, n_points=20)

    assert route.shape == (20, 2)
    assert list(route[0]) == pytest.approx([51.5, -0.16])
    step = haversine(route[0][0], route[0][1], route[1][0], route[1][1])
    assert step == pytest.approx(3.5, rel=1e-3)


def test_simulated_samples_cycle_and_include_noise(qapp):
    worker = SimulatedLocationWorker(radius_m=20.0, speed=4.0, noisy_every=5)
    samples = [worker.next_sample(float(i)) for i in range(len(worker.route) + 1)]

    assert samples[-1].latitude == samples[0].latitude
    assert samples[4].horizontal_accuracy == 35.0
    assert samples[0].horizontal_accuracy == 5.0
    assert all(s.speed == 4.0 for s in samples)
