import pytest
from PyQt5 import QtCore

from tracking.engine import TrackingEngine
from tracking.model import AuthorizationStatus, LocationErrorCode
from tracking.session import RunSession


class FakeLocationSource(QtCore.QObject):
    sample_received = QtCore.pyqtSignal(object)
    authorization_changed = QtCore.pyqtSignal(object)
    location_error = QtCore.pyqtSignal(object, str)

    def __init__(self, grant=AuthorizationStatus.AUTHORIZED_WHEN_IN_USE):
        super().__init__()
        self.grant = grant
        self.calls = []

    def request_authorization(self):
        self.calls.append("request_authorization")
        self.authorization_changed.emit(self.grant)

    def start_updates(self):
        self.calls.append("start_updates")
        return True

    def stop_updates(self):
        self.calls.append("stop_updates")


@pytest.fixture
def source(qapp):
    return FakeLocationSource()


@pytest.fixture
def spoken():
    return []


@pytest.fixture
def session(source, spoken):
    return RunSession(TrackingEngine(), source, announce=spoken.append)


def test_start_without_authorization_requests_it(session, source):
    assert session.start_run() is False
    assert source.calls == ["request_authorization"]
    assert not session.engine.is_tracking
    # The fake grants immediately
    assert session.authorization_status is AuthorizationStatus.AUTHORIZED_WHEN_IN_USE


def test_start_denied_stays_idle(qapp, spoken):
    source = FakeLocationSource(grant=AuthorizationStatus.DENIED)
    session = RunSession(TrackingEngine(), source, announce=spoken.append)
    session.request_authorization()

    assert session.start_run() is False
    assert not session.engine.is_tracking
    assert "start_updates" not in source.calls


def test_start_after_authorization(session, source):
    session.request_authorization()

    assert session.start_run() is True
    assert session.engine.is_tracking
    assert source.calls[-1] == "start_updates"


def test_samples_flow_to_engine_and_speech(session, source, spoken, make_sample):
    announced = []
    snapshots = []
    session.announcement_made.connect(announced.append)
    session.snapshot_changed.connect(snapshots.append)

    session.request_authorization()
    session.start_run()
    for i in range(3):
        source.sample_received.emit(make_sample(lon=0.001 * i, speed=3.578))

    assert session.engine.total_distance > 160.9344
    assert announced == ["Your current pace is 7:29 min/mile. Total distance 0.1 miles."]
    assert spoken == announced
    assert snapshots[-1].authorization_status is AuthorizationStatus.AUTHORIZED_WHEN_IN_USE
    assert snapshots[-1].total_distance == session.engine.total_distance


def test_location_error_reported_without_touching_run(session, source, make_sample):
    errors = []
    session.error_reported.connect(errors.append)
    session.request_authorization()
    session.start_run()
    source.sample_received.emit(make_sample(lon=0.0))
    source.sample_received.emit(make_sample(lon=0.001))
    before = session.engine.snapshot()

    source.location_error.emit(LocationErrorCode.NETWORK, "")

    assert errors == ["Network error with location services."]
    assert session.engine.snapshot() == before


def test_stop_run_keeps_totals(session, source, make_sample):
    session.request_authorization()
    session.start_run()
    source.sample_received.emit(make_sample(lon=0.0))
    source.sample_received.emit(make_sample(lon=0.001))
    distance = session.engine.total_distance

    session.stop_run()

    assert source.calls[-1] == "stop_updates"
    assert not session.engine.is_tracking
    assert session.snapshot().total_distance == distance


def test_snapshot_carries_authorization(session):
    assert session.snapshot().authorization_status is None
    session.request_authorization()
    assert session.snapshot().authorization_status is AuthorizationStatus.AUTHORIZED_WHEN_IN_USE


def test_no_speaker_still_emits(qapp, make_sample):
    source = FakeLocationSource()
    session = RunSession(TrackingEngine(), source)
    announced = []
    session.announcement_made.connect(announced.append)

    session.request_authorization()
    session.start_run()
    source.sample_received.emit(make_sample(lon=0.0))
    source.sample_received.emit(make_sample(lon=0.002))

    assert len(announced) == 1
