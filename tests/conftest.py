import os

# No display needed for widget tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from tracking.model import PositionSample


@pytest.fixture(scope="session")
def qapp():
    from PyQt5 import QtWidgets

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


@pytest.fixture
def make_sample():
    """Factory for position samples along the equator (0.001 deg lon ~ 111.2 m)."""

    def _make(lon=0.0, lat=0.0, accuracy=5.0, speed=3.0, t=0.0):
        return PositionSample(
            latitude=lat,
            longitude=lon,
            horizontal_accuracy=accuracy,
            speed=speed,
            timestamp=t,
        )

    return _make
