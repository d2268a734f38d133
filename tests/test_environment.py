"""
Environment checks: the libraries the tracker needs are importable.
"""
import sys


def test_python_version():
    assert sys.version_info >= (3, 9)


def test_pyqt5():
    from PyQt5 import QtCore
    assert QtCore.QT_VERSION_STR


def test_matplotlib_qt_backend():
    from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg
    assert FigureCanvasQTAgg


def test_numpy():
    import numpy
    assert numpy.__version__


def test_aiohttp():
    import aiohttp
    assert aiohttp.ClientSession


def test_dotenv():
    from dotenv import load_dotenv
    assert callable(load_dotenv)


def test_qt_application(qapp):
    assert qapp is not None
