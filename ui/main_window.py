"""
Main window for the Running Pace Tracker.
"""
import html
from datetime import datetime
from typing import Optional

import numpy as np
from PyQt5 import QtCore
from PyQt5.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QGroupBox,
    QTextEdit,
)

from tracking.model import AuthorizationStatus, RunSnapshot, describe_authorization
from ui.canvases import SpeedChartCanvas
from ui.styles import (
    ACCENT_RED,
    DARK_STYLESHEET,
    METRIC_LABEL,
    START_BUTTON,
    STOP_BUTTON,
    TEXT_COLOR,
    TEXT_COLOR_DARK,
)

# Keep the speed chart to the last ~10 minutes at 1 Hz
MAX_CHART_POINTS = 600


class MainWindow(QMainWindow):
    """
    Run dashboard.

    Displays:
    - Location status, current pace, total distance, speed
    - Start / Stop buttons
    - Speed over time for the current run
    - Transcript of announcements and errors

    The window does not touch the tracker directly; it asks for actions
    through signals and redraws from snapshots.
    """

    start_run_requested = QtCore.pyqtSignal()
    stop_run_requested = QtCore.pyqtSignal()
    authorization_requested = QtCore.pyqtSignal()

    def __init__(self):
        super().__init__()

        self.setWindowTitle("Running Pace Tracker")
        self.resize(900, 640)

        self.authorization_status: Optional[AuthorizationStatus] = None
        self._authorization_prompted = False

        # Speed chart buffers for the current run
        self.times = []
        self.speeds = []
        self._run_started_at: Optional[float] = None
        self._last_chart_timestamp: Optional[float] = None
        # Fixes at or before this time belong to an earlier run
        self._chart_since: Optional[float] = None
        self._latest_fix_timestamp: Optional[float] = None

        central = QWidget()
        self.setCentralWidget(central)

        root_layout = QHBoxLayout()
        root_layout.setContentsMargins(8, 8, 8, 8)
        root_layout.setSpacing(10)
        central.setLayout(root_layout)

        root_layout.addLayout(self._build_left_column(), 2)
        root_layout.addLayout(self._build_right_column(), 3)

        self.setStyleSheet(DARK_STYLESHEET)

    def _build_left_column(self):
        """Build left column: run status + buttons."""
        left_col = QVBoxLayout()
        left_col.setSpacing(10)

        title_label = QLabel("Running Pace Tracker")
        title_label.setAlignment(QtCore.Qt.AlignCenter)
        title_label.setStyleSheet("font-size: 20px; font-weight: bold;")
        left_col.addWidget(title_label)

        status_group = QGroupBox("Run")
        status_layout = QVBoxLayout()
        status_layout.setSpacing(6)
        status_group.setLayout(status_layout)

        self.location_status_label = QLabel("Location Status: N/A")
        self.pace_label = QLabel("Current Pace: N/A")
        self.pace_label.setObjectName(METRIC_LABEL)
        self.distance_label = QLabel("Total Distance: 0.00 miles")
        self.distance_label.setObjectName(METRIC_LABEL)
        self.speed_label = QLabel("Speed: 0.00 mph")

        status_layout.addWidget(self.location_status_label)
        status_layout.addWidget(self.pace_label)
        status_layout.addWidget(self.distance_label)
        status_layout.addWidget(self.speed_label)
        status_layout.addStretch()

        button_row = QHBoxLayout()
        self.start_button = QPushButton("Start Run")
        self.start_button.setObjectName(START_BUTTON)
        self.start_button.clicked.connect(self._on_start_clicked)

        self.stop_button = QPushButton("Stop Run")
        self.stop_button.setObjectName(STOP_BUTTON)
        self.stop_button.clicked.connect(self.stop_run_requested.emit)

        button_row.addWidget(self.start_button)
        button_row.addWidget(self.stop_button)

        left_col.addWidget(status_group)
        left_col.addLayout(button_row)
        return left_col

    def _build_right_column(self):
        """Build right column: speed chart + transcript."""
        right_col = QVBoxLayout()
        right_col.setSpacing(10)

        self.speed_canvas = SpeedChartCanvas(self)
        right_col.addWidget(self.speed_canvas)

        transcript_group = QGroupBox("Announcements")
        transcript_layout = QVBoxLayout()
        transcript_group.setLayout(transcript_layout)

        self.transcript_text = QTextEdit()
        self.transcript_text.setReadOnly(True)
        self.transcript_text.setPlaceholderText("Pace announcements will appear here...")
        transcript_layout.addWidget(self.transcript_text)

        right_col.addWidget(transcript_group)
        return right_col

    # ==========================================================================
    # User actions
    # ==========================================================================

    def _on_start_clicked(self):
        if self.authorization_status in (None, AuthorizationStatus.NOT_DETERMINED):
            self.authorization_requested.emit()
        else:
            self._reset_chart()
            self.start_run_requested.emit()

    def showEvent(self, event):
        super().showEvent(event)
        # Ask for location access the first time the window appears
        if self.authorization_status in (None, AuthorizationStatus.NOT_DETERMINED) \
                and not self._authorization_prompted:
            self._authorization_prompted = True
            self.authorization_requested.emit()

    # ==========================================================================
    # Data Update Methods
    # ==========================================================================

    def update_snapshot(self, snapshot: RunSnapshot):
        """
        Redraw the run panel from a tracker snapshot.

        Args:
            snapshot: Current run metrics
        """
        self.authorization_status = snapshot.authorization_status

        self.location_status_label.setText(
            f"Location Status: {describe_authorization(snapshot.authorization_status)}"
        )
        self.pace_label.setText(f"Current Pace: {snapshot.current_pace_text}")
        self.distance_label.setText(f"Total Distance: {snapshot.total_distance_miles:.2f} miles")
        self.speed_label.setText(f"Speed: {snapshot.speed_mph:.2f} mph")

        location = snapshot.last_location
        if location is None:
            return
        if snapshot.is_tracking:
            self._append_speed(location.timestamp, max(snapshot.speed_mph, 0.0))
        self._latest_fix_timestamp = location.timestamp

    def _append_speed(self, timestamp: float, speed_mph: float):
        # Snapshots also arrive for start/stop/authorization; one point per fix
        if timestamp == self._last_chart_timestamp:
            return
        if self._chart_since is not None and timestamp <= self._chart_since:
            return
        self._last_chart_timestamp = timestamp
        if self._run_started_at is None:
            self._run_started_at = timestamp

        self.times.append(timestamp - self._run_started_at)
        self.speeds.append(speed_mph)
        if len(self.times) > MAX_CHART_POINTS:
            del self.times[0]
            del self.speeds[0]

        if len(self.times) >= 2:
            self.speed_canvas.update_data(
                np.array(self.times, dtype=float),
                np.array(self.speeds, dtype=float),
            )

    def _reset_chart(self):
        self.times = []
        self.speeds = []
        self._run_started_at = None
        self._last_chart_timestamp = None
        self._chart_since = self._latest_fix_timestamp
        self.speed_canvas.reset()

    def append_announcement(self, text: str):
        self._append_transcript(text, TEXT_COLOR)

    def append_error(self, text: str):
        self._append_transcript(text, ACCENT_RED)

    def _append_transcript(self, text: str, color: str):
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.transcript_text.append(
            f"<div style='margin-bottom: 6px;'>"
            f"<span style='color: {TEXT_COLOR_DARK};'>[{timestamp}]</span> "
            f"<span style='color: {color};'>{html.escape(text)}</span>"
            f"</div>"
        )

        # Auto-scroll to bottom
        cursor = self.transcript_text.textCursor()
        cursor.movePosition(cursor.End)
        self.transcript_text.setTextCursor(cursor)
