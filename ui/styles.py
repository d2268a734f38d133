"""
Colors and Qt stylesheet for the tracker window.
"""

# Palette (dark, readable outdoors on a laptop screen)
BG_COLOR = "#111111"
BG_COLOR_LIGHT = "#181818"    # panels, chart axes
TEXT_COLOR = "#EEEEEE"
TEXT_COLOR_DIM = "#CCCCCC"    # axis labels
TEXT_COLOR_DARK = "#888888"   # transcript timestamps
BORDER_COLOR = "#555555"
GRID_COLOR = "#333333"

ACCENT_BLUE = "#6FA8FF"       # raw speed
ACCENT_GREEN = "#6BCB77"      # smoothed speed, Start Run
ACCENT_RED = "#FF6B6B"        # errors, Stop Run

# Object names used as stylesheet selectors
METRIC_LABEL = "metric"
START_BUTTON = "startButton"
STOP_BUTTON = "stopButton"

DARK_STYLESHEET = f"""
    QMainWindow, QWidget {{
        background-color: {BG_COLOR};
        color: {TEXT_COLOR};
    }}
    QGroupBox {{
        border: 1px solid {BORDER_COLOR};
        border-radius: 4px;
        margin-top: 8px;
        padding-top: 10px;
        font-weight: bold;
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 8px;
        padding: 0 4px;
    }}
    QLabel {{
        font-size: 11pt;
    }}
    QLabel#{METRIC_LABEL} {{
        font-size: 16pt;
        font-weight: bold;
    }}
    QTextEdit {{
        background-color: {BG_COLOR_LIGHT};
        border: 1px solid {BORDER_COLOR};
        border-radius: 4px;
    }}
    QPushButton {{
        color: #FFFFFF;
        border: none;
        border-radius: 10px;
        padding: 12px 18px;
        font-size: 16pt;
    }}
    QPushButton#{START_BUTTON} {{
        background-color: {ACCENT_GREEN};
    }}
    QPushButton#{STOP_BUTTON} {{
        background-color: {ACCENT_RED};
    }}
"""
