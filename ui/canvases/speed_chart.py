"""
Speed chart for the current run.
"""
import numpy as np
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from ui.styles import ACCENT_BLUE, ACCENT_GREEN, BG_COLOR, BG_COLOR_LIGHT, GRID_COLOR, TEXT_COLOR_DIM


def rolling_mean(values: np.ndarray, window: int) -> np.ndarray:
    """
    Trailing mean over ``window`` samples, same length as ``values``.

    The first points average over whatever history exists.
    """
    if values.size == 0:
        return values
    cumsum = np.cumsum(np.insert(values.astype(float), 0, 0.0))
    counts = np.minimum(np.arange(1, values.size + 1), window)
    starts = np.arange(1, values.size + 1) - counts
    return (cumsum[1:] - cumsum[starts]) / counts


class SpeedChartCanvas(FigureCanvas):
    """
    Instantaneous speed (thin line) and its rolling mean (thick line)
    against seconds since the run started.
    """

    def __init__(self, parent=None, width=5, height=2, dpi=100, smoothing=10):
        self.smoothing = smoothing

        self.fig = Figure(figsize=(width, height), dpi=dpi)
        self.ax = self.fig.add_subplot(111)
        super().__init__(self.fig)
        self.setParent(parent)

        self.fig.patch.set_facecolor(BG_COLOR)
        self.ax.set_facecolor(BG_COLOR_LIGHT)
        for spine in self.ax.spines.values():
            spine.set_color(TEXT_COLOR_DIM)
        self.ax.tick_params(colors=TEXT_COLOR_DIM, labelsize=7)

        self.ax.set_title("Speed [mph]", fontsize=8, color="#FFFFFF")
        self.ax.set_xlabel("Run time [s]", fontsize=7, color=TEXT_COLOR_DIM)
        self.ax.grid(True, color=GRID_COLOR, alpha=0.6)

        self.raw_line, = self.ax.plot([], [], linewidth=0.8, color=ACCENT_BLUE, alpha=0.6)
        self.mean_line, = self.ax.plot([], [], linewidth=2.0, color=ACCENT_GREEN)

        self.fig.tight_layout(pad=0.5)

    def update_data(self, t: np.ndarray, speed_mph: np.ndarray):
        """
        Redraw both lines.

        Args:
            t: Seconds since run start
            speed_mph: Speed at each time
        """
        if t.size == 0 or speed_mph.size == 0:
            return
        self.raw_line.set_data(t, speed_mph)
        self.mean_line.set_data(t, rolling_mean(speed_mph, self.smoothing))
        self.ax.relim()
        self.ax.autoscale_view()
        self.draw_idle()

    def reset(self):
        self.raw_line.set_data([], [])
        self.mean_line.set_data([], [])
        self.draw_idle()
