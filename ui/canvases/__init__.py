"""
Matplotlib canvas widgets for run visualization.
"""
from ui.canvases.speed_chart import SpeedChartCanvas

__all__ = ['SpeedChartCanvas']
