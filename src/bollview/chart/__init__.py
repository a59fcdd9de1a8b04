from __future__ import annotations
from .overlay import BAND_NAMES, BollingerOverlay

# plotting 需要 matplotlib，不在這裡匯入：
#   from bollview.chart.plotting import plot_bollinger_chart

__all__ = [
    "BAND_NAMES",
    "BollingerOverlay",
]
