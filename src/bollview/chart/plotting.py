"""
布林帶視覺化

K 線蠟燭圖 + 布林帶三線 + 上下軌填充。
無值的點（None / NaN）在線上留空，不繪製。
"""
from __future__ import annotations
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")          # headless rendering
import matplotlib.pyplot as plt
import matplotlib.dates as mdates

from .overlay import BAND_NAMES, BollingerOverlay
from ..data.candles import Candle

UP_COLOR = "#26a69a"
DOWN_COLOR = "#ef5350"


def _to_float_array(values) -> np.ndarray:
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def _draw_candles(ax, x: np.ndarray, candles: Sequence[Candle], width: float) -> None:
    opens = np.array([c.open for c in candles])
    closes = np.array([c.close for c in candles])
    highs = np.array([c.high for c in candles])
    lows = np.array([c.low for c in candles])

    colors = np.where(closes >= opens, UP_COLOR, DOWN_COLOR)
    # 影線
    ax.vlines(x, lows, highs, colors=colors, linewidth=0.8, zorder=2)
    # 實體（十字星給一個最小高度）
    bottoms = np.minimum(opens, closes)
    heights = np.maximum(np.abs(closes - opens), 1e-9)
    ax.bar(x, heights, width=width, bottom=bottoms, color=colors,
           edgecolor=colors, linewidth=0.5, zorder=3)


def plot_bollinger_chart(
    candles: Sequence[Candle] | None = None,
    overlay: BollingerOverlay | None = None,
    save_path: Path | None = None,
    title: str | None = None,
) -> Path | None:
    """
    繪製 K 線 + 布林帶

    Args:
        candles: K 線序列；None 使用 overlay.candles
        overlay: 布林帶疊加層（None 或未啟用時只畫 K 線）
        save_path: 輸出 PNG 路徑；None 則 plt.show()
        title: 圖表標題，預設 BOLL(length, mult)

    Returns:
        save_path（有存檔時）

    Raises:
        ValueError: candles 與 overlay.candles 長度不一致
    """
    if candles is None:
        candles = overlay.candles if overlay is not None else []
    elif overlay is not None and len(candles) != len(overlay.candles):
        raise ValueError(
            f"candles ({len(candles)}) 與 overlay.candles ({len(overlay.candles)}) 長度不一致"
        )

    fig, ax = plt.subplots(figsize=(16, 8))

    if candles:
        times = pd.to_datetime([c.timestamp for c in candles], unit="ms", utc=True)
        x = mdates.date2num(times.to_pydatetime())
        step = float(np.median(np.diff(x))) if len(x) > 1 else 1 / 1440
        _draw_candles(ax, x, candles, width=step * 0.6)
    else:
        x = np.array([])

    if overlay is not None and overlay.enabled and candles:
        style = overlay.style
        series = overlay.series

        if style.show_background:
            upper = _to_float_array(p.upper for p in series)
            lower = _to_float_array(p.lower for p in series)
            valid = np.isfinite(upper) & np.isfinite(lower)
            ax.fill_between(x, lower, upper, where=valid,
                            color=style.background_rgba, linewidth=0, zorder=1)

        for name in BAND_NAMES:
            line = style.line(name)
            if not line.show:
                continue
            ax.plot(x, _to_float_array(getattr(p, name) for p in series),
                    color=line.color, linewidth=line.effective_width,
                    linestyle=line.dash.mpl_linestyle, label=name.capitalize(),
                    zorder=4)

        if any(style.line(name).show for name in BAND_NAMES):
            ax.legend(loc="upper left", fontsize=9)

        if title is None:
            inputs = overlay.inputs
            title = (f"BOLL({inputs.effective_length}, "
                     f"{float(inputs.std_dev_multiplier):g})")

    ax.set_title(title or "Candles", fontsize=14, fontweight="bold")
    ax.set_ylabel("Price")
    ax.grid(True, alpha=0.25)
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%m-%d %H:%M"))
    fig.autofmt_xdate()
    plt.tight_layout()

    if save_path:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        return save_path

    plt.show()
    plt.close(fig)
    return None
