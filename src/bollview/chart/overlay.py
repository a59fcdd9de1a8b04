"""
布林帶疊加層狀態

持有目前的 K 線、參數與樣式：
    K 線或參數任何變更 → 標記結果過期，下次讀取時整段重算（無增量更新）
    樣式變更 → 不影響計算結果

繪圖端（plotting 或其他圖表）只消費 series / lines / band_polygon。
"""
from __future__ import annotations
import math
from typing import Sequence

import pandas as pd

from ..data.candles import Candle
from ..indicators.bollinger import (
    BandPoint,
    BollingerResult,
    compute_bollinger_bands,
    shift_band_series,
)
from ..indicators.settings import BollingerInputs, BollingerStyle
from ..utils.log import get_logger

logger = get_logger("bollview.overlay")

BAND_NAMES = ("basis", "upper", "lower")


def _fmt(value: float | None) -> str:
    if value is None or not math.isfinite(value):
        return "-"
    return f"{value:.2f}"


def _fmt_param(value: float) -> str:
    # 20.0 → "20"，2.5 → "2.5"
    return f"{float(value):g}"


class BollingerOverlay:
    """
    布林帶疊加層

    Usage:
        overlay = BollingerOverlay(candles)
        overlay.enable()
        overlay.update_inputs(length=30, offset=2)
        for p in overlay.series: ...
    """

    def __init__(
        self,
        candles: Sequence[Candle] = (),
        inputs: BollingerInputs | None = None,
        style: BollingerStyle | None = None,
        enabled: bool = False,
    ):
        self._candles: list[Candle] = list(candles)
        self._inputs = inputs or BollingerInputs()
        self.style = style or BollingerStyle()
        self.enabled = enabled
        self._result: BollingerResult | None = None

    # ── 狀態變更 ──────────────────────────────────────────────

    @property
    def candles(self) -> list[Candle]:
        return self._candles

    @property
    def inputs(self) -> BollingerInputs:
        return self._inputs

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def set_candles(self, candles: Sequence[Candle]) -> None:
        self._candles = list(candles)
        self._result = None

    def set_inputs(self, inputs: BollingerInputs) -> None:
        self._inputs = inputs
        self._result = None

    def update_inputs(self, **changes) -> BollingerInputs:
        self.set_inputs(self._inputs.with_changes(**changes))
        return self._inputs

    def update_style(self, **changes) -> BollingerStyle:
        self.style = self.style.with_changes(**changes)
        return self.style

    # ── 計算結果 ──────────────────────────────────────────────

    @property
    def result(self) -> BollingerResult:
        """未平移的計算結果（過期時整段重算）"""
        if self._result is None:
            self._result = compute_bollinger_bands(self._candles, self._inputs)
            logger.debug(
                f"重算 BOLL({self._inputs.effective_length}, "
                f"{_fmt_param(self._inputs.std_dev_multiplier)}) "
                f"over {len(self._candles)} bars"
            )
        return self._result

    @property
    def series(self) -> list[BandPoint]:
        """套用 offset 後的序列；未啟用時為空"""
        if not self.enabled or not self._candles:
            return []
        return shift_band_series(self.result.series, self._inputs.effective_offset)

    def lines(self) -> dict[str, list[tuple[int, float | None]]]:
        """
        各條可見線的 (timestamp, value) 點列

        隱藏的線（style.show=False）不出現在結果中。
        """
        series = self.series
        if not series:
            return {}
        return {
            name: [(p.timestamp, getattr(p, name)) for p in series]
            for name in BAND_NAMES
            if self.style.line(name).show
        }

    def band_polygon(self) -> list[tuple[int, float | None]]:
        """
        上下軌之間的填充多邊形：上軌點依序 + 下軌點反序

        背景關閉或無數據時為空。
        """
        series = self.series
        if not series or not self.style.show_background:
            return []
        upper = [(p.timestamp, p.upper) for p in series]
        lower = [(p.timestamp, p.lower) for p in reversed(series)]
        return upper + lower

    def point_at(self, timestamp: int) -> BandPoint | None:
        for p in self.series:
            if p.timestamp == timestamp:
                return p
        return None

    def tooltip(self, timestamp: int) -> str:
        """
        十字游標提示文字

        例如：BOLL(20, 2)  Basis: 101.23  Upper: 103.10  Lower: 99.36
        該時間點沒有數據時回傳空字串。
        """
        p = self.point_at(timestamp)
        if p is None:
            return ""
        return (
            f"BOLL({_fmt_param(self._inputs.length)}, "
            f"{_fmt_param(self._inputs.std_dev_multiplier)})  "
            f"Basis: {_fmt(p.basis)}  Upper: {_fmt(p.upper)}  Lower: {_fmt(p.lower)}"
        )

    def to_frame(self) -> pd.DataFrame:
        """
        平移後序列 → DataFrame (index=open_time UTC, cols=[basis, upper, lower])

        無值以 NaN 表示。
        """
        series = self.series
        index = pd.to_datetime([p.timestamp for p in series], unit="ms", utc=True)
        df = pd.DataFrame({
            name: [getattr(p, name) for p in series]
            for name in BAND_NAMES
        }, index=index, dtype=float)
        df.index.name = "open_time"
        return df
