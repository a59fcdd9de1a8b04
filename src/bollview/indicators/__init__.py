"""
布林帶指標庫

- 序列層：calculate_sma, calculate_rolling_std, calculate_bollinger_bands（pandas）
- K 線層：compute_bollinger_bands, shift_band_series（Candle → BandPoint）
- 參數 / 樣式：BollingerInputs, BollingerStyle
"""
from __future__ import annotations

from .moving_average import calculate_sma, calculate_rolling_std
from .bollinger import (
    BandPoint,
    BollingerResult,
    calculate_bollinger_bands,
    compute_bollinger_bands,
    shift_band_series,
)
from .settings import (
    BandLineStyle,
    BollingerInputs,
    BollingerStyle,
    LineDash,
    MAType,
    SourceField,
)

__all__ = [
    # 序列
    "calculate_sma",
    "calculate_rolling_std",
    "calculate_bollinger_bands",
    # K 線
    "BandPoint",
    "BollingerResult",
    "compute_bollinger_bands",
    "shift_band_series",
    # 參數 / 樣式
    "BollingerInputs",
    "BollingerStyle",
    "BandLineStyle",
    "LineDash",
    "MAType",
    "SourceField",
]
