"""
Bollinger Bands (布林帶) 指標
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence
import math

import pandas as pd

from .moving_average import calculate_sma, calculate_rolling_std
from .settings import BollingerInputs
from ..data.candles import Candle


def calculate_bollinger_bands(
    source: pd.Series,
    length: int = 20,
    std_mult: float = 2.0
) -> pd.DataFrame:
    """
    計算布林帶指標

    布林帶由三條線組成：
    - 中軌 (basis)：SMA
    - 上軌：中軌 + N倍樣本標準差
    - 下軌：中軌 - N倍樣本標準差

    Args:
        source: 價格序列
        length: 窗口長度（>= 1，由呼叫者先行取整）
        std_mult: 標準差倍數，預設 2.0

    Returns:
        DataFrame 包含以下列：
        - basis: 中軌（SMA）
        - upper: 上軌
        - lower: 下軌
        - bandwidth: 帶寬（(上軌-下軌)/中軌）
        - %b: 價格在布林帶中的位置（0 = 下軌，1 = 上軌）

    Example:
        >>> bb = calculate_bollinger_bands(close, length=20, std_mult=2.0)
        >>> oversold = close < bb['lower']
    """
    basis = calculate_sma(source, length)
    std = calculate_rolling_std(source, length)

    upper = basis + (std * std_mult)
    lower = basis - (std * std_mult)

    bandwidth = (upper - lower) / basis
    percent_b = (source - lower) / (upper - lower)

    return pd.DataFrame({
        "basis": basis,
        "upper": upper,
        "lower": lower,
        "bandwidth": bandwidth,
        "%b": percent_b,
    }, index=source.index)


@dataclass(frozen=True)
class BandPoint:
    """
    單一時間點的布林帶值

    None 表示無值（歷史不足，或平移後沒有來源）；
    NaN / inf 只會來自非有限的輸入價格。
    """
    timestamp: int
    basis: float | None
    upper: float | None
    lower: float | None

    @property
    def is_defined(self) -> bool:
        """三個值都存在且為有限值（可繪製）"""
        return all(
            v is not None and math.isfinite(v)
            for v in (self.basis, self.upper, self.lower)
        )

    @classmethod
    def empty(cls, timestamp: int) -> "BandPoint":
        return cls(timestamp=timestamp, basis=None, upper=None, lower=None)


@dataclass(frozen=True)
class BollingerResult:
    series: list[BandPoint] = field(default_factory=list)
    inputs: BollingerInputs = field(default_factory=BollingerInputs)

    def __len__(self) -> int:
        return len(self.series)


def compute_bollinger_bands(
    candles: Sequence[Candle],
    inputs: BollingerInputs | None = None,
) -> BollingerResult:
    """
    對 K 線序列計算布林帶

    輸出與輸入等長、逐位對應（平移前）。
    前 length-1 個點無值；空輸入回傳空結果；任何數值輸入都不拋例外。

    Args:
        candles: 按時間排序的 K 線
        inputs: 指標參數，None 使用預設值

    Returns:
        BollingerResult（series 未套用 offset，見 shift_band_series）
    """
    if inputs is None:
        inputs = BollingerInputs()
    if not candles:
        return BollingerResult(series=[], inputs=inputs)

    length = inputs.effective_length
    source = pd.Series([inputs.source.select(c) for c in candles], dtype=float)
    bands = calculate_bollinger_bands(source, length, float(inputs.std_dev_multiplier))

    series = []
    for i, (candle, basis, upper, lower) in enumerate(
        zip(candles, bands["basis"], bands["upper"], bands["lower"])
    ):
        if i < length - 1:
            series.append(BandPoint.empty(candle.timestamp))
        else:
            series.append(BandPoint(
                timestamp=candle.timestamp,
                basis=float(basis),
                upper=float(upper),
                lower=float(lower),
            ))

    return BollingerResult(series=series, inputs=inputs)


def shift_band_series(points: Sequence[BandPoint], offset: int) -> list[BandPoint]:
    """
    平移布林帶序列

    來源第 i 點的值移到第 i+offset 點，timestamp 一律取目的位置自己的，
    因此平移後仍與 K 線逐位對應。沒有來源的位置（offset > 0 的開頭、
    offset < 0 的結尾）三個值都為 None。

    Args:
        points: 未平移的序列
        offset: 平移 bar 數（+ 往後 / - 往前），0 原樣回傳

    Returns:
        與輸入等長的新序列
    """
    if offset == 0:
        return list(points)

    n = len(points)
    out = []
    for j, dest in enumerate(points):
        i = j - offset
        if 0 <= i < n:
            src = points[i]
            out.append(BandPoint(
                timestamp=dest.timestamp,
                basis=src.basis,
                upper=src.upper,
                lower=src.lower,
            ))
        else:
            out.append(BandPoint.empty(dest.timestamp))
    return out
