"""
K 線資料結構

Candle 是整個指標管線的輸入單位：
    timestamp 為 epoch 毫秒（整段序列嚴格遞增），價格為正實數，
    volume 可缺省。產生後不可變。

DataFrame 形式沿用 klines 慣例：index=open_time (UTC)，
columns=[open, high, low, close, volume]。
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

import pandas as pd


_EPOCH = pd.Timestamp(0, tz="UTC")
_ONE_MS = pd.Timedelta(milliseconds=1)


@dataclass(frozen=True)
class Candle:
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float | None = None


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """
    Candle 序列 → OHLCV DataFrame

    Returns:
        DataFrame (index=open_time UTC, cols=[open, high, low, close, volume])
    """
    candles = list(candles)
    index = pd.to_datetime([c.timestamp for c in candles], unit="ms", utc=True)
    df = pd.DataFrame({
        "open": [c.open for c in candles],
        "high": [c.high for c in candles],
        "low": [c.low for c in candles],
        "close": [c.close for c in candles],
        "volume": [c.volume for c in candles],
    }, index=index, dtype=float)
    df.index.name = "open_time"
    return df


def to_epoch_ms(index: pd.DatetimeIndex) -> list[int]:
    """DatetimeIndex → epoch 毫秒（不受 index 時間精度影響）"""
    if index.tz is None:
        index = index.tz_localize("UTC")
    return [int(v) for v in (index - _EPOCH) // _ONE_MS]


def frame_to_candles(df: pd.DataFrame) -> list[Candle]:
    """
    OHLCV DataFrame → Candle 序列

    volume 欄位缺失或為 NaN 時，Candle.volume 為 None。
    """
    timestamps = to_epoch_ms(pd.DatetimeIndex(df.index))
    volumes = df["volume"] if "volume" in df.columns else [None] * len(df)

    candles = []
    for ts, o, h, l, c, v in zip(
        timestamps, df["open"], df["high"], df["low"], df["close"], volumes
    ):
        candles.append(Candle(
            timestamp=ts,
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=None if v is None or pd.isna(v) else float(v),
        ))
    return candles
