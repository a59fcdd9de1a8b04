"""
移動平均與滾動標準差
"""
from __future__ import annotations
import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view


def calculate_sma(source: pd.Series, length: int) -> pd.Series:
    """
    計算 SMA (簡單移動平均線)

    用累積和做 O(n) 滾動求和：窗口和 = cumsum[i] - cumsum[i - length]，
    等同逐筆加入新值、移除離開窗口的舊值。
    前 length-1 根為 NaN。

    注意：NaN / inf 一旦進入累積和，之後的值都會是非有限值。
    累積和相減的捨入誤差隨序列長度累積（價格量級 × 機器精度 × n），
    對數百根 K 線可忽略；大量數據時可改用 pandas rolling。

    Args:
        source: 輸入序列（通常為收盤價）
        length: 窗口長度（>= 1）

    Returns:
        SMA 值序列（與輸入等長、同 index）
    """
    values = source.to_numpy(dtype=float)
    out = np.full(len(values), np.nan)

    if 1 <= length <= len(values):
        with np.errstate(invalid="ignore", over="ignore"):
            csum = np.cumsum(values)
            window_sum = csum[length - 1:].copy()
            window_sum[1:] -= csum[:-length]
            out[length - 1:] = window_sum / length

    return pd.Series(out, index=source.index)


def calculate_rolling_std(source: pd.Series, length: int) -> pd.Series:
    """
    計算滾動樣本標準差（分母 n-1）

    每個窗口用自己的平均值計算離差平方和。
    窗口只有 1 個值時標準差定義為 0。
    前 length-1 根為 NaN。

    Args:
        source: 輸入序列
        length: 窗口長度（>= 1）

    Returns:
        標準差序列（與輸入等長、同 index）
    """
    values = source.to_numpy(dtype=float)
    out = np.full(len(values), np.nan)

    if length == 1:
        out[:] = 0.0
    elif 1 < length <= len(values):
        windows = sliding_window_view(values, length)
        with np.errstate(invalid="ignore", over="ignore"):
            mean = windows.mean(axis=1, keepdims=True)
            sq_dev = ((windows - mean) ** 2).sum(axis=1)
            out[length - 1:] = np.sqrt(sq_dev / (length - 1))

    return pd.Series(out, index=source.index)
