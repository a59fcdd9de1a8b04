"""
合成 K 線

沒有可用的外部數據時（檔案缺失、格式錯誤、筆數不足），
用隨機漫步生成一段 1 分鐘 K 線，讓圖表和指標仍可運作。
"""
from __future__ import annotations
import time

import numpy as np

from .candles import Candle


def generate_synthetic_candles(
    n: int = 240,
    interval_ms: int = 60_000,
    start_price: float = 100.0,
    end_ms: int | None = None,
    seed: int | None = None,
) -> list[Candle]:
    """
    生成隨機漫步 K 線

    每根 K 線：
    - 收盤價變化 ~ U[-0.4, 0.4)，收盤價下限 1
    - 最高 / 最低在實體外延伸 U[0, 0.6)
    - 成交量 ~ U[1000, 1500)

    Args:
        n: K 線數量
        interval_ms: K 線間隔（毫秒），預設 1 分鐘
        start_price: 起始價格
        end_ms: 序列結束時間（epoch 毫秒），None = 現在
        seed: 隨機種子（測試用）

    Returns:
        長度為 n 的 Candle 序列，timestamp 嚴格遞增
    """
    if n <= 0:
        return []

    rng = np.random.default_rng(seed)
    changes = (rng.random(n) - 0.5) * 0.8
    high_ext = rng.random(n) * 0.6
    low_ext = rng.random(n) * 0.6
    volumes = 1000 + rng.random(n) * 500

    if end_ms is None:
        end_ms = int(time.time() * 1000)
    start_ms = end_ms - n * interval_ms

    price = float(start_price)
    out: list[Candle] = []
    for i in range(n):
        o = price
        price = max(1.0, price + float(changes[i]))
        c = price
        out.append(Candle(
            timestamp=start_ms + i * interval_ms,
            open=o,
            high=max(o, c) + float(high_ext[i]),
            low=min(o, c) - float(low_ext[i]),
            close=c,
            volume=float(volumes[i]),
        ))
    return out
