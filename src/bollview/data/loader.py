"""
OHLCV JSON 載入

來源可以是本地檔案或 http(s) URL，內容為 K 線 dict 的 list：

    [{"timestamp": 1700000000000, "open": 1, "high": 2, "low": 0.5,
      "close": 1.5, "volume": 100}, ...]

timestamp 可為 epoch 毫秒或 ISO 字串（視為 UTC）。
"""
from __future__ import annotations
import json
import math
import numbers
from pathlib import Path

import pandas as pd
import requests

from .candles import Candle
from .synthetic import generate_synthetic_candles
from ..utils.log import get_logger

logger = get_logger("bollview.data")

PRICE_FIELDS = ("open", "high", "low", "close")


class CandleDataError(ValueError):
    """K 線資料格式錯誤（非 list、缺少欄位、時間戳無法解析）"""


def _parse_timestamp(value) -> int:
    if isinstance(value, bool):
        raise CandleDataError(f"無效的 timestamp: {value!r}")
    if isinstance(value, numbers.Number):
        # JSON 的 NaN / Infinity 字面值、超出範圍的 1e400 都會變成非有限值
        if not math.isfinite(value):
            raise CandleDataError(f"無效的 timestamp: {value!r}")
        return int(value)
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise CandleDataError(f"無效的 timestamp: {value!r}") from e
    if ts is pd.NaT:
        raise CandleDataError(f"無效的 timestamp: {value!r}")
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return int(ts.timestamp() * 1000)


def _parse_record(i: int, record) -> Candle:
    if not isinstance(record, dict):
        raise CandleDataError(f"第 {i} 筆不是物件: {record!r}")
    missing = [k for k in ("timestamp", *PRICE_FIELDS) if k not in record]
    if missing:
        raise CandleDataError(f"第 {i} 筆缺少欄位: {missing}")

    try:
        prices = {k: float(record[k]) for k in PRICE_FIELDS}
        volume = float(record.get("volume") or 0.0)
    except (TypeError, ValueError) as e:
        raise CandleDataError(f"第 {i} 筆數值無效: {e}") from e

    bad = [k for k, v in prices.items() if not math.isfinite(v)]
    if bad or not math.isfinite(volume):
        raise CandleDataError(f"第 {i} 筆含非有限數值: {bad or ['volume']}")

    return Candle(timestamp=_parse_timestamp(record["timestamp"]), volume=volume, **prices)


def parse_candles(raw) -> list[Candle]:
    """
    解析原始 JSON 為 Candle 序列

    - 按 timestamp 排序
    - 重複 timestamp 保留最後一筆（與 merge 慣例一致）

    Raises:
        CandleDataError: 格式錯誤
    """
    if not isinstance(raw, list):
        raise CandleDataError(f"K 線資料應為 list，收到 {type(raw).__name__}")

    by_ts: dict[int, Candle] = {}
    for i, record in enumerate(raw):
        candle = _parse_record(i, record)
        by_ts[candle.timestamp] = candle

    dropped = len(raw) - len(by_ts)
    if dropped:
        logger.warning(f"⚠️  丟棄 {dropped} 筆重複 timestamp 的 K 線")

    return [by_ts[ts] for ts in sorted(by_ts)]


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def load_candles(source: str | Path, timeout: float = 10.0) -> list[Candle]:
    """
    從檔案或 URL 載入 K 線

    Raises:
        OSError: 檔案不存在或無法讀取
        requests.RequestException: HTTP 錯誤（含非 2xx 狀態碼）
        CandleDataError: 內容格式錯誤（含非法 JSON）
    """
    if _is_url(source):
        resp = requests.get(str(source), timeout=timeout)
        resp.raise_for_status()
        try:
            raw = resp.json()
        except ValueError as e:
            raise CandleDataError(f"回應不是合法 JSON: {e}") from e
    else:
        text = Path(source).read_text(encoding="utf-8")
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise CandleDataError(f"檔案不是合法 JSON: {e}") from e

    candles = parse_candles(raw)
    logger.info(f"📥 從 {source} 載入 {len(candles)} 根 K 線")
    return candles


def load_candles_or_synthetic(
    source: str | Path | None,
    min_candles: int = 200,
    synthetic_count: int = 240,
    interval_ms: int = 60_000,
    seed: int | None = None,
) -> list[Candle]:
    """
    載入 K 線，失敗或筆數不足時改用合成數據

    Args:
        source: 檔案路徑 / URL；None 直接使用合成數據
        min_candles: 少於此筆數視為不足
        synthetic_count: 合成 K 線數量
        interval_ms: 合成 K 線間隔
        seed: 合成數據隨機種子
    """
    if source is not None:
        try:
            candles = load_candles(source)
        except (OSError, requests.RequestException, CandleDataError) as e:
            logger.warning(f"⚠️  載入 {source} 失敗，改用合成數據: {e}")
        else:
            if len(candles) >= min_candles:
                return candles
            logger.info(
                f"ℹ️  {source} 只有 {len(candles)} 根 K 線（< {min_candles}），改用合成數據"
            )

    return generate_synthetic_candles(synthetic_count, interval_ms=interval_ms, seed=seed)
