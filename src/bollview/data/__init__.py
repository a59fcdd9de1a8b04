from __future__ import annotations
from .candles import Candle, candles_to_frame, frame_to_candles, to_epoch_ms
from .synthetic import generate_synthetic_candles
from .loader import (
    CandleDataError,
    parse_candles,
    load_candles,
    load_candles_or_synthetic,
)

__all__ = [
    # Core
    "Candle",
    "candles_to_frame",
    "frame_to_candles",
    "to_epoch_ms",
    # Loading
    "CandleDataError",
    "parse_candles",
    "load_candles",
    "load_candles_or_synthetic",
    "generate_synthetic_candles",
]
