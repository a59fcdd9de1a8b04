"""
布林帶參數與樣式

BollingerInputs 決定計算結果（任何變更都觸發整段重算），
BollingerStyle 只影響繪圖。
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
import math
import sys

from ..data.candles import Candle


class SourceField(str, Enum):
    """指標輸入欄位（K 線價格取值器）"""
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"

    def select(self, candle: Candle) -> float:
        return getattr(candle, self.value)


class MAType(str, Enum):
    """中軌移動平均類型"""
    SMA = "SMA"


class LineDash(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"

    @property
    def mpl_linestyle(self) -> str:
        return "--" if self is LineDash.DASHED else "-"


def get_or_default(raw: dict, key: str, default):
    """YAML 空白鍵（`key:`）讀出為 None，視同未設定"""
    value = raw.get(key)
    return default if value is None else value


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        # 容許大小寫差異，例如 "Close" / "sma"
        for member in enum_cls:
            if str(value).lower() == member.value.lower():
                return member
        choices = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"無效的 {enum_cls.__name__}: {value!r}（可選: {choices}）") from None


@dataclass(frozen=True)
class BollingerInputs:
    """
    布林帶輸入參數

    length: 窗口長度，計算前向下取整並至少為 1
        - NaN / -inf → 1
        - +inf → 窗口永遠填不滿（全部無值）
    ma_type: 中軌類型（目前只有 SMA）
    source: 取值欄位，預設 close
    std_dev_multiplier: 標準差倍數，原樣使用（0 → 上下軌與中軌重合）
    offset: 輸出平移 bar 數（+ 往後 / - 往前），向零取整
    """
    length: float = 20
    ma_type: MAType = MAType.SMA
    source: SourceField = SourceField.CLOSE
    std_dev_multiplier: float = 2.0
    offset: float = 0

    @property
    def effective_length(self) -> int:
        length = float(self.length)
        if math.isnan(length):
            return 1
        if math.isinf(length):
            return sys.maxsize if length > 0 else 1
        return max(1, math.floor(length))

    @property
    def effective_offset(self) -> int:
        offset = float(self.offset)
        if not math.isfinite(offset):
            return 0
        return int(offset)

    def with_changes(self, **changes) -> "BollingerInputs":
        """回傳套用變更後的新參數（enum 欄位可用字串，None 回到預設值）"""
        default = BollingerInputs()
        changes = {
            k: getattr(default, k) if v is None else v
            for k, v in changes.items()
        }
        if "ma_type" in changes:
            changes["ma_type"] = _parse_enum(MAType, changes["ma_type"])
        if "source" in changes:
            changes["source"] = _parse_enum(SourceField, changes["source"])
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, raw: dict | None) -> "BollingerInputs":
        raw = raw or {}
        default = cls()
        return cls(
            length=get_or_default(raw, "length", default.length),
            ma_type=_parse_enum(MAType, get_or_default(raw, "ma_type", default.ma_type)),
            source=_parse_enum(SourceField, get_or_default(raw, "source", default.source)),
            std_dev_multiplier=float(get_or_default(raw, "std_dev_multiplier", default.std_dev_multiplier)),
            offset=get_or_default(raw, "offset", default.offset),
        )


@dataclass(frozen=True)
class BandLineStyle:
    """
    單條線的樣式

    width 繪圖時限制在 [1, 5]
    """
    show: bool = True
    color: str = "#22c55e"
    width: float = 2
    dash: LineDash = LineDash.SOLID

    @property
    def effective_width(self) -> float:
        return min(5.0, max(1.0, float(self.width)))

    @classmethod
    def from_dict(cls, raw: dict | None, default: "BandLineStyle") -> "BandLineStyle":
        raw = raw or {}
        return cls(
            show=bool(get_or_default(raw, "show", default.show)),
            color=str(get_or_default(raw, "color", default.color)),
            width=float(get_or_default(raw, "width", default.width)),
            dash=_parse_enum(LineDash, get_or_default(raw, "dash", default.dash)),
        )


# 背景填充為固定灰色，只有透明度可調
BACKGROUND_RGB = (153, 153, 153)


@dataclass(frozen=True)
class BollingerStyle:
    """
    布林帶繪圖樣式

    basis / upper / lower: 三條線的樣式
    show_background: 是否填充上下軌之間的區域
    background_opacity: 填充透明度，繪圖時限制在 [0, 1]
    """
    basis: BandLineStyle = field(default_factory=lambda: BandLineStyle(color="#22c55e"))
    upper: BandLineStyle = field(default_factory=lambda: BandLineStyle(color="#3b82f6"))
    lower: BandLineStyle = field(default_factory=lambda: BandLineStyle(color="#ef4444"))
    show_background: bool = True
    background_opacity: float = 0.12

    @property
    def background_rgba(self) -> tuple[float, float, float, float]:
        """matplotlib 用的 RGBA（0-1）"""
        alpha = min(1.0, max(0.0, float(self.background_opacity)))
        r, g, b = BACKGROUND_RGB
        return (r / 255, g / 255, b / 255, alpha)

    def line(self, name: str) -> BandLineStyle:
        return getattr(self, name)

    def with_changes(self, **changes) -> "BollingerStyle":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, raw: dict | None) -> "BollingerStyle":
        raw = raw or {}
        default = cls()
        return cls(
            basis=BandLineStyle.from_dict(raw.get("basis"), default.basis),
            upper=BandLineStyle.from_dict(raw.get("upper"), default.upper),
            lower=BandLineStyle.from_dict(raw.get("lower"), default.lower),
            show_background=bool(get_or_default(raw, "show_background", default.show_background)),
            background_opacity=float(get_or_default(raw, "background_opacity", default.background_opacity)),
        )
