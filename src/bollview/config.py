from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import os
import yaml
from dotenv import load_dotenv

from .indicators.settings import BollingerInputs, BollingerStyle, get_or_default


@dataclass(frozen=True)
class DataConfig:
    """
    K 線數據來源

    source: 本地 JSON 路徑或 http(s) URL；None = 直接使用合成數據
        - 可用 ${ENV_VAR} 語法引用環境變數
        - 環境變數 OHLCV_SOURCE 優先於配置檔
    min_candles: 少於此筆數改用合成數據
    synthetic_count: 合成 K 線數量
    synthetic_interval_ms: 合成 K 線間隔（毫秒）
    seed: 合成數據隨機種子（None = 每次不同）
    """
    source: str | None = "./data/ohlcv.json"
    min_candles: int = 200
    synthetic_count: int = 240
    synthetic_interval_ms: int = 60_000
    seed: int | None = None


@dataclass(frozen=True)
class OutputConfig:
    report_dir: str = "./reports"


@dataclass(frozen=True)
class AppConfig:
    data: DataConfig = field(default_factory=DataConfig)
    indicator: BollingerInputs = field(default_factory=BollingerInputs)
    style: BollingerStyle = field(default_factory=BollingerStyle)
    output: OutputConfig = field(default_factory=OutputConfig)

    def get_report_path(self, filename: str) -> Path:
        """
        報告輸出路徑

        結構: reports/bollinger/{filename}
        """
        return Path(self.output.report_dir) / "bollinger" / filename


def _resolve_env_var(value: str | None) -> str | None:
    """
    解析環境變數語法 ${VAR_NAME}

    例如：${OHLCV_URL} → 實際值
    """
    if not value or not isinstance(value, str):
        return value
    if value.startswith("${") and value.endswith("}"):
        env_name = value[2:-1]
        return os.getenv(env_name)
    return value


def load_config(path: str | Path = "config/bollinger.yaml") -> AppConfig:
    load_dotenv()
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    # data 可選
    data_raw = raw.get("data", {}) or {}
    default_data = DataConfig()
    source = _resolve_env_var(data_raw.get("source", default_data.source))
    source = os.getenv("OHLCV_SOURCE") or source
    seed = data_raw.get("seed")
    data = DataConfig(
        source=str(source) if source else None,
        min_candles=int(get_or_default(data_raw, "min_candles", default_data.min_candles)),
        synthetic_count=int(get_or_default(data_raw, "synthetic_count", default_data.synthetic_count)),
        synthetic_interval_ms=int(
            get_or_default(data_raw, "synthetic_interval_ms", default_data.synthetic_interval_ms)
        ),
        seed=int(seed) if seed is not None else None,
    )

    # output 可選（預設 ./reports）
    output_raw = raw.get("output", {})
    output = OutputConfig(**output_raw) if output_raw else OutputConfig()

    return AppConfig(
        data=data,
        indicator=BollingerInputs.from_dict(raw.get("indicator")),
        style=BollingerStyle.from_dict(raw.get("style")),
        output=output,
    )
