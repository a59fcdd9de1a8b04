"""
日誌模組

提供統一的 logger 配置，包含：
- SecretFilter: 自動遮蔽 K 線資料來源 URL 中的 token / api key
- BOLLVIEW_LOG_LEVEL: 環境變數覆蓋預設日誌等級
"""
from __future__ import annotations
import logging
import os
import re


class SecretFilter(logging.Filter):
    """
    過濾日誌中的敏感資訊

    資料來源可能是帶簽名參數的 URL（例如 ?token=xxx），
    載入失敗時 URL 會被寫進日誌，這裡負責遮蔽。
    """

    PATTERNS = [
        # ?token=xxx / &access_token=xxx
        (r'((?:access_)?token=)[^&\s]+', r'\1***REDACTED***'),
        # api_key=xxx / apikey=xxx
        (r'(api[_-]?key=)[^&\s]+', r'\1***REDACTED***'),
        # signature=xxx
        (r'(signature=)[^&\s]+', r'\1***REDACTED***'),
    ]

    def _redact(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = self._redact(str(record.msg))

        # 格式化參數也要處理
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._redact(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


_secret_filter = SecretFilter()

# 已配置的 logger 名稱（避免重複配置）
_configured_loggers: set[str] = set()


def _level_from_env() -> int:
    name = os.getenv("BOLLVIEW_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = "bollview") -> logging.Logger:
    """
    取得 logger 實例

    自動配置：
    - 統一的日誌格式
    - SecretFilter 過濾敏感資訊
    - 日誌等級（預設 INFO，可用 BOLLVIEW_LOG_LEVEL 覆蓋）

    Args:
        name: logger 名稱

    Returns:
        配置好的 logger
    """
    logger = logging.getLogger(name)

    if name in _configured_loggers:
        return logger

    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")
        handler.setFormatter(fmt)
        handler.addFilter(_secret_filter)
        logger.addHandler(handler)
        logger.setLevel(_level_from_env())
    else:
        # 已有 handler（例如測試框架加的），確保有 SecretFilter
        for handler in logger.handlers:
            if not any(isinstance(f, SecretFilter) for f in handler.filters):
                handler.addFilter(_secret_filter)

    _configured_loggers.add(name)
    return logger
