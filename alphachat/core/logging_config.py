"""
Centralized logging configuration for the AlphaChat backend.

Console output is colored and human-readable; the optional file handler
rotates and writes one JSON object per record. Structured values are passed
through ``extra={"extra_fields": {...}}``.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

SENSITIVE_KEYS = ('password', 'token', 'secret', 'authorization', 'api_key', 'api-key', 'cookie')

# Noisy third-party loggers kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        original = record.levelname
        record.levelname = f"{color}{original:8s}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """Formatter producing one JSON document per log record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            entry.update(filter_sensitive_data(extra_fields))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(config: Any) -> None:
    """
    Configure the root logger from application settings.

    Args:
        config: Settings object exposing the ``log_*`` options
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if config.log_console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root_logger.addHandler(console_handler)

    if config.log_file_enabled:
        log_path = Path(config.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # 10 MB per file, 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        if config.log_json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(
        f"Logging initialized: level={config.log_level.upper()}, "
        f"console={config.log_console_enabled}, file={config.log_file_enabled}"
    )


def filter_sensitive_data(data: Any, sensitive_keys: Optional[Iterable[str]] = None) -> Any:
    """
    Mask values whose key looks like a credential.

    Args:
        data: dict, list, or primitive
        sensitive_keys: key suffixes to mask (defaults to SENSITIVE_KEYS)

    Returns:
        A copy of ``data`` with matching values replaced by "***FILTERED***"
    """
    keys = tuple(sensitive_keys) if sensitive_keys is not None else SENSITIVE_KEYS

    if isinstance(data, dict):
        return {
            key: "***FILTERED***" if str(key).lower().endswith(keys)
            else filter_sensitive_data(value, keys)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [filter_sensitive_data(item, keys) for item in data]
    return data


def truncate_large_data(data: str, max_length: int = 5000) -> str:
    """Cut long strings so a single record cannot flood the log."""
    if len(data) <= max_length:
        return data
    return data[:max_length] + f"... (truncated, total length: {len(data)})"
