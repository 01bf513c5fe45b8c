# portfolio_engine/utils/logging.py
"""
Logging configuration for the portfolio engine.

Engine modules only ever call logging.getLogger(__name__) and stay silent
until the embedding application opts in:

    from portfolio_engine.utils import setup_logging

    setup_logging()                      # LOG_LEVEL / LOG_FORMAT from settings
    setup_logging("DEBUG", "json")       # explicit

setup_logging installs one stdout handler on the root logger. Calling it
again replaces that handler; handlers installed by the application are left
alone.

Log Levels:
    DEBUG   - Per-asset decisions (no price, dust, dropped auto-invest runs)
    INFO    - Portfolio build summaries
    WARNING - Partial data (a symbol's history could not be collected)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from portfolio_engine.config import settings

# =============================================================================
# CONSTANTS
# =============================================================================

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Exchange client stacks log every request at DEBUG
NOISY_LOGGERS = (
    "urllib3",
    "httpx",
    "httpcore",
    "websockets",
    "binance",
)

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Marks the handler owned by setup_logging
HANDLER_NAME = "portfolio_engine"

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


# =============================================================================
# JSON FORMATTER
# =============================================================================

class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation.

    {"timestamp": "...+00:00", "level": "INFO", "logger": "...",
     "message": "Built portfolio with 4 holdings",
     "extra": {"holdings": 4, "total_current_value": "12500.13"}}

    Values json cannot encode (Decimal, enums) are written as strings.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> logging.Handler:
    """
    Route engine logs to stdout.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: settings.log_level)
        log_format: "text" or "json" (default: settings.log_format)
        suppress_noisy_loggers: Raise exchange client loggers to WARNING

    Returns:
        The installed handler

    Raises:
        ValueError: If level is not a known log level
    """
    level_name = level or settings.log_level
    log_level = resolve_log_level(level_name)
    format_type = (log_format or settings.log_format).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(_build_formatter(format_type))

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    if suppress_noisy_loggers:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name}, format={format_type}",
        extra={"config": {"level": level_name, "format": format_type}},
    )
    return handler


def resolve_log_level(name: str) -> int:
    """
    Map a level name to its logging constant.

    Raises:
        ValueError: If name is not in LOG_LEVELS
    """
    key = name.strip().upper()
    if key not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: '{key}'. Valid levels are: {', '.join(LOG_LEVELS)}"
        )
    return LOG_LEVELS[key]


def _build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "json":
        return JsonFormatter()
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def get_logger(name: str) -> logging.Logger:
    """Named logger; engine modules use logging.getLogger(__name__) directly."""
    return logging.getLogger(name)
