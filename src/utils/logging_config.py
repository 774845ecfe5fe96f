"""Structured logging configuration."""

import json
import logging
import sys
from typing import Any

from src.utils.config import get_settings

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

# Libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """JSON lines formatter carrying ``extra=`` fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string with log data
        """
        settings = get_settings()

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "app_name": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Standard text formatter with consistent format."""

    def __init__(self) -> None:
        fmt = "[%(asctime)s] %(levelname)s - %(threadName)s - %(name)s - %(message)s"
        datefmt = "%Y-%m-%d %H:%M:%S"
        super().__init__(fmt=fmt, datefmt=datefmt)


_logging_configured = False


def setup_logging(use_json: bool | None = None, force_reconfigure: bool = False) -> None:
    """
    Configure application logging.

    Installs one stdout handler on the root logger at LOG_LEVEL. Calling it
    again is a no-op unless ``force_reconfigure`` is set.

    Args:
        use_json: Force JSON (True) or text (False) output. Defaults to the
            LOG_JSON setting.
        force_reconfigure: If True, replace an existing configuration.
    """
    global _logging_configured

    if _logging_configured and not force_reconfigure:
        return

    settings = get_settings()
    if use_json is None:
        use_json = settings.LOG_JSON

    root_logger = logging.getLogger()

    # Only drop our own stdout handler; pytest's caplog handler must survive
    for handler in list(root_logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream == sys.stdout:
            root_logger.removeHandler(handler)

    log_level = getattr(logging, settings.LOG_LEVEL)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(JsonFormatter() if use_json else StandardFormatter())
    root_logger.addHandler(console_handler)

    noisy_level = logging.DEBUG if settings.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    _logging_configured = True

    logging.getLogger(__name__).debug(
        f"Logging configured: level={settings.LOG_LEVEL}, "
        f"format={'json' if use_json else 'standard'}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Ensures logging is set up before returning the logger.

    Args:
        name: Name for the logger (typically __name__ from calling module)

    Returns:
        Logger instance
    """
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name)


def reset_logging() -> None:
    """Drop all root handlers and mark logging unconfigured. Used by tests."""
    global _logging_configured

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.WARNING)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)

    _logging_configured = False
