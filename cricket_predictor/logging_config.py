"""
Structured Logging Configuration

Provides JSON-formatted logging for production use and text format for development.
Integrates with the application's settings to determine log format, level and timezone.

Usage:
    from cricket_predictor.logging_config import setup_logging

    # In application startup
    setup_logging()

    # Then use standard logging
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})
"""

import logging
import sys
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from pythonjsonlogger.json import JsonFormatter

from cricket_predictor.config import LOG_FORMAT, SERVICE_NAME


def _resolve_timezone(name: str | None) -> tzinfo:
    try:
        return ZoneInfo(name or "UTC")
    except (KeyError, ValueError):
        return ZoneInfo("UTC")


class ZonedFormatter(logging.Formatter):
    """Formatter that renders timestamps in a fixed timezone."""

    def __init__(self, *args, tz: tzinfo | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = tz or ZoneInfo("UTC")

    def formatTime(self, record, datefmt=None):
        ct = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return ct.strftime(datefmt)
        return ct.isoformat()


class CustomJsonFormatter(JsonFormatter):
    """
    Custom JSON formatter with zoned timestamps and additional fields.

    Output example:
    {
        "timestamp": "2026-01-30T15:00:00+00:00",
        "level": "WARNING",
        "logger": "cricket_predictor.services.prediction.orchestrator",
        "service": "cricket-predictor",
        "message": "Balanced tier failed, falling back"
    }
    """

    def __init__(self, *args, tz: tzinfo | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = SERVICE_NAME
        self.tz = tz or ZoneInfo("UTC")

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=self.tz).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self.service_name

        # Add location info for errors
        if record.levelno >= logging.ERROR:
            log_record["file"] = record.pathname
            log_record["line"] = record.lineno
            log_record["function"] = record.funcName

        # Move message to end for readability
        if "message" in log_record:
            msg = log_record.pop("message")
            log_record["message"] = msg


def get_text_formatter(tz: tzinfo | None = None) -> logging.Formatter:
    """Get text formatter for development."""
    return ZonedFormatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", tz=tz)


def get_json_formatter(tz: tzinfo | None = None) -> logging.Formatter:
    """Get JSON formatter for production."""
    return CustomJsonFormatter(fmt="%(timestamp)s %(level)s %(logger)s %(message)s", tz=tz)


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.log_level.
        format_type: Log format ('json' or 'text').
                     Defaults to settings.log_format.

    Example:
        # Production (JSON logs)
        setup_logging(level="INFO", format_type="json")

        # Development (text logs)
        setup_logging(level="DEBUG", format_type="text")
    """
    from cricket_predictor.settings import get_settings

    settings = get_settings()
    level = level or settings.log_level
    format_type = format_type or settings.log_format
    tz = _resolve_timezone(settings.tz)

    if format_type.lower() == "json":
        formatter = get_json_formatter(tz)
    else:
        formatter = get_text_formatter(tz)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)

