# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Structured logging for the GitHub MCP server.

Records are emitted as one JSON object per line (or plain text when
configured). Event fields passed through log_event() become top-level keys.
In stdio mode stdout carries protocol traffic, so logs must go to stderr.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO
from pathlib import Path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")

# Attributes every LogRecord carries; anything else was passed via extra=
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def event_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields attached to a record through extra="""
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, event fields"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(event_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines; event fields are appended as key=value pairs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = event_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure and return a logger.

    Args:
        name: Logger name (the package name configures every module logger)
        log_level: One of LOG_LEVELS, case-insensitive
        log_format: "json" or "text"
        log_file: Optional file that receives a copy of every record
        stream: Console stream, defaults to stdout

    Returns:
        Configured logger instance

    Raises:
        ValueError: Unknown log level
    """
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {log_level}")

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JSONFormatter() if log_format == "json" else TextFormatter()

    handlers = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    level: str = "INFO",
    **kwargs: Any
) -> None:
    """
    Log structured event with additional fields.

    Args:
        logger: Logger instance
        event: Event name (becomes the message)
        level: Log level
        **kwargs: Additional fields to include in log
    """
    logger.log(getattr(logging, level.upper()), event, extra=kwargs)
