"""Logging for the renderer: one `mfen` logger tree, stderr text and optional JSON lines file."""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

LOGGER_NAME = "mfen"
LEVEL_ENV = "MFEN_LOG_LEVEL"

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with `extra=` fields such as event, digest and code copied in."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def level_from_env(default: int = logging.INFO) -> int:
    raw = os.environ.get(LEVEL_ENV, "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def configure_logging(
    log_file: Path | None = None,
    console: bool = True,
    level: int | None = None,
    max_bytes: int = 1_000_000,
    backups: int = 3,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach handlers to the `mfen` logger once; later calls return it unchanged."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(level if level is not None else level_from_env())
    logger.propagate = False

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
        )
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    if console:
        console_handler = logging.StreamHandler(stream or sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(console_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.debug("logging configured", extra={"event": "logging_configured"})
    return logger


def reset_logging() -> None:
    """Close and detach the handlers added by `configure_logging`."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def get_logger(component: str | None = None) -> logging.Logger:
    """The `mfen` logger, or its `mfen.<component>` child."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}" if component else LOGGER_NAME)
