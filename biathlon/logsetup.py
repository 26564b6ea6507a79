"""Logger configuration with structured JSON or key=value output."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any, Mapping

_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
}


def _level_name(levelno: int) -> str:
    return _LEVEL_NAMES.get(levelno, logging.getLevelName(levelno))


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="microseconds")


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RESERVED}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object."""

    def __init__(self, time_key: str = "time", static_fields: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self.time_key = time_key
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            self.time_key: _timestamp(record),
            "level": _level_name(record.levelno),
            "msg": record.getMessage(),
        }
        payload.update(self.static_fields)
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _quote(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() or ch in '="' or not ch.isprintable() for ch in text):
        return json.dumps(text, ensure_ascii=False)
    return text


class _TextFormatter(logging.Formatter):
    """Render each record as space-separated key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "time": _timestamp(record),
            "level": _level_name(record.levelno),
            "msg": record.getMessage(),
        }
        fields.update(_extra_fields(record))
        return " ".join(f"{key}={_quote(value)}" for key, value in fields.items())


def _install(name: str, level: int, formatter: logging.Formatter) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def new_logger(component: str, level: int) -> logging.Logger:
    """Return a JSON logger to stdout that tags records with ``component``."""
    formatter = JsonFormatter(time_key="timestamp", static_fields={"component": component})
    return _install(f"biathlon.{component}", level, formatter)


def configure_logger(debug: bool, info: bool, error: bool) -> logging.Logger:
    """Return the application logger for the chosen verbosity.

    The first set flag wins; with no flag only errors are shown, as plain text.
    """
    if debug:
        level = logging.DEBUG
    elif info:
        level = logging.INFO
    elif error:
        level = logging.ERROR
    else:
        return _install("biathlon", logging.ERROR, _TextFormatter())
    return _install("biathlon", level, JsonFormatter())