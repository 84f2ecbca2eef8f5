"""Structured single-line JSON logging with secret redaction.

get_logger(name) returns a stdlib logger whose records are rendered as one
JSON object per line. Structured context goes in ``extra={"data": {...}}``;
keys that carry credentials (Supabase service keys, Brevo api-key headers)
are replaced by ``[redacted]`` at any nesting depth before formatting.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Iterable


DEFAULT_REDACT_KEYS = [
    "api-key",
    "api_key",
    "apikey",
    "Authorization",
    "service_role_key",
    "access_token",
]


def _redact(value: Any, keys: frozenset) -> Any:
    if isinstance(value, dict):
        return {
            k: "[redacted]" if str(k).lower() in keys else _redact(v, keys)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(v, keys) for v in value]
    return value


class RedactingFilter(logging.Filter):
    def __init__(self, redactions: Iterable[str] | None = None) -> None:
        super().__init__()
        names = redactions if redactions is not None else DEFAULT_REDACT_KEYS
        self.redactions = frozenset(k.lower() for k in names)

    def filter(self, record: logging.LogRecord) -> bool:
        data = getattr(record, "data", None)
        if isinstance(data, dict):
            record.__dict__["data_redacted"] = _redact(data, self.redactions)
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        base = {
            "ts": ts.isoformat().replace("+00:00", "Z"),
            "logger": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        data = record.__dict__.get("data_redacted")
        if data is None:
            data = record.__dict__.get("data")
        if data is not None:
            base["data"] = data
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        try:
            return json.dumps(base, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(base)


def _level_from_env() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str, redactions: Iterable[str] | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    # Repeated calls must not stack handlers
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        handler.addFilter(RedactingFilter(redactions))
        logger.addHandler(handler)
        logger.setLevel(_level_from_env())
        logger.propagate = False
    return logger


__all__ = ["get_logger", "RedactingFilter", "JSONFormatter", "DEFAULT_REDACT_KEYS"]
