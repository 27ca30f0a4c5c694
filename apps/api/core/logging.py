"""
Structured logging configuration.

JSON lines in production, plain text locally. Structured context is passed
through `extra={"extra_fields": {...}}`; profile and credential fields in
that context are masked before they reach any handler.
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict
from core.config import settings

REDACTED = "[redacted]"

# Health data and credentials never go to log storage
SENSITIVE_FIELDS = frozenset({
    "password",
    "password_hash",
    "access_token",
    "authorization",
    "email",
    "age",
    "weight_kg",
    "target_weight_kg",
    "height_cm",
    "health_conditions",
})


def redact(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (REDACTED if k.lower() in SENSITIVE_FIELDS else v) for k, v in fields.items()}


class RedactingFilter(logging.Filter):
    """Masks sensitive keys in a record's extra_fields. Never drops records."""

    def filter(self, record: logging.LogRecord) -> bool:
        extra = getattr(record, "extra_fields", None)
        if isinstance(extra, dict):
            record.extra_fields = redact(extra)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with the deployment environment."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "environment": settings.ENVIRONMENT,
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        extra = getattr(record, "extra_fields", None)
        if isinstance(extra, dict):
            log_data["context"] = extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with the structured context appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = getattr(record, "extra_fields", None)
        if extra:
            line += " " + " ".join(f"{k}={v}" for k, v in extra.items())
        return line


def build_formatter() -> logging.Formatter:
    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        return JSONFormatter()
    return TextFormatter()


def setup_logging() -> logging.Logger:
    """
    Configure the root logger once at application start.

    Safe to call again: existing handlers are replaced, not duplicated.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(build_formatter())
    handler.addFilter(RedactingFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # SQL echo is controlled by DEBUG on the engine, not by the log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger
