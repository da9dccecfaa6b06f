"""Structured logging configuration for the exporter."""

import json
import logging
import sys
from typing import Any

from .utils.context import get_context_dict

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_json_events = False


class JsonFormatter(logging.Formatter):
    """Render every record as one JSON document per line.

    Records logged through log_probe_event carry their fields in
    ``event_data``; those fields are merged into the document.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
        }
        event_data = getattr(record, "event_data", None)
        if event_data:
            log_data.update(event_data)
        else:
            log_data.update(get_context_dict({"message": record.getMessage()}))
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def setup_structured_logging(level: str = "info", json_format: bool = False) -> None:
    """Configure process logging.

    Args:
        level: Log level name
        json_format: Emit every log line as a JSON document
    """
    global _json_events
    _json_events = json_format
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(_PLAIN_FORMAT))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
    # botocore is chatty at debug level
    logging.getLogger("botocore").setLevel(max(logging.INFO, logging.getLogger().level))


def log_probe_event(
    logger: logging.Logger,
    operation: str,
    event: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured probe event."""
    log_data = get_context_dict(
        {
            "operation": operation,
            "event": event,
            "message": message,
        }
    )
    log_data.update(kwargs)
    log_data = sanitize_secrets(log_data)
    if _json_events:
        logger.log(level, message, extra={"event_data": log_data})
    else:
        logger.log(level, " ".join(f"{key}={value}" for key, value in log_data.items()))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Remove secret fields from log data."""
    secret_fields = {"api_key", "access_key", "secret_key", "secret_access_key", "session_token", "password"}
    sanitized = log_data.copy()
    for field in secret_fields:
        if field in sanitized:
            sanitized[field] = "***REDACTED***"
    return sanitized
