"""Logging setup for hosts embedding the migration engine.

When ``MIGRATION_STRUCTURED_LOGGING=true`` the root logger emits each record
as a single-line JSON object::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "INFO",
        "logger": "migration_engine.differ.npgsql",
        "message": "Adding default sequence DefaultSequence",
        "operation": "CREATE_SEQUENCE",   // present when passed via extra=
        "exc_info": "Traceback ..."       // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any

from migration_engine.config import Settings


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        operation = getattr(record, "operation", None)
        if operation is not None:
            payload["operation"] = operation

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(settings: Settings) -> None:
    """Install root handlers according to *settings*."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if settings.debug else settings.log_level)

    if settings.structured_logging:
        root_logger.handlers.clear()
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)
        logging.getLogger(__name__).info("Structured JSON logging enabled")
    elif not root_logger.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
