from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any, Final

from sponsor_api.core.config import settings

TEXT_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s - %(message)s"

# Context passed through ``extra=`` by the services and error handlers.
CONTEXT_FIELDS: Final[tuple[str, ...]] = (
    "user_id",
    "newsletter_id",
    "issue_id",
    "sponsorship_id",
    "issue_count",
    "method",
    "path",
)


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_FIELDS
        if record.__dict__.get(key) is not None
    }


class TextFormatter(logging.Formatter):
    """Human-readable lines with the record's context appended as key=value pairs."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if not context:
            return line
        head, sep, tail = line.partition("\n")
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{head} {pairs}{sep}{tail}"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shipping in deployed environments."""

    def format(self, record: logging.LogRecord) -> str:
        log: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


# Centralized app logging configuration (format + level).
def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if settings.log_format == "json" else TextFormatter())
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        handlers=[handler],
    )
    # SQL statements are logged only when DATABASE_ECHO is set.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )
