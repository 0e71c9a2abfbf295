"""Structured JSON logging with request tenant enrichment."""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from backend.app.config import get_settings

# Task-local, read only by the log filter. Data access never consults it.
log_tenant_id: ContextVar[str | None] = ContextVar("log_tenant_id", default=None)

SECURITY_LOGGER = "backend.app.tenancy.security"

_RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "tenant_id"}


class TenantContextFilter(logging.Filter):
    """Adds the current request's tenant id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.tenant_id = log_tenant_id.get() or ""
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        tenant_id = getattr(record, "tenant_id", "")
        if tenant_id:
            log_data["tenant_id"] = tenant_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED and key not in log_data and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(TenantContextFilter())
    root_logger.addHandler(handler)

    # Security events are never filtered below WARNING.
    logging.getLogger(SECURITY_LOGGER).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
