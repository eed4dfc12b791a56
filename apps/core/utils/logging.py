from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.http import HttpRequest

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_event(logger: logging.Logger, level: str, message: str, **extra: Any) -> None:
    """
    Structured logging helper. Adds an 'event' payload via `extra` without
    raising if the logger is misconfigured.
    """
    try:
        logger.log(_LEVELS.get(level, logging.INFO), message, extra={"event": extra})
    except Exception:
        # Never let logging break app flow
        return


def request_context(request: Optional[HttpRequest]) -> Dict[str, Any]:
    """Small, log-safe description of a request for event payloads."""
    if request is None:
        return {}
    return {
        "request_id": getattr(request, "correlation_id", None),
        "method": request.method,
        "path": request.path,
    }


class EventFormatter(logging.Formatter):
    """Appends the ``log_event`` payload as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        event = getattr(record, "event", None)
        if not event:
            return line
        pairs = " ".join(f"{key}={value!r}" for key, value in event.items() if value not in (None, "", {}))
        return f"{line} | {pairs}" if pairs else line
