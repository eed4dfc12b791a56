"""
apps.core.exceptions
====================

What a visitor is allowed to see when something fails, and the last-resort
mapping from an exception to an HTTP response.

Backend failures carry their own visitor-safe text (``user_message``); every
other exception collapses to a generic sentence unless DEBUG is on. Fetch and
XMLHttpRequest callers get a JSON envelope shaped like the REST backend's
(``success`` / ``message``), browsers get plain text.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.translation import gettext_lazy as _

from apps.core.utils.logging import log_event, request_context

log = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = _("Something went wrong. Please try again.")


def _is_json_request(request: Optional[HttpRequest]) -> bool:
    """True for callers that expect a JSON body back."""
    if request is None:
        return False
    if request.headers.get("x-requested-with") == "XMLHttpRequest":
        return True
    content_type = (request.content_type or "").lower()
    accept = (request.headers.get("accept") or "").lower()
    return (
        content_type.startswith("application/json")
        or content_type.endswith("+json")
        or accept.startswith("application/json")
    )


def user_message(exc: Exception, fallback: Optional[str] = None) -> str:
    """
    Text that is safe to show to a visitor for ``exc``.

    Exceptions that carry a ``user_message`` (backend errors) use it;
    anything else collapses to ``fallback`` or the generic message.
    """
    message = getattr(exc, "user_message", None)
    if message:
        return str(message)
    return str(fallback or GENERIC_ERROR_MESSAGE)


def _visible_message(exc: Exception) -> str:
    if settings.DEBUG:
        return f"{exc.__class__.__name__}: {exc}"
    return user_message(exc)


def json_error_response(
    exc: Exception,
    code: int = 500,
    request: Optional[HttpRequest] = None,
) -> JsonResponse:
    body: Dict[str, Any] = {
        "success": False,
        "message": _visible_message(exc),
        "status": code,
    }
    backend_status = getattr(exc, "status", None)
    if backend_status is not None:
        body["backend_status"] = backend_status
    request_id = getattr(request, "correlation_id", None)
    if request_id:
        body["request_id"] = request_id
    return JsonResponse(body, status=code, json_dumps_params={"ensure_ascii": False})


def handle_view_exception(
    request: HttpRequest,
    exc: Exception,
    code: int = 500,
) -> HttpResponse:
    """Turn ``exc`` into a ``code`` response suited to the caller."""
    log_event(
        log,
        "warning",
        "View exception mapped to response",
        status=code,
        error=exc.__class__.__name__,
        **request_context(request),
    )
    if _is_json_request(request):
        return json_error_response(exc, code=code, request=request)
    return HttpResponse(
        _visible_message(exc),
        status=code,
        content_type="text/plain; charset=utf-8",
    )
