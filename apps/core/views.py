"""
Core views: template selection for page renders, health check and the
project-wide error handlers.

Error handlers follow the caller: JSON for fetch/XHR, otherwise the
not-found page (404) or a static error page.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string, select_template
from django.utils.html import escape
from django.utils.timezone import now
from django.views.decorators.cache import never_cache

from apps.core.exceptions import _is_json_request

logger = logging.getLogger(__name__)

FALLBACK_PAGE = (
    "<!doctype html><html><head><title>{title}</title></head>"
    "<body><h1>{title}</h1><p>Content temporarily unavailable.</p></body></html>"
)


# ============================================================
# RENDERING
# ============================================================
def render_first(
    request: HttpRequest,
    templates: Sequence[str],
    context: Dict[str, Any],
    status: int = 200,
) -> HttpResponse:
    """
    Render the first template in ``templates`` that exists.

    When none of them exists the visitor gets a bare page with the title
    and the miss is logged, so a deploy without a template does not 500.
    """
    try:
        template = select_template(list(templates))
    except TemplateDoesNotExist:
        logger.warning("No template among %s", ", ".join(templates))
        title = context.get("title") or getattr(settings, "SITE_NAME", "Site")
        return HttpResponse(FALLBACK_PAGE.format(title=escape(title)), status=status)
    return HttpResponse(template.render(context, request), status=status)


# ============================================================
# HEALTH
# ============================================================
@never_cache
def health_check(request: HttpRequest) -> JsonResponse:
    """Liveness probe; does not call the REST backend."""
    from mmoweb import __version__

    return JsonResponse(
        {
            "ok": True,
            "version": __version__,
            "time": now().isoformat(),
            "backend": settings.BACKEND_API_BASE_URL,
        }
    )


# ============================================================
# ERROR HANDLERS
# ============================================================
ERROR_CODES = {
    400: "bad_request",
    403: "forbidden",
    404: "not_found",
    500: "server_error",
}


def _error_response(
    request: HttpRequest, status: int, exception: Optional[Exception] = None
) -> HttpResponse:
    code = ERROR_CODES[status]
    if _is_json_request(request):
        return JsonResponse({"success": False, "error": code, "status": status}, status=status)

    context = {
        "status": status,
        "title": code.replace("_", " ").capitalize(),
        "error": str(exception or "") if settings.DEBUG else "",
    }
    candidates = [f"errors/{status}.html"]
    if status == 404:
        candidates.append("pages/not_found.html")
    return render_first(request, candidates, context, status=status)


def error_400_view(request: HttpRequest, exception: Optional[Exception] = None) -> HttpResponse:
    return _error_response(request, 400, exception)


def error_403_view(request: HttpRequest, exception: Optional[Exception] = None) -> HttpResponse:
    return _error_response(request, 403, exception)


def error_404_view(request: HttpRequest, exception: Optional[Exception] = None) -> HttpResponse:
    return _error_response(request, 404, exception)


def error_500_view(request: HttpRequest) -> HttpResponse:
    # Templates may be what broke; the static page does not need the context processors.
    try:
        body = render_to_string("errors/500.html", {"status": 500})
    except Exception:
        logger.exception("Error page failed to render")
        body = FALLBACK_PAGE.format(title="Server error")
    return HttpResponse(body, status=500)
