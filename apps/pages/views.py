# apps/pages/views.py
"""
Rendering of page units.

Generic units fetch their backend content (cached per collection) and render
``pages/<key>.html`` or a fallback template. Units that need more than that
name their own view; it is called with the unit and the route parameters.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.utils.module_loading import import_string

from apps.backend.client import BackendError, as_list, client_for, record_id, with_ids
from apps.backend.services import content
from apps.core.cache import ContentCache
from apps.core.utils.logging import log_event, request_context
from apps.core.views import render_first
from apps.pages.units import NOT_FOUND, UNITS, PageUnit

logger = logging.getLogger(__name__)

LIST_KEYS = ("items", "results", "docs")


# ============================================================
# CONTENT
# ============================================================
def content_namespace(endpoint: str) -> str:
    """Cache namespace of an endpoint: its first path segment."""
    path = endpoint.split("?", 1)[0].strip("/")
    return path.split("/", 1)[0] or "root"


def load_content(
    request: HttpRequest,
    endpoint: str,
    params: Optional[Mapping[str, Any]] = None,
) -> Tuple[Optional[Dict[str, Any]], Optional[BackendError]]:
    """Fetch (or read from cache) one endpoint; errors are returned, not raised."""
    params = {k: v for k, v in (params or {}).items() if v not in (None, "")}
    key = endpoint + "".join(f"&{k}={params[k]}" for k in sorted(params))
    try:
        payload = ContentCache.get_or_fetch(
            key,
            lambda: content.fetch(client_for(request), endpoint, params),
            timeout=settings.BACKEND_CONTENT_CACHE_TTL,
            namespace=content_namespace(endpoint),
        )
    except BackendError as exc:
        log_event(
            logger,
            "warning",
            "Page content unavailable",
            endpoint=endpoint,
            status=exc.status,
            error=exc.user_message,
            **request_context(request),
        )
        return None, exc
    return payload, None


def content_context(payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    data = payload.get("data") if payload else None
    is_collection = isinstance(data, list) or (
        isinstance(data, dict) and any(isinstance(data.get(k), list) for k in LIST_KEYS)
    )
    return {
        "content": data,
        "items": with_ids(as_list(data)) if is_collection else [],
        "item": {**data, "pk": record_id(data)} if isinstance(data, dict) and not is_collection else None,
        "pagination": (payload or {}).get("pagination"),
    }


# ============================================================
# RENDERING
# ============================================================
def render_not_found(request: HttpRequest, *, reason: str = "") -> HttpResponse:
    unit = UNITS[NOT_FOUND]
    context = {"unit": unit, "title": unit.title, "params": {}, "reason": reason if settings.DEBUG else ""}
    return render_first(request, unit.templates, context, status=unit.status)


def render_unit(
    request: HttpRequest,
    unit: PageUnit,
    params: Optional[Mapping[str, str]] = None,
) -> HttpResponse:
    """Render one page unit with explicit route parameters."""
    params = dict(params or {})
    if unit.view:
        view = import_string(unit.view)
        return view(request, unit=unit, params=params)
    if unit.key == NOT_FOUND:
        return render_not_found(request)

    context: Dict[str, Any] = {
        "unit": unit,
        "title": unit.title,
        "params": params,
        "content_error": "",
    }

    endpoint = unit.endpoint(params)
    if endpoint:
        payload, error = load_content(request, endpoint, {"page": request.GET.get("page")})
        if error is not None and params and error.status == 404:
            return render_not_found(request, reason=error.user_message)
        context.update(content_context(payload))
        if error is not None:
            context["content_error"] = error.user_message

    return render_first(request, unit.templates, context, status=unit.status)


# ============================================================
# UNITS WITH THEIR OWN VIEW
# ============================================================
SITEMAP_SECTIONS = (
    ("About", "/about"),
    ("What We Do", "/what-we-do"),
    ("Projects", "/projects"),
    ("Programs", "/programs"),
    ("Resources", "/resources"),
)


def sitemap(request: HttpRequest, *, unit: PageUnit, params: Mapping[str, str]) -> HttpResponse:
    """Every static public path, grouped by section."""
    from apps.routing.views import get_canonical_resolver

    groups: Dict[str, list] = {label: [] for label, _ in SITEMAP_SECTIONS}
    groups["More"] = []
    for entry in get_canonical_resolver().table:
        if not entry.is_static or entry.pattern == "/not-found" or not isinstance(entry.handler, PageUnit):
            continue
        link = {"path": entry.pattern, "title": entry.handler.title}
        for label, prefix in SITEMAP_SECTIONS:
            if entry.pattern == prefix or entry.pattern.startswith(prefix + "/"):
                groups[label].append(link)
                break
        else:
            groups["More"].append(link)

    context = {
        "unit": unit,
        "title": unit.title,
        "params": params,
        "groups": [(label, links) for label, links in groups.items() if links],
    }
    return render_first(request, unit.templates, context, status=unit.status)


def search(request: HttpRequest, *, unit: PageUnit, params: Mapping[str, str]) -> HttpResponse:
    """News search by free text (``?q=``)."""
    query = (request.GET.get("q") or "").strip()
    context: Dict[str, Any] = {
        "unit": unit,
        "title": unit.title,
        "params": params,
        "query": query,
        "items": [],
        "pagination": None,
        "content_error": "",
    }
    if query:
        payload, error = load_content(request, "news", {"search": query, "page": request.GET.get("page")})
        context.update(content_context(payload))
        if error is not None:
            context["content_error"] = "Error loading search results. Please try again."

    return render_first(request, unit.templates, context, status=unit.status)
