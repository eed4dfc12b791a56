"""
Project URL configuration.

Only a handful of paths are wired directly: the back-office under
``/admin/``, form endpoints, the health check and the encrypted ``/e/``
prefix. Every other public path is handed to the page resolver, which owns
the canonical route table.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

from django.conf import settings
from django.urls import include, path, re_path
from django.utils.module_loading import import_string
from django.views.generic import RedirectView

logger = logging.getLogger(__name__)


# =====================================================================
# Lazy view importer
# =====================================================================
def lazy_view(dotted_path: str) -> Callable[..., Any]:
    """
    Import a view lazily at call time.
    Supports function and class-based views.
    """

    def _wrapper(request, *args, **kwargs):
        view_obj = import_string(dotted_path)

        if inspect.isclass(view_obj) and hasattr(view_obj, "as_view"):
            view_callable = view_obj.as_view()
        else:
            view_callable = view_obj

        return view_callable(request, *args, **kwargs)

    return _wrapper


# =====================================================================
# URL Patterns
# =====================================================================
urlpatterns = [
    # Back-office (authenticates against the REST backend)
    path("admin/", include(("apps.dashboard.urls", "dashboard"), namespace="dashboard")),
    # APPEND_SLASH is off; the bare prefix would otherwise reach the page resolver
    path("admin", RedirectView.as_view(url="/admin/", permanent=False)),
    # Public form endpoints that have no page of their own
    path("forms/", include(("apps.outreach.urls", "outreach"), namespace="outreach")),
    # Health check (well-known)
    path(
        ".well-known/health",
        lazy_view("apps.core.views.health_check"),
        name="health_check",
    ),
    # Favicon
    re_path(
        r"^favicon\.ico$",
        RedirectView.as_view(url="/static/favicon.svg", permanent=True),
    ),
]


# =====================================================================
# Static (DEV only)
# =====================================================================
if settings.DEBUG:
    try:
        from django.contrib.staticfiles.urls import staticfiles_urlpatterns

        urlpatterns += staticfiles_urlpatterns()
    except Exception as exc:
        logger.warning("staticfiles_urlpatterns() unavailable: %s", exc)


# =====================================================================
# Page resolvers (must stay last: the canonical view is a catch-all)
# =====================================================================
urlpatterns += [
    re_path(r"^e/(?P<token>.*)$", lazy_view("apps.routing.views.encrypted_page"), name="encrypted_page"),
    re_path(r"^(?P<path>.*)$", lazy_view("apps.routing.views.canonical_page"), name="canonical_page"),
]


# =====================================================================
# Error handlers
# =====================================================================
handler400 = "apps.core.views.error_400_view"
handler403 = "apps.core.views.error_403_view"
handler404 = "apps.core.views.error_404_view"
handler500 = "apps.core.views.error_500_view"
