from __future__ import annotations

from typing import Any, Dict

from django.conf import settings
from django.http import HttpRequest

from apps.dashboard.auth import current_user


def dashboard_user(request: HttpRequest) -> Dict[str, Any]:
    """Signed-in back-office user and admin UI settings."""
    return {
        "dashboard_user": current_user(request),
        "dashboard_search_debounce_ms": settings.DASHBOARD_SEARCH_DEBOUNCE_MS,
    }
