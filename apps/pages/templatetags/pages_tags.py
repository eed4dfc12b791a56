from __future__ import annotations

from typing import Any, Dict

from django import template

from apps.backend.client import client_for
from apps.backend.media import image_url
from apps.pages.subnav import AboutSubnav

register = template.Library()


@register.inclusion_tag("pages/partials/about_subnav.html", takes_context=True)
def about_subnav(context) -> Dict[str, Any]:
    """Secondary About navigation, read from the session cache when fresh."""
    request = context.get("request")
    if request is None or not hasattr(request, "session"):
        return {"items": [], "degraded": False, "notice": "", "current_path": ""}

    state = AboutSubnav(request.session, client_for(request)).load()
    return {
        "items": state.items,
        "degraded": state.degraded,
        "notice": state.notice,
        "current_path": request.path,
    }


@register.filter
def media_url(value: Any) -> str:
    """Absolute URL of a backend image path."""
    return image_url(value) or ""
