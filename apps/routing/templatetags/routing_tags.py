from __future__ import annotations

from django import template

from apps.routing.crypto import encrypted_route

register = template.Library()


@register.simple_tag
def route_url(name: str, **params) -> str:
    """Canonical path of a named public route, ``""`` if unknown."""
    from apps.routing.views import get_canonical_resolver

    try:
        return get_canonical_resolver().table.reverse(name, **params)
    except KeyError:
        return ""


@register.simple_tag
def encrypted_url(path: str) -> str:
    """``/e/<token>`` link for a canonical path."""
    return encrypted_route(path)
