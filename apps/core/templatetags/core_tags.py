from __future__ import annotations

from typing import Any

from django import template

from apps.core.i18n import DEFAULT_LANGUAGE, localize

register = template.Library()


@register.simple_tag(takes_context=True)
def localized(context, value: Any, language: str = "") -> str:
    """
    Render a multilingual backend value in the page language.

    ``{% localized item.title %}`` or ``{% localized item.title "ps" %}``
    """
    if not language:
        request = context.get("request")
        language = getattr(request, "site_language", None) or context.get(
            "site_language", DEFAULT_LANGUAGE
        )
    return localize(value, language)


@register.filter(name="localize")
def localize_filter(value: Any, language: str = DEFAULT_LANGUAGE) -> str:
    """``{{ item.title|localize:site_language }}``"""
    return localize(value, language or DEFAULT_LANGUAGE)
