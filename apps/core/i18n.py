"""
apps.core.i18n
==============

Content-language handling for English, Dari and Pashto.

The backend stores multilingual fields as ``{"en": ..., "per": ..., "ps": ...}``;
the site itself speaks ``en`` / ``dr`` / ``ps``. This module maps between the
two and picks the visitor's language.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from django.conf import settings
from django.http import HttpRequest

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
RTL_LANGUAGES = frozenset({"dr", "ps"})

# Site language -> key used by the backend for multilingual fields
API_LANGUAGE_MAP = {"en": "en", "dr": "per", "ps": "ps"}

# Fallback order once the requested variant is missing or empty
API_FALLBACK_ORDER = ("en", "per", "ps")

# Browser language tags that mean Dari
_DARI_ALIASES = frozenset({"dr", "fa", "prs", "per"})

SESSION_KEY = "i18nextLng"


def supported_languages() -> tuple[str, ...]:
    return tuple(getattr(settings, "SITE_LANGUAGES", ("en", "dr", "ps")))


def normalize_language(code: Any) -> Optional[str]:
    """Map a raw language tag (``fa-AF``, ``ps``, ``en-US``) to a site language."""
    if not code or not isinstance(code, str):
        return None
    primary = code.strip().lower().replace("_", "-").split("-")[0]
    if primary in _DARI_ALIASES:
        primary = "dr"
    return primary if primary in supported_languages() else None


def text_direction(language: str) -> str:
    return "rtl" if language in RTL_LANGUAGES else "ltr"


def api_language(language: str) -> str:
    return API_LANGUAGE_MAP.get(language, "en")


def _accept_language(header: str) -> Iterable[str]:
    """Yield tags from an Accept-Language header, highest quality first."""
    weighted = []
    for index, part in enumerate(header.split(",")):
        tag, _, params = part.strip().partition(";")
        if not tag or tag == "*":
            continue
        quality = 1.0
        if params.strip().startswith("q="):
            try:
                quality = float(params.strip()[2:])
            except ValueError:
                quality = 0.0
        weighted.append((-quality, index, tag))
    for _, _, tag in sorted(weighted):
        yield tag


def resolve_language(request: HttpRequest) -> str:
    """
    Pick the content language for a request.

    Order: ``?lang=`` query parameter, session, language cookie,
    ``Accept-Language`` header, then the configured default.
    """
    candidates: list[Any] = [request.GET.get("lang")]

    session = getattr(request, "session", None)
    if session is not None:
        candidates.append(session.get(SESSION_KEY))

    cookie_name = getattr(settings, "SITE_LANGUAGE_COOKIE", SESSION_KEY)
    candidates.append(request.COOKIES.get(cookie_name))
    candidates.extend(_accept_language(request.META.get("HTTP_ACCEPT_LANGUAGE", "")))

    for candidate in candidates:
        language = normalize_language(candidate)
        if language:
            return language

    return normalize_language(getattr(settings, "SITE_DEFAULT_LANGUAGE", None)) or DEFAULT_LANGUAGE


def localize(value: Any, language: str = DEFAULT_LANGUAGE) -> str:
    """
    Render a possibly-multilingual backend value as text.

    Dicts return the requested variant, then English, Dari and Pashto, then
    ``""``. Scalars are stringified and lists of scalars are space-joined.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return " ".join("" if isinstance(item, (dict, list)) else str(item) for item in value)
    if not isinstance(value, dict):
        return ""

    preferred = api_language(language)
    for key in (preferred, *API_FALLBACK_ORDER):
        content = value.get(key)
        if content:
            return content if isinstance(content, str) else str(content)
    return ""
