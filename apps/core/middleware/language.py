"""
apps.core.middleware.language
-----------------------------
Attach the visitor's content language to every request.

- ``request.site_language``: ``en`` / ``dr`` / ``ps``
- ``request.site_direction``: ``ltr`` / ``rtl``
- ``request.api_language``: key used in backend multilingual fields

An explicit ``?lang=`` choice is remembered in the session and in the
language cookie so it survives navigation.
"""

from __future__ import annotations

import logging
from typing import Callable

from django.conf import settings
from django.http import HttpRequest, HttpResponse

from apps.core.i18n import (
    SESSION_KEY,
    api_language,
    normalize_language,
    resolve_language,
    text_direction,
)

logger = logging.getLogger(__name__)

COOKIE_MAX_AGE = 60 * 60 * 24 * 365


class LanguageMiddleware:
    """Resolve and persist the content language."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response
        self.cookie_name = getattr(settings, "SITE_LANGUAGE_COOKIE", SESSION_KEY)

    def __call__(self, request: HttpRequest) -> HttpResponse:
        language = resolve_language(request)
        request.site_language = language
        request.site_direction = text_direction(language)
        request.api_language = api_language(language)

        explicit = normalize_language(request.GET.get("lang"))
        session = getattr(request, "session", None)
        if explicit and session is not None and session.get(SESSION_KEY) != explicit:
            session[SESSION_KEY] = explicit

        response = self.get_response(request)

        if explicit and request.COOKIES.get(self.cookie_name) != explicit:
            response.set_cookie(
                self.cookie_name,
                explicit,
                max_age=COOKIE_MAX_AGE,
                samesite="Lax",
            )
            logger.debug("LanguageMiddleware: language switched to %s", explicit)

        return response
