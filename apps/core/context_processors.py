"""
apps.core.context_processors
----------------------------
Site-wide template context: name, content language and text direction.
"""

from __future__ import annotations

from typing import Any, Dict

from django.conf import settings
from django.http import HttpRequest

from apps.core.i18n import DEFAULT_LANGUAGE, supported_languages, text_direction

LANGUAGE_LABELS = {"en": "English", "dr": "دری", "ps": "پښتو"}


def site_context(request: HttpRequest) -> Dict[str, Any]:
    language = getattr(request, "site_language", DEFAULT_LANGUAGE)
    return {
        "site_name": getattr(settings, "SITE_NAME", "Site"),
        "site_language": language,
        "site_direction": getattr(request, "site_direction", text_direction(language)),
        "site_languages": [
            {"code": code, "label": LANGUAGE_LABELS.get(code, code)}
            for code in supported_languages()
        ],
        "csp_nonce": getattr(request, "csp_nonce", ""),
    }
