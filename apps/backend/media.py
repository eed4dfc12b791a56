"""
Absolute URLs for media paths returned by the backend.

Image fields arrive as absolute URLs, as paths under ``includes/images/``
(with or without the ``/bak`` prefix) or as ``{"url": ..., "filename": ...}``
objects.
"""

from __future__ import annotations

from typing import Any, Optional

from django.conf import settings

IMAGE_PREFIXES = ("bak/includes/images/", "includes/images/")

# Hosts that older records still point at
HOST_REWRITES = (
    ("museum.khwanzay.school", "khwanzay.school"),
    ("localhost:3000", "khwanzay.school/bak"),
    ("khwanzay.school/includes/images/", "khwanzay.school/bak/includes/images/"),
)


def image_url(value: Any) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, dict):
        value = value.get("url") or value.get("path") or value.get("filename")
        if not value:
            return None
    if not isinstance(value, str):
        return None

    if value.startswith(("http://", "https://")):
        for old, new in HOST_REWRITES:
            if old in value:
                return value.replace(old, new)
        return value

    api_base = settings.BACKEND_API_BASE_URL.rstrip("/")
    if value.startswith("/bak/") and api_base.endswith("/bak"):
        return f"{api_base}{value[len('/bak'):]}"
    if value.startswith(("/bak/includes/images/", "/includes/images/")):
        return f"{api_base}{value}"

    path = value.lstrip("/")
    for prefix in IMAGE_PREFIXES:
        if path.startswith(prefix):
            path = path[len(prefix):]
            break
    return f"{settings.BACKEND_IMAGE_BASE_URL.rstrip('/')}/{path}"
