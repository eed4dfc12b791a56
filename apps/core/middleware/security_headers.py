"""
apps.core.middleware.security_headers
=====================================

Security headers for every response.

Inline scripts (scroll reset, donation presets) carry ``request.csp_nonce``.
Images may come from the REST backend host; styles and scripts from the CDN
that serves Bootstrap.
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable, Dict, List
from urllib.parse import urlsplit

from django.conf import settings
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_HSTS = "max-age=63072000; includeSubDomains; preload"
ASSET_CDN = "https://cdn.jsdelivr.net"

STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
}


def _origin(url: str) -> str:
    parts = urlsplit(url or "")
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"


def build_csp(nonce: str, backend_origin: str = "") -> str:
    """Content-Security-Policy allowing this site, the CDN and backend images."""
    img_src: List[str] = ["'self'", "data:", "https:"]
    # https: already covers a TLS backend; a plain-http one has to be named.
    if backend_origin.startswith("http:"):
        img_src.append(backend_origin)

    directives: Dict[str, List[str]] = {
        "default-src": ["'self'"],
        "script-src": ["'self'", f"'nonce-{nonce}'", ASSET_CDN],
        "style-src": ["'self'", f"'nonce-{nonce}'", ASSET_CDN],
        "img-src": img_src,
        "connect-src": ["'self'"],
        "frame-ancestors": ["'none'"],
        "form-action": ["'self'"],
    }
    return "; ".join(f"{name} {' '.join(values)}" for name, values in directives.items())


class SecurityHeadersMiddleware:
    """Attach the security headers and a fresh CSP nonce to each request."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response
        self.hsts_value = getattr(settings, "SECURITY_HSTS_VALUE", DEFAULT_HSTS)
        self.backend_origin = _origin(getattr(settings, "BACKEND_IMAGE_BASE_URL", ""))
        logger.info(
            "SecurityHeadersMiddleware initialized (DEBUG=%s, backend_origin=%s)",
            settings.DEBUG,
            self.backend_origin or "-",
        )

    def _wants_hsts(self, request: HttpRequest) -> bool:
        if settings.DEBUG or not self.hsts_value:
            return False
        forwarded = request.META.get("HTTP_X_FORWARDED_PROTO", "")
        return request.is_secure() or forwarded.startswith("https")

    def __call__(self, request: HttpRequest) -> HttpResponse:
        nonce = secrets.token_urlsafe(16)
        request.csp_nonce = nonce

        response = self.get_response(request)

        for header, value in STATIC_HEADERS.items():
            response[header] = value
        response.setdefault("Content-Security-Policy", build_csp(nonce, self.backend_origin))
        if self._wants_hsts(request):
            response["Strict-Transport-Security"] = self.hsts_value
        return response
