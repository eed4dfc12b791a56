"""
Development Settings
====================
Overrides production ``settings.py`` for local development.

- DEBUG mode enabled
- HTTPS redirection disabled
- Local-only allowed hosts
- Verbose logging for the local apps
"""

from __future__ import annotations

from .settings import *  # import production defaults

# ============================================================
# Environment / Debug
# ============================================================
DEBUG = True
ENV = "development"

ALLOWED_HOSTS = ["127.0.0.1", "localhost", "0.0.0.0", "testserver"]

TEMPLATES[0]["OPTIONS"]["debug"] = True
STORAGES["staticfiles"]["BACKEND"] = "django.contrib.staticfiles.storage.StaticFilesStorage"


# ============================================================
# Security Overrides (force HTTP)
# ============================================================
SECURE_SSL_REDIRECT = False
SECURE_HSTS_SECONDS = 0
SECURE_HSTS_INCLUDE_SUBDOMAINS = False
SECURE_HSTS_PRELOAD = False

SESSION_COOKIE_SECURE = False
SESSION_COOKIE_SAMESITE = "Lax"

CSRF_COOKIE_SECURE = False
CSRF_COOKIE_HTTPONLY = False
CSRF_COOKIE_SAMESITE = "Lax"

SECURE_PROXY_SSL_HEADER = None

CSRF_TRUSTED_ORIGINS = [
    "http://127.0.0.1:8000",
    "http://localhost:8000",
]


# ============================================================
# Logging Configuration
# ============================================================
LOGGING["root"]["level"] = "DEBUG"

for logger_name in (
    "apps.core",
    "apps.backend",
    "apps.pages",
    "apps.routing",
    "apps.outreach",
    "apps.dashboard",
):
    LOGGING["loggers"].setdefault(
        logger_name,
        {
            "handlers": ["console"],
            "level": "DEBUG",
            "propagate": False,
        },
    )


# ============================================================
# Caching (local memory)
# ============================================================
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "TIMEOUT": 300,
    }
}

# Short-lived content cache so backend edits show up quickly
BACKEND_CONTENT_CACHE_TTL = 5
