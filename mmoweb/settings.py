# mmoweb/settings.py
"""
Project settings.

Everything is driven by environment variables (optionally loaded from a
``.env`` file). Local development overrides live in ``settings_dev``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from django.core.exceptions import ImproperlyConfigured
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Real environment variables win over .env entries.
load_dotenv(BASE_DIR / ".env", override=False)

logger = logging.getLogger("mmoweb")


# ---------------------------
# Helper utilities
# ---------------------------
def env_str(value: Any, default: str = "") -> str:
    return str(value) if value is not None else default


def env_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def env_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def env_list(value: Any, default: list | None = None) -> list:
    if value is None:
        return default or []
    return [v.strip() for v in str(value).split(",") if v.strip()]


# ---------------------------
# Core
# ---------------------------
SECRET_KEY = env_str(
    os.getenv("DJANGO_SECRET_KEY"),
    "django-insecure-development-secret",
)

DEBUG = env_bool(os.getenv("DJANGO_DEBUG", None), False)
ENV = "development" if DEBUG else "production"

SITE_NAME = env_str(os.getenv("SITE_NAME"), "Mission Mind Organization")


# ---------------------------
# Allowed hosts
# ---------------------------
ALLOWED_HOSTS = env_list(
    os.getenv("DJANGO_ALLOWED_HOSTS"), ["127.0.0.1", "localhost", "testserver"]
)
ALLOWED_HOSTS = [h for h in ALLOWED_HOSTS if h and h.strip()]

if not DEBUG and not ALLOWED_HOSTS:
    raise ImproperlyConfigured("ALLOWED_HOSTS cannot be empty when DEBUG=False.")


# ---------------------------
# Installed apps
# ---------------------------
DJANGO_APPS = [
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS = [
    "crispy_forms",
    "crispy_bootstrap5",
]

LOCAL_APPS = [
    "apps.core",
    "apps.backend",
    "apps.pages",
    "apps.routing",
    "apps.outreach",
    "apps.dashboard",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS


# ---------------------------
# Middleware
# ---------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "apps.core.middleware.correlation.CorrelationIdMiddleware",
    "apps.core.middleware.security_headers.SecurityHeadersMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "apps.core.middleware.language.LanguageMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "apps.core.middleware.backend_errors.BackendErrorMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]


# ---------------------------
# Routing / ASGI / WSGI
# ---------------------------
ROOT_URLCONF = "mmoweb.urls"
WSGI_APPLICATION = "mmoweb.wsgi.application"
ASGI_APPLICATION = "mmoweb.asgi.application"

# Trailing slashes are normalized by the page resolver, not by redirects.
APPEND_SLASH = False


# ---------------------------
# Database
# ---------------------------
# All content lives behind the REST backend; nothing is stored locally.
DATABASES: dict[str, Any] = {}


# ---------------------------
# Sessions
# ---------------------------
SESSION_ENGINE = env_str(
    os.getenv("SESSION_ENGINE"), "django.contrib.sessions.backends.cache"
)
SESSION_CACHE_ALIAS = "default"
SESSION_COOKIE_AGE = env_int(os.getenv("SESSION_COOKIE_AGE"), 60 * 60 * 8)

MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"


# ---------------------------
# i18n / timezone
# ---------------------------
LANGUAGE_CODE = env_str(os.getenv("DJANGO_LANGUAGE"), "en-us")
TIME_ZONE = env_str(os.getenv("DJANGO_TIME_ZONE"), "Asia/Kabul")

USE_I18N = True
USE_TZ = True

# Content languages (Dari and Pashto render right-to-left)
SITE_LANGUAGES = ("en", "dr", "ps")
SITE_DEFAULT_LANGUAGE = env_str(os.getenv("SITE_DEFAULT_LANGUAGE"), "en")
SITE_LANGUAGE_COOKIE = "i18nextLng"


# ---------------------------
# Static / Media
# ---------------------------
STATIC_URL = "/static/"
STATICFILES_DIRS = [BASE_DIR / "static"]
STATIC_ROOT = BASE_DIR / "staticfiles"

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": (
            "django.contrib.staticfiles.storage.StaticFilesStorage"
            if DEBUG
            else "whitenoise.storage.CompressedStaticFilesStorage"
        )
    },
}

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"


# ---------------------------
# Templates
# ---------------------------
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "debug": DEBUG,
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "apps.core.context_processors.site_context",
                "apps.dashboard.context_processors.dashboard_user",
            ],
        },
    },
]

CRISPY_ALLOWED_TEMPLATE_PACKS = "bootstrap5"
CRISPY_TEMPLATE_PACK = "bootstrap5"


# ---------------------------
# Caching
# ---------------------------
USE_REDIS = env_bool(os.getenv("USE_REDIS_CACHE"), False)

if USE_REDIS:
    REDIS_URL = env_str(os.getenv("REDIS_URL"), "redis://127.0.0.1:6379/1")
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "IGNORE_EXCEPTIONS": not DEBUG,
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "TIMEOUT": 300,
        }
    }


# ---------------------------
# REST backend
# ---------------------------
BACKEND_API_BASE_URL = env_str(
    os.getenv("BACKEND_API_BASE_URL"), "https://khwanzay.school/bak"
).rstrip("/")
BACKEND_IMAGE_BASE_URL = env_str(
    os.getenv("BACKEND_IMAGE_BASE_URL"), "https://khwanzay.school/bak/"
)
BACKEND_API_TIMEOUT = env_int(os.getenv("BACKEND_API_TIMEOUT"), 30)
BACKEND_CONTENT_CACHE_TTL = env_int(os.getenv("BACKEND_CONTENT_CACHE_TTL"), 60)


# ---------------------------
# Routing / navigation
# ---------------------------
# Must match the passphrase used by links already published under /e/.
URL_ENCRYPTION_KEY = env_str(
    os.getenv("URL_ENCRYPTION_KEY"), "MMO_URL_ENCRYPTION_KEY_2024"
)

ABOUT_SUBNAV_CACHE_KEY = "aboutSubnavItems_v1"
ABOUT_SUBNAV_TTL_SECONDS = env_int(os.getenv("ABOUT_SUBNAV_TTL_SECONDS"), 600)


# ---------------------------
# Forms / dashboard
# ---------------------------
DASHBOARD_SEARCH_DEBOUNCE_MS = env_int(os.getenv("DASHBOARD_SEARCH_DEBOUNCE_MS"), 500)
DASHBOARD_PAGE_SIZE = env_int(os.getenv("DASHBOARD_PAGE_SIZE"), 20)
DASHBOARD_LOGIN_URL = "/admin/login/"

JOB_APPLICATION_MAX_UPLOAD_MB = env_int(os.getenv("JOB_APPLICATION_MAX_UPLOAD_MB"), 5)
FILE_UPLOAD_MAX_MEMORY_SIZE = JOB_APPLICATION_MAX_UPLOAD_MB * 1024 * 1024


# ---------------------------
# Logging
# ---------------------------
LOG_LEVEL = env_str(os.getenv("LOG_LEVEL"), "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "event": {
            "class": "apps.core.utils.logging.EventFormatter",
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "event"}},
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}


# ---------------------------
# Security
# ---------------------------
SECURE_SSL_REDIRECT = env_bool(os.getenv("SECURE_SSL_REDIRECT"), False)

SESSION_COOKIE_SECURE = env_bool(os.getenv("SESSION_COOKIE_SECURE"), False)
CSRF_COOKIE_SECURE = env_bool(os.getenv("CSRF_COOKIE_SECURE"), False)

SESSION_COOKIE_HTTPONLY = True
CSRF_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = env_str(os.getenv("SESSION_COOKIE_SAMESITE"), "Lax")

SECURE_HSTS_SECONDS = env_int(os.getenv("SECURE_HSTS_SECONDS"), 0)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env_bool(os.getenv("SECURE_HSTS_INCLUDE_SUBDOMAINS"), False)
SECURE_HSTS_PRELOAD = env_bool(os.getenv("SECURE_HSTS_PRELOAD"), False)

SECURE_CONTENT_TYPE_NOSNIFF = True

X_FRAME_OPTIONS = env_str(os.getenv("X_FRAME_OPTIONS"), "DENY")
SECURE_REFERRER_POLICY = env_str(os.getenv("SECURE_REFERRER_POLICY"), "strict-origin-when-cross-origin")

# Trusted CSRF origins
_csrf_hosts = [h.strip() for h in ALLOWED_HOSTS if h and not h.startswith("*")]
CSRF_TRUSTED_ORIGINS = []
for host in _csrf_hosts:
    CSRF_TRUSTED_ORIGINS.append(f"https://{host}")
    CSRF_TRUSTED_ORIGINS.append(f"http://{host}")


# ---------------------------
# Startup banner
# ---------------------------
logger.info("Settings loaded (DEBUG=%s, backend=%s)", DEBUG, BACKEND_API_BASE_URL)
