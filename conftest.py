import os

import django
from django.conf import settings


def pytest_configure():
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mmoweb.settings")
    os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
    # Tests never reach the real backend; keep any accidental call local and fast.
    os.environ.setdefault("BACKEND_API_BASE_URL", "http://backend.invalid/bak")
    os.environ.setdefault("BACKEND_API_TIMEOUT", "2")
    if not settings.configured:
        django.setup()
