"""
apps.dashboard.auth
-------------------
Back-office sign-in is delegated to the backend. The bearer token and the
user record it returns live in the Django session; every dashboard view is
wrapped in :func:`backend_login_required`.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from django.conf import settings
from django.contrib import messages
from django.http import HttpRequest, HttpResponse, HttpResponseRedirect
from django.utils.translation import gettext as _

from apps.backend.client import SESSION_TOKEN_KEY, BackendError
from apps.core.utils.logging import log_event, request_context

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "backend_user"
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."


def sign_in(request: HttpRequest, token: str, user: Dict[str, Any]) -> None:
    request.session.cycle_key()
    request.session[SESSION_TOKEN_KEY] = token
    request.session[SESSION_USER_KEY] = user


def sign_out(request: HttpRequest) -> None:
    request.session.pop(SESSION_TOKEN_KEY, None)
    request.session.pop(SESSION_USER_KEY, None)


def is_signed_in(request: HttpRequest) -> bool:
    session = getattr(request, "session", None)
    return bool(session is not None and session.get(SESSION_TOKEN_KEY))


def current_user(request: HttpRequest) -> Optional[Dict[str, Any]]:
    if not is_signed_in(request):
        return None
    return request.session.get(SESSION_USER_KEY) or {}


def login_url(next_path: Optional[str] = None) -> str:
    url = settings.DASHBOARD_LOGIN_URL
    if next_path:
        url = f"{url}?{urlencode({'next': next_path})}"
    return url


def backend_login_required(view: Callable[..., HttpResponse]) -> Callable[..., HttpResponse]:
    """
    Require a backend token in the session.

    A 401 from the backend while the view runs means the token expired:
    the session is cleared and the user is sent back to the login page.
    """

    @wraps(view)
    def _wrapped(request: HttpRequest, *args, **kwargs) -> HttpResponse:
        if not is_signed_in(request):
            return HttpResponseRedirect(login_url(request.get_full_path()))
        try:
            return view(request, *args, **kwargs)
        except BackendError as exc:
            if not exc.unauthorized:
                raise
            log_event(logger, "info", "Backend token rejected", **request_context(request))
            sign_out(request)
            messages.warning(request, _(SESSION_EXPIRED_MESSAGE))
            return HttpResponseRedirect(login_url(request.get_full_path()))

    return _wrapped
