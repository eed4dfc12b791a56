import logging
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

from apps.backend.client import BackendError
from apps.core.exceptions import handle_view_exception
from apps.core.utils.logging import log_event, request_context

logger = logging.getLogger(__name__)


class BackendErrorMiddleware:
    """
    Turns a backend failure that escaped its view into a 502.

    Views handle expected failures themselves; this only catches what they
    let through, so visitors never see a traceback for an upstream outage.
    """

    status_code = 502

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception) -> Optional[HttpResponse]:
        if not isinstance(exception, BackendError):
            return None
        log_event(
            logger,
            "error",
            "Unhandled backend error",
            status=exception.status,
            error=exception.user_message,
            **request_context(request),
        )
        return handle_view_exception(request, exception, code=self.status_code)
