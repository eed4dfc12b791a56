import logging
import re
import uuid
from typing import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

_VALID_ID = re.compile(r"^[A-Za-z0-9._-]{8,64}$")


class CorrelationIdMiddleware:
    """
    Adds a per-request correlation ID for traceability across logs.

    An incoming ``X-Request-ID`` is reused when it looks sane, so the id can
    be followed from a reverse proxy down to backend calls.
    """

    header_name = "X-Request-ID"

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        incoming = request.META.get("HTTP_" + self.header_name.replace("-", "_").upper(), "")
        correlation_id = incoming if _VALID_ID.match(incoming) else uuid.uuid4().hex
        request.correlation_id = correlation_id
        response = self.get_response(request)
        response[self.header_name] = correlation_id
        return response
