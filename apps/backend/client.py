"""
apps.backend.client
===================

HTTP client for the organisation's REST backend.

The backend answers either with an envelope
``{"success": bool, "data": ..., "message": ..., "pagination": ...}`` or with a
bare array/object. Every failure (network, timeout, non-2xx status,
``success: false``, unparseable body) is raised as :class:`BackendError`
carrying a message that is safe to show to a visitor.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests
from django.conf import settings
from django.http import HttpRequest
from requests import Response
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException, Timeout

from apps.core.utils.logging import log_event

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error. Please check your internet connection."
TIMEOUT_MESSAGE = "Request timeout. Please try again."
GENERIC_MESSAGE = "An error occurred"

STATUS_MESSAGES = {
    400: "Bad Request. Please check your input.",
    401: "Unauthorized. Please login.",
    403: "Forbidden. You do not have permission.",
    404: "Resource not found.",
}
SERVER_ERROR_MESSAGE = "Server error. Please try again later."

SESSION_TOKEN_KEY = "backend_auth_token"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class BackendError(Exception):
    """A failed call to the REST backend."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def user_message(self) -> str:
        return self.message or GENERIC_MESSAGE

    @property
    def unauthorized(self) -> bool:
        return self.status == 401

    def __repr__(self) -> str:
        return f"BackendError(status={self.status!r}, message={self.message!r})"


def status_message(status: int) -> str:
    if status >= 500:
        return SERVER_ERROR_MESSAGE
    return STATUS_MESSAGES.get(status, GENERIC_MESSAGE)


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def is_envelope(body: Any) -> bool:
    return isinstance(body, dict) and "success" in body


def unwrap(body: Any) -> Any:
    """Return ``data`` from an envelope, or the body itself."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def as_list(body: Any) -> List[Any]:
    """
    Normalize a payload to a list.

    Arrays pass through, a truthy non-array becomes a one-element list,
    anything else becomes ``[]``. Envelopes are unwrapped first.
    """
    data = unwrap(body)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("items", "results", "docs"):
            if isinstance(data.get(key), list):
                return data[key]
    return [data] if data else []


def record_id(item: Any) -> str:
    """Backend records carry ``_id`` (MongoDB) or ``id``."""
    if not isinstance(item, dict):
        return ""
    return str(item.get("_id") or item.get("id") or "")


def with_ids(items: List[Any]) -> List[Any]:
    """Copy each record with a template-friendly ``pk`` key."""
    return [{**item, "pk": record_id(item)} if isinstance(item, dict) else item for item in items]


@dataclass(frozen=True)
class Pagination:
    current: int = 1
    pages: int = 1
    total: int = 0

    @classmethod
    def from_body(cls, body: Any) -> "Pagination":
        raw = body.get("pagination") if isinstance(body, dict) else None
        if not isinstance(raw, dict):
            return cls()

        def _int(value: Any, default: int) -> int:
            try:
                return int(value) if value else default
            except (TypeError, ValueError):
                return default

        return cls(
            current=_int(raw.get("current") or raw.get("page"), 1),
            pages=_int(raw.get("pages") or raw.get("totalPages"), 1),
            total=_int(raw.get("total"), 0),
        )


def clean_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop ``None`` and empty-string values from query parameters."""
    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None and value != ""}


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class BackendClient:
    """Thin ``requests`` wrapper bound to the configured backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.base_url = (base_url or settings.BACKEND_API_BASE_URL).rstrip("/")
        self.timeout = float(timeout or settings.BACKEND_API_TIMEOUT)
        self.token = token
        self.session = session or requests.Session()
        self.request_id = request_id

    # ------------------------------------------------------------------
    def url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _headers(self, *, json_body: bool) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.request_id:
            headers["X-Request-ID"] = self.request_id
        return headers

    # ------------------------------------------------------------------
    def send(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json_body: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> Response:
        """Perform the HTTP call and return the raw response if it is 2xx."""
        url = self.url(endpoint)
        try:
            resp: Response = self.session.request(
                method,
                url,
                params=clean_params(params),
                json=json_body,
                data=data,
                files=files,
                headers=self._headers(json_body=json_body is not None),
                timeout=self.timeout,
            )
        except Timeout:
            log_event(logger, "warning", "Backend timeout", method=method, url=url)
            raise BackendError(TIMEOUT_MESSAGE)
        except RequestsConnectionError as exc:
            log_event(logger, "error", "Backend connection error", method=method, url=url, error=str(exc))
            raise BackendError(NETWORK_ERROR_MESSAGE)
        except RequestException as exc:
            log_event(logger, "error", "Backend request failed", method=method, url=url, error=str(exc))
            raise BackendError(NETWORK_ERROR_MESSAGE)

        if resp.status_code >= 400:
            payload = self._decode(resp, strict=False)
            message = payload.get("message") if isinstance(payload, dict) else None
            log_event(
                logger,
                "warning" if resp.status_code < 500 else "error",
                "Backend returned an error status",
                method=method,
                url=url,
                status=resp.status_code,
            )
            raise BackendError(
                message or status_message(resp.status_code),
                status=resp.status_code,
                payload=payload,
            )
        return resp

    @staticmethod
    def _decode(resp: Response, *, strict: bool = True) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except (ValueError, json.JSONDecodeError):
            if strict:
                raise BackendError("Invalid response from server.", status=resp.status_code)
            return None

    def request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Perform a call and return the decoded JSON body."""
        resp = self.send(method, endpoint, **kwargs)
        body = self._decode(resp)
        if is_envelope(body) and not body.get("success"):
            raise BackendError(
                body.get("message") or GENERIC_MESSAGE,
                status=resp.status_code,
                payload=body,
            )
        return body

    # ------------------------------------------------------------------
    def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, payload: Any = None) -> Any:
        return self.request("POST", endpoint, json_body=payload if payload is not None else {})

    def put(self, endpoint: str, payload: Any = None) -> Any:
        return self.request("PUT", endpoint, json_body=payload if payload is not None else {})

    def patch(self, endpoint: str, payload: Any = None) -> Any:
        return self.request("PATCH", endpoint, json_body=payload if payload is not None else {})

    def delete(self, endpoint: str) -> Any:
        return self.request("DELETE", endpoint)

    def upload(
        self,
        endpoint: str,
        data: Mapping[str, Any],
        files: Mapping[str, Any],
    ) -> Any:
        """Multipart POST (job applications, documents)."""
        return self.request("POST", endpoint, data=data, files=files)


def client_for(request: Optional[HttpRequest] = None, **kwargs: Any) -> BackendClient:
    """
    Build a client for the current request.

    Carries the back-office token stored in the session (if any) and the
    request correlation id.
    """
    token = None
    request_id = None
    if request is not None:
        session = getattr(request, "session", None)
        token = session.get(SESSION_TOKEN_KEY) if session is not None else None
        request_id = getattr(request, "correlation_id", None)
    kwargs.setdefault("token", token)
    kwargs.setdefault("request_id", request_id)
    return BackendClient(**kwargs)
