"""Newsletter subscriptions."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from apps.backend.client import BackendClient, BackendError

SUBSCRIBE = "newsletter/subscribe"
UNSUBSCRIBE = "newsletter/unsubscribe"

# Backends differ on where the subscriber list lives; tried in order.
SUBSCRIBER_ENDPOINTS = (
    "newsletter",
    "newsletter/subscribers",
    "newsletter/list",
    "admin/newsletter",
)

DEFAULT_PREFERENCES = {"events": True, "news": True, "programs": True}


def subscribe(
    client: BackendClient,
    email: str,
    preferences: Optional[Mapping[str, bool]] = None,
) -> Any:
    return client.post(
        SUBSCRIBE,
        {"email": email, "preferences": dict(preferences or DEFAULT_PREFERENCES)},
    )


def unsubscribe(client: BackendClient, email: str) -> Any:
    return client.post(UNSUBSCRIBE, {"email": email})


def _normalize(body: Any, limit: int) -> Optional[Dict[str, Any]]:
    if isinstance(body, list):
        return {"data": body, "pagination": None}
    if not isinstance(body, dict):
        return None
    if body.get("success"):
        return {
            "data": body.get("data") or [],
            "pagination": body.get("pagination") or body.get("meta"),
        }
    if isinstance(body.get("items"), list):
        return {
            "data": body["items"],
            "pagination": {
                "total": body.get("total"),
                "current": body.get("page"),
                "pages": body.get("pages"),
                "limit": limit,
            },
        }
    return None


def list_subscribers(
    client: BackendClient,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Return ``{"data": [...], "pagination": {...} | None}`` from the first
    endpoint that answers with a recognizable shape.
    """
    params = {"page": page, "limit": limit, "status": status}
    last_error: Optional[BackendError] = None
    for endpoint in SUBSCRIBER_ENDPOINTS:
        try:
            body = client.get(endpoint, params)
        except BackendError as exc:
            last_error = exc
            continue
        normalized = _normalize(body, limit)
        if normalized is not None:
            return normalized
        message = body.get("message") if isinstance(body, dict) else None
        last_error = BackendError(message or "Unexpected response", payload=body)
    raise last_error or BackendError("Failed to fetch newsletter subscribers")
