"""Back-office authentication against the backend."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from apps.backend.client import BackendClient, BackendError

LOGIN = "/admin/auth/login"
LOGOUT = "/admin/auth/logout"

INVALID_CREDENTIALS = "Invalid username or password"


def login(client: BackendClient, username: str, password: str) -> Tuple[str, Dict[str, Any]]:
    """Return ``(token, user)``; raises :class:`BackendError` on failure."""
    body = client.post(LOGIN, {"username": username, "password": password})
    data = body.get("data") if isinstance(body, dict) and isinstance(body.get("data"), dict) else {}
    token = (body.get("token") if isinstance(body, dict) else None) or data.get("token")
    if not token:
        raise BackendError(INVALID_CREDENTIALS, payload=body)
    user = (body.get("user") if isinstance(body, dict) else None) or data.get("user") or {}
    return str(token), dict(user)


def logout(client: BackendClient) -> None:
    """Best effort; the local session is cleared regardless."""
    client.post(LOGOUT)
