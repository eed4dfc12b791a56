"""Certificates issued to programme participants."""

from __future__ import annotations

from typing import Any, Mapping

from apps.backend.client import BackendClient, unwrap

CERTIFICATES = "certificates"

STATUSES = ("active", "inactive")


def list_certificates(client: BackendClient, *, page: int = 1, limit: int = 10, **filters: Any) -> Any:
    return client.get(CERTIFICATES, {"page": page, "limit": limit, **filters})


def get_certificate(client: BackendClient, certificate_id: str) -> Any:
    return unwrap(client.get(f"{CERTIFICATES}/{certificate_id}"))


def create_certificate(client: BackendClient, payload: Mapping[str, Any]) -> Any:
    return client.post(CERTIFICATES, dict(payload))


def update_certificate(client: BackendClient, certificate_id: str, payload: Mapping[str, Any]) -> Any:
    return client.put(f"{CERTIFICATES}/{certificate_id}", dict(payload))


def delete_certificate(client: BackendClient, certificate_id: str) -> Any:
    return client.delete(f"{CERTIFICATES}/{certificate_id}")


def toggle_status(client: BackendClient, certificate_id: str) -> Any:
    return client.post(f"{CERTIFICATES}/{certificate_id}/toggle-status")


def statistics(client: BackendClient) -> Any:
    return unwrap(client.get(f"{CERTIFICATES}/statistics"))


def generate_id(client: BackendClient) -> str:
    """Ask the backend for the next free certificate id."""
    data = unwrap(client.post(f"{CERTIFICATES}/generate-id"))
    if isinstance(data, dict):
        return str(data.get("certificateId") or data.get("id") or "")
    return str(data or "")
