"""Volunteer / partner registrations."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Tuple

from apps.backend.client import BackendClient, unwrap

REGISTRATION = "registration"

STATUSES = ("pending", "reviewed", "approved", "rejected")
INTEREST_AREAS = (
    ("volunteer", "Volunteering"),
    ("donation", "Donation"),
    ("partnership", "Partnership"),
    ("internship", "Internship"),
    ("employment", "Employment"),
    ("other", "Other"),
)
AVAILABLE_HOURS = (
    ("1-5", "1-5 hours per week"),
    ("6-10", "6-10 hours per week"),
    ("11-20", "11-20 hours per week"),
    ("20+", "20+ hours per week"),
)


def submit(client: BackendClient, payload: Mapping[str, Any]) -> Any:
    return client.post(REGISTRATION, dict(payload))


def list_registrations(client: BackendClient, *, page: int = 1, limit: int = 20, **filters: Any) -> Any:
    return client.get(REGISTRATION, {"page": page, "limit": limit, **filters})


def get_registration(client: BackendClient, registration_id: str) -> Any:
    return unwrap(client.get(f"{REGISTRATION}/{registration_id}"))


def update_status(
    client: BackendClient,
    registration_id: str,
    status: str,
    admin_notes: str = "",
) -> Any:
    return client.put(
        f"{REGISTRATION}/{registration_id}/status",
        {"status": status, "adminNotes": admin_notes},
    )


def delete_registration(client: BackendClient, registration_id: str) -> Any:
    return client.delete(f"{REGISTRATION}/{registration_id}")


def statistics(client: BackendClient) -> Any:
    return unwrap(client.get(f"{REGISTRATION}/statistics/overview"))


def bulk_update_status(client: BackendClient, ids: Iterable[str], status: str) -> Any:
    return client.put(f"{REGISTRATION}/bulk-status", {"ids": list(ids), "status": status})


def export_csv(client: BackendClient, filters: Optional[Mapping[str, Any]] = None) -> Tuple[bytes, str]:
    """Return ``(content, content_type)`` of the backend CSV export."""
    resp = client.send("GET", f"{REGISTRATION}/export/csv", params=filters)
    return resp.content, resp.headers.get("Content-Type", "text/csv")
