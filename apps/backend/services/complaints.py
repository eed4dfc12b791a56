"""Complaints and feedback."""

from __future__ import annotations

from typing import Any

from apps.backend.client import BackendClient

COMPLAINTS = "complaints"

TYPES = ("feedback", "complaint", "suggestion", "other")

# The backend only knows "feedback" and "complaint"
_TYPE_MAPPING = {"suggestion": "feedback", "other": "feedback"}
DEFAULT_SUBJECT = "General Feedback"


def build_payload(*, name: str, email: str, type: str, message: str, subject: str = "") -> dict:
    return {
        "name": name,
        "email": email,
        "type": _TYPE_MAPPING.get(type, type or "feedback"),
        "subject": subject or DEFAULT_SUBJECT,
        "message": message,
    }


def submit(client: BackendClient, **fields: Any) -> Any:
    return client.post(COMPLAINTS, build_payload(**fields))
