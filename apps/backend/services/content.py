"""Generic read access for public page content."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from apps.backend.client import BackendClient, Pagination, unwrap


def fetch(
    client: BackendClient,
    endpoint: str,
    params: Optional[Mapping[str, Any]] = None,
) -> dict:
    """
    Fetch one endpoint and return ``{"data": ..., "pagination": ...}``.

    The shape is plain data so it can be cached.
    """
    body = client.get(endpoint, params)
    pagination = Pagination.from_body(body)
    return {
        "data": unwrap(body),
        "pagination": {
            "current": pagination.current,
            "pages": pagination.pages,
            "total": pagination.total,
        },
    }
