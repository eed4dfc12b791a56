"""Donations: public submission, admin listing, configured presets."""

from __future__ import annotations

from typing import Any, List, Mapping

from apps.backend.client import BackendClient, BackendError, unwrap

DONATE = "donate"
DONATION_CONFIG = "donation-config"

DEFAULT_PRESET_AMOUNTS = (20, 30, 60, 80)
PAYMENT_METHODS = ("dbt", "cp", "stripe", "paypal")
PERIODS = ("one_time", "monthly", "yearly")


def list_donations(client: BackendClient, *, page: int = 1, limit: int = 10, **filters: Any) -> Any:
    return client.get(DONATE, {"page": page, "limit": limit, **filters})


def get_donation(client: BackendClient, donation_id: str) -> Any:
    return unwrap(client.get(f"{DONATE}/{donation_id}"))


def submit_donation(client: BackendClient, payload: Mapping[str, Any]) -> Any:
    return client.post(DONATE, dict(payload))


def preset_amounts(client: BackendClient) -> List[int]:
    """Configured preset amounts, or the defaults if the backend has none."""
    try:
        config = unwrap(client.get(DONATION_CONFIG))
    except BackendError:
        return list(DEFAULT_PRESET_AMOUNTS)
    amounts = config.get("presetAmounts") if isinstance(config, dict) else None
    if not isinstance(amounts, list):
        return list(DEFAULT_PRESET_AMOUNTS)
    cleaned = []
    for amount in amounts:
        try:
            value = int(amount)
        except (TypeError, ValueError):
            continue
        if value > 0:
            cleaned.append(value)
    return cleaned or list(DEFAULT_PRESET_AMOUNTS)
