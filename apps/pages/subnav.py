"""
apps.pages.subnav
=================

Secondary navigation of the About section.

Links are only shown for collections the backend actually has content for.
Finding that out costs up to four backend calls, so the resulting list is
kept in the visitor's session for a short time:

    session["aboutSubnavItems_v1"] = {"items": [{to, labelKey, fallback}, ...],
                                      "ts": <epoch millis>}

A stale or unreadable entry is ignored and the probes run again. Two static
entries are always shown after the probed ones.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Sequence

from django.conf import settings

from apps.backend.client import BackendError
from apps.backend.services import about
from apps.core.results import Result
from apps.core.utils.logging import log_event

logger = logging.getLogger(__name__)

DEGRADED_NOTICE = "Some items may be unavailable right now; showing defaults."


@dataclass(frozen=True)
class NavItem:
    to: str
    label_key: str
    fallback: str

    def as_dict(self) -> Dict[str, str]:
        return {"to": self.to, "labelKey": self.label_key, "fallback": self.fallback}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "NavItem":
        return cls(to=str(raw["to"]), label_key=str(raw.get("labelKey", "")), fallback=str(raw.get("fallback", "")))


@dataclass(frozen=True)
class Probe:
    endpoint: str
    params: Optional[Mapping[str, str]]
    item: NavItem


PROBES: Sequence[Probe] = (
    Probe(about.ABOUT, None, NavItem("/about/organization-profile", "about.organizationProfile", "Organization Profile")),
    Probe(about.ORGANIZATION_PROFILE, None, NavItem("/about/mission-vision", "about.missionVision", "Mission & Vision")),
    Probe(about.TEAM_MEMBERS, {"role": "Board"}, NavItem("/about/board-directors", "about.boardOfDirectors", "Board of Directors")),
    Probe(about.TEAM_MEMBERS, {"role": "Executive"}, NavItem("/about/executive-team", "about.executiveTeam", "Executive Team")),
)

STATIC_ITEMS: Sequence[NavItem] = (
    NavItem("/about/strategic-units", "about.strategicUnits", "Strategic Units"),
    NavItem("/about/organizational-structure", "about.orgStructure", "Organizational Structure"),
)


@dataclass(frozen=True)
class SubnavState:
    items: List[NavItem]
    degraded: bool = False
    from_cache: bool = False

    @property
    def notice(self) -> str:
        return DEGRADED_NOTICE if self.degraded else ""


def has_data(body: Any) -> bool:
    """A non-empty array, or any single object, counts as content."""
    data = body["data"] if isinstance(body, dict) and "data" in body else body
    if isinstance(data, list):
        return len(data) > 0
    if isinstance(data, dict):
        return True
    return bool(data)


def merge(items: Sequence[NavItem], static_items: Sequence[NavItem] = STATIC_ITEMS) -> List[NavItem]:
    """Probed or cached items first, then static items whose target is new."""
    seen = {item.to for item in items}
    return list(items) + [item for item in static_items if item.to not in seen]


class AboutSubnav:
    """
    Session-backed navigation list.

    ``store`` is any mutable mapping (the Django session in production),
    ``client`` anything with a ``get(endpoint, params)`` method and
    ``clock`` returns seconds since the epoch.
    """

    def __init__(
        self,
        store: MutableMapping[str, Any],
        client: Any,
        *,
        clock: Callable[[], float] = time.time,
        ttl_seconds: Optional[int] = None,
        cache_key: Optional[str] = None,
        probes: Sequence[Probe] = PROBES,
        static_items: Sequence[NavItem] = STATIC_ITEMS,
    ) -> None:
        self.store = store
        self.client = client
        self.clock = clock
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.ABOUT_SUBNAV_TTL_SECONDS
        self.cache_key = cache_key or settings.ABOUT_SUBNAV_CACHE_KEY
        self.probes = tuple(probes)
        self.static_items = tuple(static_items)

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------
    def read_cache(self) -> Optional[List[NavItem]]:
        raw = self.store.get(self.cache_key)
        if not isinstance(raw, dict):
            return None
        ts, items = raw.get("ts"), raw.get("items")
        if not isinstance(ts, (int, float)) or not isinstance(items, list):
            return None
        if self._now_ms() - ts > self.ttl_seconds * 1000:
            return None
        try:
            return [NavItem.from_dict(item) for item in items]
        except (KeyError, TypeError, AttributeError):
            logger.debug("Ignoring malformed navigation cache entry")
            return None

    def write_cache(self, items: Sequence[NavItem]) -> None:
        self.store[self.cache_key] = {
            "items": [item.as_dict() for item in items],
            "ts": self._now_ms(),
        }

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------
    def run_probe(self, probe: Probe) -> Result[NavItem]:
        try:
            body = self.client.get(probe.endpoint, probe.params)
        except BackendError as exc:
            return Result.failure(exc.user_message)
        if not has_data(body):
            return Result.failure("no data")
        return Result.success(probe.item)

    def probe_all(self) -> List[Result[NavItem]]:
        """All probes concurrently; results come back in probe order."""
        if not self.probes:
            return []
        with ThreadPoolExecutor(max_workers=len(self.probes)) as pool:
            return list(pool.map(self.run_probe, self.probes))

    # ------------------------------------------------------------------
    def load(self) -> SubnavState:
        cached = self.read_cache()
        if cached is not None:
            return SubnavState(merge(cached, self.static_items), from_cache=True)

        results = self.probe_all()
        found = [result.value for result in results if result.ok]
        for probe, result in zip(self.probes, results):
            if not result.ok:
                log_event(logger, "debug", "Navigation probe empty", endpoint=probe.endpoint, error=result.error)

        if not found:
            log_event(logger, "warning", "All navigation probes failed", probes=len(self.probes))
            return SubnavState(list(self.static_items), degraded=True)

        items = merge(found, self.static_items)
        self.write_cache(items)
        return SubnavState(items)
