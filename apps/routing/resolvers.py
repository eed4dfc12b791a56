"""
apps.routing.resolvers
======================

Turn a request path into exactly one outcome: render a page unit, redirect,
or not found. Resolvers never raise for unknown or malformed paths.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple

from apps.core.results import Result
from apps.core.utils.logging import log_event
from apps.routing.crypto import ENCRYPTED_PREFIX, original_path
from apps.routing.routes import RouteTable, normalize_path
from apps.routing.tables import NOT_FOUND_PATH

logger = logging.getLogger(__name__)

RENDER = "render"
REDIRECT = "redirect"
NOT_FOUND = "not_found"

# Paths under these prefixes may end in a parameter segment
DYNAMIC_MARKERS: Tuple[str, ...] = (
    "/projects/",
    "/programs/",
    "/resources/",
    "/what-we-do/",
    "/about/",
    "/competencies/",
    "/gallery/",
    "/news/",
    "/events/",
)
DYNAMIC_STARTS: Tuple[str, ...] = ("/blog-",)


@dataclass(frozen=True)
class Resolution:
    kind: str
    path: str
    unit: Any = None
    params: Mapping[str, str] = field(default_factory=dict)
    location: Optional[str] = None
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.kind != NOT_FOUND

    @classmethod
    def render(cls, path: str, unit: Any, params: Optional[Mapping[str, str]] = None) -> "Resolution":
        return cls(RENDER, path, unit=unit, params=dict(params or {}))

    @classmethod
    def redirect(cls, path: str, location: str) -> "Resolution":
        return cls(REDIRECT, path, location=location)

    @classmethod
    def not_found(cls, path: str, reason: str = "") -> "Resolution":
        return cls(NOT_FOUND, path, reason=reason)


def is_dynamic(path: str) -> bool:
    return any(marker in path for marker in DYNAMIC_MARKERS) or path.startswith(DYNAMIC_STARTS)


def split_last_segment(path: str) -> Tuple[str, str]:
    """``/projects/abc123`` -> (``/projects``, ``abc123``)."""
    base, _, segment = normalize_path(path).rpartition("/")
    return base or "/", segment


# ---------------------------------------------------------------------------
# Canonical
# ---------------------------------------------------------------------------


class CanonicalResolver:
    """First-match resolution against the canonical table."""

    def __init__(self, table: RouteTable) -> None:
        self.table = table

    def resolve(self, path: str) -> Resolution:
        path = normalize_path(path)
        match = self.table.lookup(path)
        if match is None:
            return Resolution.not_found(path, "no route")

        handler = match.handler
        target = getattr(handler, "target", None)
        if callable(target):
            return Resolution.redirect(path, target(path))
        return Resolution.render(path, handler, match.params)


# ---------------------------------------------------------------------------
# Encrypted
# ---------------------------------------------------------------------------


class EncryptedResolver:
    """
    Resolution of possibly-opaque ``/e/<token>`` paths.

    The decrypted path is looked up verbatim first. Paths under a dynamic
    prefix that have no entry of their own lose their last segment, and the
    base is looked up instead; the stripped segment is handed to the page
    unit as a parameter named by the matching entry.
    """

    def __init__(
        self,
        table: RouteTable,
        decrypt: Callable[[str], Result[str]] = original_path,
    ) -> None:
        self.table = table
        self.decrypt = decrypt

    def canonical_path(self, path: str) -> Result[str]:
        if not path.startswith(ENCRYPTED_PREFIX):
            return Result.success(path)
        try:
            result = self.decrypt(path)
        except Exception as exc:  # injected decryptors may raise
            log_event(logger, "warning", "Path decryption raised", error=str(exc))
            return Result.failure(str(exc) or exc.__class__.__name__)
        if not result.ok or not result.value:
            log_event(logger, "warning", "Path decryption failed", error=result.error)
            return Result.failure(result.error or "empty path")
        return result

    def resolve(self, path: str) -> Resolution:
        decrypted = self.canonical_path(path or "")
        if not decrypted.ok:
            return Resolution.not_found(path, decrypted.error)

        real = normalize_path(decrypted.value)
        entry = self.table.get(real)
        if entry is not None:
            return Resolution.render(real, entry.handler)

        if is_dynamic(real):
            base, segment = split_last_segment(real)
            entry = self.table.get(base)
            if entry is not None and segment:
                return Resolution.render(real, entry.handler, {entry.param: segment})

        return Resolution.not_found(real, "no encrypted route")


def resolve_target(resolution: Resolution) -> str:
    """Where a visitor ends up: the redirect target, the path, or not-found."""
    if resolution.kind == REDIRECT:
        return resolution.location or NOT_FOUND_PATH
    if resolution.kind == NOT_FOUND:
        return NOT_FOUND_PATH
    return resolution.path
