"""
apps.core.cache
===============

Cache helpers for content fetched from the REST backend.

- Stable digested keys (Redis / LocMem safe)
- Namespaces with a version counter so a whole collection can be
  invalidated without pattern deletes
- Failures are never cached
"""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Optional, TypeVar

from django.core.cache import cache

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

_VERSION_KEY = "content_ns_version::{namespace}"


# =====================================================================
# KEY UTILITIES
# =====================================================================


def _namespaced_key(
    key: str,
    *,
    version: Optional[int] = None,
    namespace: Optional[str] = None,
) -> str:
    """
    Portable canonical key format.

    Example:
        _namespaced_key("projects?page=1", version=3, namespace="projects")
        → "projects::projects?page=1::v3"
    """
    key = (key or "").strip()
    ns = (namespace or "").strip()

    parts: list[str] = []
    if ns:
        parts.append(ns)
    parts.append(key)
    if version is not None:
        parts.append(f"v{int(version)}")
    return "::".join(parts)


def _digest_key(base: str) -> str:
    """Readable prefix plus a digest, safe for any backend key length rules."""
    base = base.replace(" ", "").strip()
    digest = hashlib.sha256(base.encode("utf-8")).hexdigest()[:16]
    return f"{base[:32]}::{digest}"


# =====================================================================
# CONTENT CACHE
# =====================================================================


class ContentCache:
    """Read-through cache for backend payloads, grouped by namespace."""

    @staticmethod
    def namespace_version(namespace: str) -> int:
        try:
            return int(cache.get(_VERSION_KEY.format(namespace=namespace)) or 0)
        except Exception as exc:
            logger.debug("namespace_version failed (%s → %s)", namespace, exc)
            return 0

    @staticmethod
    def invalidate(namespace: str) -> None:
        """Bump a namespace version; older entries become unreachable."""
        key = _VERSION_KEY.format(namespace=namespace)
        try:
            cache.add(key, 0, timeout=None)
            cache.incr(key)
            logger.info("Content cache invalidated (namespace=%s)", namespace)
        except Exception as exc:
            logger.warning("Content cache invalidation failed (%s → %s)", namespace, exc)

    @staticmethod
    def get_or_fetch(
        key: str,
        fetch: Callable[[], Optional[_T]],
        *,
        timeout: int = 60,
        namespace: Optional[str] = None,
    ) -> Optional[_T]:
        """
        Return the cached value for ``key`` or compute it with ``fetch``.

        ``None`` from ``fetch`` means "nothing usable" and is not stored.
        Exceptions raised by ``fetch`` propagate to the caller.
        """
        version = ContentCache.namespace_version(namespace) if namespace else None
        cache_key = _digest_key(_namespaced_key(key, version=version, namespace=namespace))

        try:
            existing = cache.get(cache_key)
            if existing is not None:
                logger.debug("Cache HIT (%s)", cache_key)
                return existing
        except Exception:
            logger.debug("cache.get failed for %s", cache_key)

        logger.debug("Cache MISS (%s), fetching", cache_key)
        value = fetch()
        if value is None or timeout <= 0:
            return value

        try:
            cache.set(cache_key, value, timeout=timeout)
        except Exception:
            logger.debug("cache.set failed (%s)", cache_key)
        return value
