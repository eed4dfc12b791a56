"""
Navigation events.

``route_resolved`` is sent after every public path resolution with
``request``, ``resolution`` and ``encrypted`` (bool). Receivers must not
raise; the logging receiver below is always connected.
"""

from __future__ import annotations

import logging

from django.dispatch import Signal, receiver

from apps.core.utils.logging import log_event, request_context
from apps.routing.resolvers import NOT_FOUND, resolve_target

logger = logging.getLogger(__name__)

route_resolved = Signal()


@receiver(route_resolved, dispatch_uid="routing.log_navigation")
def log_navigation(sender, request=None, resolution=None, encrypted=False, **kwargs):
    if resolution is None:
        return
    log_event(
        logger,
        "info" if resolution.kind != NOT_FOUND else "warning",
        "Route resolved",
        kind=resolution.kind,
        route_path=resolution.path,
        target=resolve_target(resolution),
        unit=getattr(resolution.unit, "key", None),
        params=dict(resolution.params),
        encrypted=bool(encrypted),
        reason=resolution.reason,
        **request_context(request),
    )
