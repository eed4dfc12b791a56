"""
apps.routing.views
==================

Catch-all views for public paths.

``canonical_page`` serves every readable path; ``encrypted_page`` serves
``/e/<token>`` links. Both resolve to exactly one outcome and hand rendering
to :mod:`apps.pages.views`.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from django.http import HttpRequest, HttpResponse, HttpResponseRedirect

from apps.pages.views import render_not_found, render_unit
from apps.routing.resolvers import (
    NOT_FOUND,
    REDIRECT,
    CanonicalResolver,
    EncryptedResolver,
    Resolution,
)
from apps.routing.signals import route_resolved
from apps.routing.tables import build_canonical_table, build_encrypted_table

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_canonical_resolver() -> CanonicalResolver:
    return CanonicalResolver(build_canonical_table())


@lru_cache(maxsize=1)
def get_encrypted_resolver() -> EncryptedResolver:
    return EncryptedResolver(build_encrypted_table())


def respond(request: HttpRequest, resolution: Resolution, *, encrypted: bool = False) -> HttpResponse:
    """Announce a resolution and turn it into a response."""
    route_resolved.send(
        sender=CanonicalResolver if not encrypted else EncryptedResolver,
        request=request,
        resolution=resolution,
        encrypted=encrypted,
    )

    if resolution.kind == REDIRECT:
        return HttpResponseRedirect(resolution.location)
    if resolution.kind == NOT_FOUND:
        return render_not_found(request, reason=resolution.reason)
    return render_unit(request, resolution.unit, resolution.params)


def canonical_page(request: HttpRequest, path: str = "") -> HttpResponse:
    resolution = get_canonical_resolver().resolve(request.path_info)
    return respond(request, resolution)


def encrypted_page(request: HttpRequest, token: str = "") -> HttpResponse:
    resolution = get_encrypted_resolver().resolve(request.path_info)
    return respond(request, resolution, encrypted=True)
