"""
apps.routing.routes
===================

Immutable, ordered route tables.

A pattern is a path template such as ``/projects/:slugOrId``; each ``:name``
segment matches exactly one non-empty path segment. Lookups try exact static
patterns first and then parametrized patterns in table order; the first
match wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple
from urllib.parse import quote

_PARAM_SEGMENT = re.compile(r"^:([A-Za-z_][A-Za-z0-9_]*)$")


def normalize_path(path: str) -> str:
    """Leading slash, no trailing slash (except for the root), no query."""
    path = (path or "").split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    while "//" in path:
        path = path.replace("//", "/")
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _compile(pattern: str) -> Tuple[Optional[re.Pattern], Tuple[str, ...]]:
    names: list[str] = []
    parts: list[str] = []
    for segment in pattern.strip("/").split("/"):
        if not segment:
            continue
        param = _PARAM_SEGMENT.match(segment)
        if param:
            names.append(param.group(1))
            parts.append(f"(?P<{param.group(1)}>[^/]+)")
        else:
            parts.append(re.escape(segment))
    if not names:
        return None, ()
    return re.compile("^/" + "/".join(parts) + "$"), tuple(names)


@dataclass(frozen=True)
class RouteEntry:
    """
    One row of a route table.

    ``handler`` is opaque to the table. ``param`` names the value a
    resolver should hand over when it matches this entry after stripping a
    trailing segment (encrypted routes only).
    """

    pattern: str
    handler: Any
    name: str = ""
    param: str = "slug"
    _regex: Optional[re.Pattern] = field(default=None, init=False, repr=False, compare=False)
    _params: Tuple[str, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        regex, params = _compile(self.pattern)
        object.__setattr__(self, "_regex", regex)
        object.__setattr__(self, "_params", params)

    @property
    def is_static(self) -> bool:
        return self._regex is None

    @property
    def param_names(self) -> Tuple[str, ...]:
        return self._params

    def match(self, path: str) -> Optional[Dict[str, str]]:
        if self._regex is None:
            return {} if normalize_path(self.pattern) == path else None
        found = self._regex.match(path)
        return dict(found.groupdict()) if found else None

    def build(self, **params: Any) -> str:
        missing = [name for name in self._params if name not in params]
        if missing:
            raise KeyError(f"route {self.name or self.pattern} needs {', '.join(missing)}")
        segments = []
        for segment in self.pattern.strip("/").split("/"):
            param = _PARAM_SEGMENT.match(segment)
            segments.append(quote(str(params[param.group(1)]), safe="") if param else segment)
        return "/" + "/".join(s for s in segments if s)


@dataclass(frozen=True)
class Match:
    entry: RouteEntry
    params: Mapping[str, str]

    @property
    def handler(self) -> Any:
        return self.entry.handler


class RouteTable:
    """Ordered, read-only sequence of :class:`RouteEntry`."""

    def __init__(self, entries: Iterable[RouteEntry]) -> None:
        self._entries: Tuple[RouteEntry, ...] = tuple(entries)
        self._static: Dict[str, RouteEntry] = {}
        for entry in self._entries:
            if entry.is_static:
                self._static.setdefault(normalize_path(entry.pattern), entry)
        self._by_name: Dict[str, RouteEntry] = {}
        for entry in self._entries:
            if entry.name:
                self._by_name.setdefault(entry.name, entry)

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.lookup(path) is not None

    @property
    def static_paths(self) -> Tuple[str, ...]:
        return tuple(self._static)

    def get(self, path: str) -> Optional[RouteEntry]:
        """Exact lookup of a static path (no parameter matching)."""
        return self._static.get(normalize_path(path))

    def lookup(self, path: str) -> Optional[Match]:
        path = normalize_path(path)
        entry = self._static.get(path)
        if entry is not None:
            return Match(entry, {})
        for entry in self._entries:
            if entry.is_static:
                continue
            params = entry.match(path)
            if params is not None:
                return Match(entry, params)
        return None

    def reverse(self, name: str, **params: Any) -> str:
        entry = self._by_name.get(name)
        if entry is None:
            raise KeyError(f"no route named {name!r}")
        return entry.build(**params)
