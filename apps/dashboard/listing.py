"""
List helpers shared by the back-office screens.

Lists are fetched one backend page at a time with the search term passed
along. The fetched page is filtered again here across every language
variant of the searched fields, since not every backend endpoint searches
multilingual values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from apps.backend.client import Pagination, as_list, with_ids

SEARCH_LANGUAGES = ("en", "per", "ps")


def searchable_text(value: Any) -> str:
    """Lower-cased text of a plain or multilingual value."""
    if value is None:
        return ""
    if isinstance(value, dict):
        return " ".join(str(value.get(code) or "") for code in SEARCH_LANGUAGES).lower()
    if isinstance(value, (list, tuple)):
        return " ".join(searchable_text(part) for part in value)
    return str(value).lower()


def filter_items(items: Iterable[Mapping[str, Any]], query: str, fields: Sequence[str]) -> List[Mapping[str, Any]]:
    """Items whose ``fields`` contain ``query`` in any language."""
    items = list(items)
    term = (query or "").strip().lower()
    if not term:
        return items
    return [item for item in items if any(term in searchable_text(item.get(field)) for field in fields)]


def page_number(raw: Any) -> int:
    try:
        return max(int(raw), 1)
    except (TypeError, ValueError):
        return 1


@dataclass(frozen=True)
class ListPage:
    items: List[Any]
    number: int = 1
    pages: int = 1
    total: int = 0

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.pages

    @property
    def previous_number(self) -> int:
        return max(self.number - 1, 1)

    @property
    def next_number(self) -> int:
        return min(self.number + 1, self.pages)


def list_page(
    body: Any,
    *,
    query: str = "",
    fields: Sequence[str] = (),
    pagination: Optional[Mapping[str, Any]] = None,
) -> ListPage:
    """Build a :class:`ListPage` from a backend list response."""
    items = filter_items(as_list(body), query, fields) if fields else as_list(body)
    if pagination is not None:
        meta = Pagination.from_body({"pagination": pagination})
    else:
        meta = Pagination.from_body(body)
    total = meta.total or len(items)
    return ListPage(items=with_ids(items), number=meta.current, pages=max(meta.pages, 1), total=total)
