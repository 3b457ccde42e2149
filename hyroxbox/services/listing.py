"""
Query-string state for the public listing page.

The page is driven entirely by three query parameters:
  - regions: comma-separated region ids (multi-select filter)
  - search:  free text
  - page:    1-based page number

Any filter change drops `page` (back to page 1); page navigation only
touches `page`. static/js/filters.js mirrors these rules in the browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional
from urllib.parse import urlencode

# Largest id a BIGINT (or SQLite INTEGER) column can hold
MAX_ID = 2**63 - 1


def parse_region_ids(raw: Optional[str]) -> List[int]:
    """Parse "1,3,x,3" -> [1, 3]; invalid, non-positive or oversized parts are skipped."""
    if not raw:
        return []
    ids: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        try:
            value = int(part)
        except ValueError:
            continue
        if 0 < value <= MAX_ID and value not in ids:
            ids.append(value)
    return ids


def parse_page(raw: Optional[str]) -> int:
    """Return the page number, or 1 if missing/invalid."""
    if not raw:
        return 1
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return 1
    return value if value >= 1 else 1


@dataclass
class ListingQuery:
    region_ids: List[int] = field(default_factory=list)
    search: str = ""
    page: int = 1

    @classmethod
    def from_params(
        cls,
        regions: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[str] = None,
    ) -> "ListingQuery":
        return cls(
            region_ids=parse_region_ids(regions),
            search=(search or "").strip(),
            page=parse_page(page),
        )

    @property
    def has_filters(self) -> bool:
        return bool(self.region_ids or self.search)

    def _params(self, region_ids: Iterable[int], search: str, page: int) -> dict:
        params = {}
        ids = list(region_ids)
        if ids:
            params["regions"] = ",".join(str(i) for i in ids)
        if search.strip():
            params["search"] = search.strip()
        if page > 1:
            params["page"] = str(page)
        return params

    def _url(self, params: dict) -> str:
        query = urlencode(params)
        return f"/?{query}" if query else "/"

    def url(self) -> str:
        return self._url(self._params(self.region_ids, self.search, self.page))

    def with_page(self, page: int) -> str:
        """Same filters, different page."""
        return self._url(self._params(self.region_ids, self.search, page))

    def with_search(self, search: str) -> str:
        """New search text; resets to page 1."""
        return self._url(self._params(self.region_ids, search, 1))

    def toggle_region(self, region_id: int) -> str:
        """Add or remove one region from the filter; resets to page 1."""
        if region_id in self.region_ids:
            ids = [r for r in self.region_ids if r != region_id]
        else:
            ids = self.region_ids + [region_id]
        return self._url(self._params(ids, self.search, 1))

    def cleared(self) -> str:
        return "/"
