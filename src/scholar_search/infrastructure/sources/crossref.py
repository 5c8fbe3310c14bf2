"""
Crossref API Integration

Searches Crossref's works index, the registration agency metadata for most
journal DOIs.

API Documentation: https://api.crossref.org/swagger-ui/index.html

Rate Limits:
- Polite pool (with mailto): considerably higher throughput
- Anonymous: throttled, but still served
"""

from __future__ import annotations

import logging
from typing import Any

from scholar_search.infrastructure.sources.base_client import USER_AGENT, BaseSourceAdapter
from scholar_search.models import LiteratureRecord, RecordSource
from scholar_search.shared.exceptions import BadUpstreamResponseError
from scholar_search.shared.identifiers import (
    build_external_ids,
    collapse_whitespace,
    normalize_doi,
    strip_markup,
)

logger = logging.getLogger(__name__)

CROSSREF_API_BASE = "https://api.crossref.org"

# Date fields tried in order when "issued" carries no year
_DATE_FIELDS = ("issued", "published-print", "published-online", "published", "created")


def _first(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else ""
    return value if isinstance(value, str) else ""


def _extract_year(item: dict[str, Any]) -> int | None:
    for key in _DATE_FIELDS:
        parts = (item.get(key) or {}).get("date-parts") or []
        if parts and parts[0] and isinstance(parts[0][0], int):
            return parts[0][0]
    return None


def _extract_authors(item: dict[str, Any]) -> tuple[str, ...]:
    names = []
    for author in item.get("author") or []:
        name = " ".join(p for p in (author.get("given"), author.get("family")) if p)
        if not name:
            name = author.get("name") or ""
        if name.strip():
            names.append(name.strip())
    return tuple(names)


class CrossrefAdapter(BaseSourceAdapter):
    """
    Crossref works search.

    Usage:
        async with CrossrefAdapter(SourceConfig(mailto="you@example.org")) as crossref:
            records = await crossref.search("CRISPR off-target", limit=10)
    """

    source = RecordSource.CROSSREF

    def _default_headers(self) -> dict[str, str]:
        headers = super()._default_headers()
        if self.config.mailto:
            headers["User-Agent"] = f"{USER_AGENT} (mailto:{self.config.mailto})"
        return headers

    async def search(self, query: str, limit: int = 20) -> list[LiteratureRecord]:
        params: dict[str, Any] = {"query": query, "rows": limit}
        if self.config.mailto:
            params["mailto"] = self.config.mailto

        data = await self._get_json(f"{CROSSREF_API_BASE}/works", params=params)
        if not isinstance(data, dict):
            raise BadUpstreamResponseError("crossref: unexpected response shape", source=self.name)

        items = (data.get("message") or {}).get("items") or []
        records = [self._parse_item(item) for item in items if isinstance(item, dict)]
        logger.debug(f"Crossref: {len(records)} records for {query!r}")
        return records

    def _parse_item(self, item: dict[str, Any]) -> LiteratureRecord:
        title = collapse_whitespace(_first(item.get("title")))
        doi = normalize_doi(item.get("DOI"))
        url = item.get("URL") or (f"https://doi.org/{doi}" if doi else None)
        count = item.get("is-referenced-by-count")
        abstract = strip_markup(item.get("abstract")) or None

        return LiteratureRecord(
            id=doi or url or title,
            source=self.source,
            title=title,
            year=_extract_year(item),
            authors=_extract_authors(item),
            abstract=abstract,
            doi=doi,
            url=url,
            citation_count=count if isinstance(count, int) and not isinstance(count, bool) else None,
            external_ids=build_external_ids([("DOI", doi)]),
        )
