"""
Semantic Scholar Integration

Cross-domain academic search via the Semantic Scholar Graph API.

API Documentation: https://api.semanticscholar.org/api-docs/

Rate Limits:
- Anonymous: shared pool, frequent 429s under load
- With x-api-key: dedicated allowance
"""

from __future__ import annotations

import logging
from typing import Any

from scholar_search.infrastructure.sources.base_client import BaseSourceAdapter
from scholar_search.models import LiteratureRecord, RecordSource
from scholar_search.shared.exceptions import BadUpstreamResponseError
from scholar_search.shared.identifiers import (
    build_external_ids,
    collapse_whitespace,
    normalize_arxiv_id,
    normalize_doi,
)

logger = logging.getLogger(__name__)

S2_API_BASE = "https://api.semanticscholar.org/graph/v1"
S2_SEARCH_URL = f"{S2_API_BASE}/paper/search"

SEARCH_FIELDS = "title,year,authors,citationCount,abstract,externalIds,url"


class SemanticScholarAdapter(BaseSourceAdapter):
    """
    Semantic Scholar paper search.

    Usage:
        async with SemanticScholarAdapter(SourceConfig(api_key=key)) as s2:
            records = await s2.search("graph neural networks", limit=10)
    """

    source = RecordSource.SEMANTIC_SCHOLAR

    def _default_headers(self) -> dict[str, str]:
        headers = super()._default_headers()
        if self.config.api_key:
            headers["x-api-key"] = self.config.api_key
        return headers

    async def search(self, query: str, limit: int = 20) -> list[LiteratureRecord]:
        params = {"query": query, "limit": limit, "fields": SEARCH_FIELDS}
        data = await self._get_json(S2_SEARCH_URL, params=params)
        if not isinstance(data, dict):
            raise BadUpstreamResponseError("semantic_scholar: unexpected response shape", source=self.name)

        papers = data.get("data") or []
        records = [self._parse_paper(p) for p in papers if isinstance(p, dict)]
        logger.debug(f"Semantic Scholar: {len(records)} records for {query!r}")
        return records

    def _parse_paper(self, paper: dict[str, Any]) -> LiteratureRecord:
        ext = paper.get("externalIds") or {}
        doi = normalize_doi(ext.get("DOI"))
        arxiv_id = normalize_arxiv_id(ext.get("ArXiv"))
        paper_id = paper.get("paperId") or None
        pmid = ext.get("PubMed")
        title = collapse_whitespace(paper.get("title"))
        url = paper.get("url") or None

        year = paper.get("year")
        count = paper.get("citationCount")
        authors = tuple(
            a["name"].strip()
            for a in paper.get("authors") or []
            if isinstance(a, dict) and isinstance(a.get("name"), str) and a["name"].strip()
        )

        return LiteratureRecord(
            id=paper_id or doi or arxiv_id or url or title,
            source=self.source,
            title=title,
            year=year if isinstance(year, int) else None,
            authors=authors,
            abstract=collapse_whitespace(paper.get("abstract")) or None,
            doi=doi,
            url=url,
            citation_count=count if isinstance(count, int) and not isinstance(count, bool) else None,
            external_ids=build_external_ids(
                [
                    ("DOI", doi),
                    ("arXiv", arxiv_id),
                    ("S2", paper_id),
                    ("PMID", str(pmid) if pmid else None),
                ]
            ),
        )
