"""
PubMed E-utilities Integration

Two flows share one adapter:

- search: esearch (ids) -> esummary (bibliographic JSON) -> efetch (MEDLINE
  abstracts), producing LiteratureRecords for aggregation
- single paper: pmid, or the best Title/Abstract match for a query, resolved
  to a PubMedPaper

API Documentation: https://www.ncbi.nlm.nih.gov/books/NBK25501/

Rate Limits:
- Without API key: 3 requests/second
- With API key: 10 requests/second
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

import httpx

from scholar_search.config import SourceConfig
from scholar_search.infrastructure.sources.base_client import BaseSourceAdapter
from scholar_search.infrastructure.sources.medline import parse_abstracts
from scholar_search.models import LiteratureRecord, PubMedPaper, RecordSource
from scholar_search.shared.exceptions import (
    BadUpstreamResponseError,
    InvalidInputError,
    NotFoundError,
)
from scholar_search.shared.identifiers import build_external_ids, collapse_whitespace, normalize_doi

logger = logging.getLogger(__name__)

EUTILS_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"

MAX_AUTHORS = 20
COURTESY_DELAY = 0.06

_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")


def _summary_year(summary: dict[str, Any]) -> str | None:
    pubdate = summary.get("pubdate")
    if isinstance(pubdate, str):
        match = _YEAR_RE.search(pubdate)
        if match:
            return match.group(0)
    return None


def _summary_doi(summary: dict[str, Any]) -> str | None:
    for article_id in summary.get("articleids") or []:
        if isinstance(article_id, dict) and (article_id.get("idtype") or "").lower() == "doi":
            return article_id.get("value") or None
    return None


def _summary_authors(summary: dict[str, Any]) -> tuple[str, ...]:
    names = [
        a["name"]
        for a in summary.get("authors") or []
        if isinstance(a, dict) and isinstance(a.get("name"), str) and a["name"]
    ]
    return tuple(names[:MAX_AUTHORS])


class PubMedAdapter(BaseSourceAdapter):
    """
    PubMed search and single-article lookup over NCBI E-utilities.

    Usage:
        async with PubMedAdapter(SourceConfig(tool="scholar-search", mailto=email)) as pubmed:
            records = await pubmed.search("sepsis biomarkers", limit=10)
            paper = await pubmed.fetch_paper(pmid="12345678")
    """

    source = RecordSource.PUBMED

    def __init__(
        self,
        config: SourceConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        courtesy_delay: float = COURTESY_DELAY,
    ) -> None:
        super().__init__(config, client=client)
        self._courtesy_delay = courtesy_delay

    def _params(self, **params: Any) -> dict[str, Any]:
        """Query parameters with the E-utilities client identification appended."""
        merged = {k: v for k, v in params.items() if v not in (None, "")}
        merged["db"] = "pubmed"
        if self.config.api_key:
            merged["api_key"] = self.config.api_key
        if self.config.mailto:
            merged["email"] = self.config.mailto
        if self.config.tool:
            merged["tool"] = self.config.tool
        return merged

    # =========================================================================
    # E-utilities calls
    # =========================================================================

    async def _esearch(self, term: str, retmax: int) -> list[str]:
        data = await self._get_json(
            f"{EUTILS_BASE}/esearch.fcgi",
            params=self._params(term=term, retmode="json", retmax=retmax, sort="relevance"),
        )
        if not isinstance(data, dict):
            raise BadUpstreamResponseError("pubmed: unexpected esearch response", source=self.name)
        id_list = (data.get("esearchresult") or {}).get("idlist") or []
        return [str(pmid) for pmid in id_list if pmid]

    async def _esummary(self, pmids: list[str]) -> dict[str, dict[str, Any]]:
        data = await self._get_json(
            f"{EUTILS_BASE}/esummary.fcgi",
            params=self._params(id=",".join(pmids), retmode="json"),
        )
        if not isinstance(data, dict):
            raise BadUpstreamResponseError("pubmed: unexpected esummary response", source=self.name)
        result = data.get("result") or {}
        summaries = {}
        for pmid in pmids:
            summary = result.get(pmid)
            summaries[pmid] = summary if isinstance(summary, dict) else {}
        return summaries

    async def _efetch_abstracts(self, pmids: list[str]) -> dict[str, str]:
        text = await self._get_text(
            f"{EUTILS_BASE}/efetch.fcgi",
            params=self._params(id=",".join(pmids), retmode="text", rettype="medline"),
        )
        return parse_abstracts(text)

    async def _summaries_and_abstracts(
        self, pmids: list[str]
    ) -> tuple[dict[str, dict[str, Any]], dict[str, str]]:
        summaries = await self._esummary(pmids)
        if self._courtesy_delay > 0:
            await asyncio.sleep(self._courtesy_delay)
        abstracts = await self._efetch_abstracts(pmids)
        return summaries, abstracts

    # =========================================================================
    # Search flow
    # =========================================================================

    async def search(self, query: str, limit: int = 20) -> list[LiteratureRecord]:
        pmids = await self._esearch(query, retmax=limit)
        if not pmids:
            return []

        summaries, abstracts = await self._summaries_and_abstracts(pmids)
        records = [self._to_record(pmid, summaries[pmid], abstracts.get(pmid)) for pmid in pmids]
        logger.debug(f"PubMed: {len(records)} records for {query!r}")
        return records

    def _to_record(self, pmid: str, summary: dict[str, Any], abstract: str | None) -> LiteratureRecord:
        doi = normalize_doi(_summary_doi(summary))
        year = _summary_year(summary)
        return LiteratureRecord(
            id=pmid,
            source=self.source,
            title=collapse_whitespace(summary.get("title")),
            year=int(year) if year else None,
            authors=_summary_authors(summary),
            abstract=abstract or None,
            doi=doi,
            url=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
            external_ids=build_external_ids([("PMID", pmid), ("DOI", doi)]),
        )

    # =========================================================================
    # Single-paper flow
    # =========================================================================

    async def fetch_paper(
        self,
        pmid: str | None = None,
        query: str | None = None,
    ) -> PubMedPaper:
        """
        Resolve one article. ``pmid`` takes priority over ``query``.

        Raises:
            InvalidInputError: Neither pmid nor query supplied
            NotFoundError: The query matched nothing
            UpstreamError: Any E-utilities failure
        """
        pmid = str(pmid).strip() if pmid is not None else ""
        query = query.strip() if query else ""

        if not pmid:
            if not query:
                raise InvalidInputError('Provide "pmid" or "query"', field_name="pmid")
            pmids = await self._esearch(f"{query} [Title/Abstract]", retmax=1)
            if not pmids:
                raise NotFoundError(f"No PubMed result for: {query}")
            pmid = pmids[0]

        summaries, abstracts = await self._summaries_and_abstracts([pmid])
        summary = summaries[pmid]
        return PubMedPaper(
            pmid=pmid,
            title=summary.get("title") or "",
            journal=summary.get("fulljournalname") or summary.get("source") or "",
            year=_summary_year(summary),
            authors=_summary_authors(summary),
            doi=_summary_doi(summary),
            abstract=abstracts.get(pmid) or None,
        )
