"""
arXiv API Integration

Searches the arXiv export API, which answers with an Atom feed.

API Documentation: https://info.arxiv.org/help/api/user-manual.html
"""

from __future__ import annotations

import logging
import re
from typing import Any

import defusedxml.ElementTree as ET  # Security: prevent XML attacks
from defusedxml import DefusedXmlException

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

ARXIV_API_URL = "http://export.arxiv.org/api/query"

NS = {
    "atom": "http://www.w3.org/2005/Atom",
    "arxiv": "http://arxiv.org/schemas/atom",
}

_ABS_ID_RE = re.compile(r"arxiv\.org/abs/(.+)$", re.IGNORECASE)
_YEAR_RE = re.compile(r"^(\d{4})")


def _text(entry: Any, path: str) -> str:
    elem = entry.find(path, NS)
    if elem is None or not elem.text:
        return ""
    return collapse_whitespace(elem.text)


class ArxivAdapter(BaseSourceAdapter):
    """
    arXiv preprint search.

    Usage:
        async with ArxivAdapter() as arxiv:
            records = await arxiv.search("diffusion models", limit=10)
    """

    source = RecordSource.ARXIV

    async def search(self, query: str, limit: int = 20) -> list[LiteratureRecord]:
        params = {
            "search_query": f"all:{query}",
            "start": 0,
            "max_results": limit,
        }
        xml_text = await self._get_text(ARXIV_API_URL, params=params, accept="application/atom+xml")
        records = self.parse_feed(xml_text)
        logger.debug(f"arXiv: {len(records)} records for {query!r}")
        return records

    def parse_feed(self, xml_text: str) -> list[LiteratureRecord]:
        """
        Parse an arXiv Atom feed into records.

        Raises:
            BadUpstreamResponseError: Malformed XML or an arXiv error feed
        """
        try:
            root = ET.fromstring(xml_text)
        except (ET.ParseError, DefusedXmlException) as e:
            raise BadUpstreamResponseError(f"arxiv: malformed Atom feed: {e}", source=self.name) from e

        records = []
        for entry in root.findall("atom:entry", NS):
            id_url = _text(entry, "atom:id")
            # arXiv reports query errors as a feed with a single error entry
            if "/api/errors" in id_url:
                summary = _text(entry, "atom:summary") or "query rejected"
                raise BadUpstreamResponseError(f"arxiv: {summary}", source=self.name)
            records.append(self._parse_entry(entry, id_url))
        return records

    def _parse_entry(self, entry: Any, id_url: str) -> LiteratureRecord:
        match = _ABS_ID_RE.search(id_url)
        arxiv_id = normalize_arxiv_id(match.group(1) if match else None)
        doi = normalize_doi(_text(entry, "arxiv:doi"))
        title = _text(entry, "atom:title")

        year_match = _YEAR_RE.match(_text(entry, "atom:published"))
        authors = tuple(
            name
            for name in (_text(author, "atom:name") for author in entry.findall("atom:author", NS))
            if name
        )

        url = None
        for link in entry.findall("atom:link", NS):
            if link.get("rel") == "alternate" and link.get("href"):
                url = link.get("href")
                break

        return LiteratureRecord(
            id=arxiv_id or id_url or title,
            source=self.source,
            title=title,
            year=int(year_match.group(1)) if year_match else None,
            authors=authors,
            abstract=_text(entry, "atom:summary") or None,
            doi=doi,
            url=url or id_url or None,
            external_ids=build_external_ids([("arXiv", arxiv_id), ("DOI", doi)]),
        )
