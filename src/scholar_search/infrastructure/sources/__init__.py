"""
Literature source adapters.

Each adapter turns a free-text query into normalized LiteratureRecords:

- CrossrefAdapter: Crossref works search
- ArxivAdapter: arXiv Atom API
- SemanticScholarAdapter: Semantic Scholar Graph API
- PubMedAdapter: NCBI E-utilities (search and single-paper lookup)
"""

from __future__ import annotations

from collections.abc import Iterable

import httpx

from scholar_search.config import Settings
from scholar_search.models import RecordSource

from .arxiv import ArxivAdapter
from .base_client import BaseSourceAdapter
from .crossref import CrossrefAdapter
from .pubmed import PubMedAdapter
from .semantic_scholar import SemanticScholarAdapter

ADAPTER_TYPES: dict[RecordSource, type[BaseSourceAdapter]] = {
    RecordSource.CROSSREF: CrossrefAdapter,
    RecordSource.ARXIV: ArxivAdapter,
    RecordSource.SEMANTIC_SCHOLAR: SemanticScholarAdapter,
    RecordSource.PUBMED: PubMedAdapter,
}


def create_source_adapters(
    settings: Settings,
    sources: Iterable[RecordSource] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> list[BaseSourceAdapter]:
    """
    Build adapters for ``sources`` (default: the enabled sources) in adapter order.

    Args:
        settings: Process settings providing each adapter's SourceConfig
        sources: Subset to build
        client: Optional shared client, mainly for tests
    """
    wanted = settings.enabled_sources if sources is None else tuple(sources)
    return [
        ADAPTER_TYPES[source](settings.source_config(source), client=client)
        for source in settings.enabled_sources
        if source in wanted
    ]


__all__ = [
    "ADAPTER_TYPES",
    "ArxivAdapter",
    "BaseSourceAdapter",
    "CrossrefAdapter",
    "PubMedAdapter",
    "SemanticScholarAdapter",
    "create_source_adapters",
]
