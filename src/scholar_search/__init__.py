"""
Scholar Search - multi-source scholarly literature aggregation.

Queries Crossref, arXiv, Semantic Scholar and PubMed concurrently, merges
records that describe the same work, ranks them by citation impact and
recency, and can hand the top papers to a text-generation backend for a
cited literature review.

Usage:
    from scholar_search import LiteratureSearchPipeline, Settings, create_source_adapters

    settings = Settings.from_env()
    pipeline = LiteratureSearchPipeline(create_source_adapters(settings))
    result = await pipeline.search("CRISPR base editing", limit=20)

    for record in result.top:
        print(f"{record.year} {record.title}")

Entry points:
    scholar-search-api   FastAPI HTTP server
    scholar-search-mcp   MCP server (stdio)
"""

from .application.search import LiteratureSearchPipeline, RankingConfig
from .config import Settings
from .infrastructure.sources import create_source_adapters
from .models import AggregationResult, LiteratureRecord, PubMedPaper, RecordSource

__version__ = "0.1.0"

__all__ = [
    "AggregationResult",
    "LiteratureRecord",
    "LiteratureSearchPipeline",
    "PubMedPaper",
    "RankingConfig",
    "RecordSource",
    "Settings",
    "create_source_adapters",
]
