"""
Multi-Source Search

Architecture:
    Query
      │
      ▼
    ┌─────────────────────┐
    │ LiteratureAggregator│  ← Parallel adapter calls, partial failure tolerated
    └──────────┬──────────┘
       ┌───────┼────────┬─────────┐
       ▼       ▼        ▼         ▼
    Crossref  arXiv  Semantic   PubMed
                     Scholar
       └───────┴────────┴─────────┘
               │
               ▼
    ┌─────────────────────┐
    │    Deduplicator     │  ← DOI > arXiv > title|year identity keys
    └──────────┬──────────┘
               ▼
    ┌─────────────────────┐
    │       Ranker        │  ← Citations + recency (+ source weight)
    └──────────┬──────────┘
               ▼
    AggregationResult(items, top, warning)
"""

from __future__ import annotations

from .aggregator import GatherResult, LiteratureAggregator
from .deduplicator import Deduplicator, MergeStats, identity_key
from .pipeline import AnalysisResult, LiteratureSearchPipeline, clamp_limit
from .ranking import Ranker, RankingConfig

__all__ = [
    "AnalysisResult",
    "Deduplicator",
    "GatherResult",
    "LiteratureAggregator",
    "LiteratureSearchPipeline",
    "MergeStats",
    "Ranker",
    "RankingConfig",
    "clamp_limit",
    "identity_key",
]
