"""
LiteratureSearchPipeline - request-boundary orchestration.

    validate -> aggregate (parallel adapters) -> merge -> rank -> response

``analyze`` runs the same search and then asks the synthesis service for a
review of the top records. A failed synthesis does not discard the search:
the result carries the error next to the still valid records.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from scholar_search.application.search.aggregator import NO_RESULTS_WARNING, LiteratureAggregator
from scholar_search.application.search.deduplicator import Deduplicator
from scholar_search.application.search.ranking import Ranker
from scholar_search.application.synthesis.service import SynthesisService
from scholar_search.config import parse_sources
from scholar_search.infrastructure.sources import BaseSourceAdapter
from scholar_search.models import AggregationResult, RecordSource
from scholar_search.shared.exceptions import InvalidInputError, ScholarSearchError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 50


def clamp_limit(raw: Any) -> int:
    """Clamp a requested limit to [1, 50]; missing, zero or non-numeric means 20."""
    if isinstance(raw, bool):
        return DEFAULT_LIMIT
    try:
        value = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_LIMIT
    if value == 0:
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, value))


@dataclass(frozen=True)
class AnalysisResult:
    """A search plus its synthesized review, or the reason there is none."""

    search: AggregationResult
    text: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.search.to_dict()
        if self.text is not None:
            data["text"] = self.text
        if self.error is not None:
            data["error"] = self.error
        return data


class LiteratureSearchPipeline:
    """
    Multi-source literature search.

    Example:
        >>> pipeline = LiteratureSearchPipeline(create_source_adapters(settings))
        >>> result = await pipeline.search("CRISPR base editing", limit=20)
        >>> [r.title for r in result.top]
    """

    def __init__(
        self,
        adapters: Sequence[BaseSourceAdapter],
        *,
        deduplicator: Deduplicator | None = None,
        ranker: Ranker | None = None,
        synthesis: SynthesisService | None = None,
        deadline: float | None = None,
    ) -> None:
        self.adapters = list(adapters)
        self.deduplicator = deduplicator or Deduplicator()
        self.ranker = ranker or Ranker()
        self.synthesis = synthesis
        self._deadline = deadline

    @property
    def enabled_sources(self) -> tuple[RecordSource, ...]:
        return tuple(a.source for a in self.adapters)

    def _select_adapters(self, sources: Sequence[str] | None) -> list[BaseSourceAdapter]:
        if not sources:
            return self.adapters
        requested = parse_sources(list(sources))
        if not requested:
            return self.adapters
        disabled = [s.value for s in requested if s not in self.enabled_sources]
        if disabled:
            raise InvalidInputError(
                f"Source not enabled: {', '.join(disabled)}",
                field_name="sources",
                value=list(sources),
            )
        return [a for a in self.adapters if a.source in requested]

    async def search(
        self,
        query: str,
        limit: Any = None,
        sources: Sequence[str] | None = None,
    ) -> AggregationResult:
        """
        Search, merge and rank.

        Raises:
            InvalidInputError: Empty query or an unknown / disabled source
        """
        query = (query or "").strip() if isinstance(query, str) else ""
        if not query:
            raise InvalidInputError("Missing query", field_name="query")
        limit = clamp_limit(limit)
        adapters = self._select_adapters(sources)

        aggregator = LiteratureAggregator(adapters, deadline=self._deadline)
        gathered = await aggregator.gather(query, limit)

        items, stats = self.deduplicator.merge_with_stats(gathered.records)
        ranked = self.ranker.rank(items)
        top = ranked[: self.ranker.config.top_n]
        logger.info(f"Search {query!r}: {stats.unique_records} unique records, top {len(top)}")

        # Every record may be dropped by the merge even when sources answered
        warning = gathered.warning
        if not items:
            warning = warning or NO_RESULTS_WARNING

        return AggregationResult(
            items=tuple(items),
            top=tuple(top),
            warning=warning,
            sources=gathered.outcomes,
        )

    async def analyze(
        self,
        query: str,
        limit: Any = None,
        sources: Sequence[str] | None = None,
        directive: str | None = None,
    ) -> AnalysisResult:
        """
        Search, then synthesize a review of the top records.

        Raises:
            InvalidInputError: Invalid search input
        """
        result = await self.search(query, limit, sources)
        if self.synthesis is None:
            return AnalysisResult(search=result, error="Synthesis is not configured")
        if not result.top:
            return AnalysisResult(search=result, error=result.warning or NO_RESULTS_WARNING)

        try:
            text = await self.synthesis.synthesize_records(result.top, directive)
        except ScholarSearchError as e:
            logger.warning(f"Synthesis failed for {query!r}: {e.message}")
            return AnalysisResult(search=result, error=e.message)
        return AnalysisResult(search=result, text=text)
