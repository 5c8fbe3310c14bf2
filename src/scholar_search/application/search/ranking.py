"""
Ranking - citation impact plus recency, with an optional per-source nudge.

    citation = log10(1 + citations) * citation_weight
    recency  = 2 when age <= 2, 1 when age <= 5, otherwise 0
    score    = citation + recency + source_weights[source]

Records without a year are treated as ``unknown_year_age`` years old. The
sort is stable, so equal scores keep merge order.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from scholar_search.models import LiteratureRecord, RecordSource

DEFAULT_SOURCE_WEIGHTS: dict[RecordSource, float] = {
    RecordSource.SEMANTIC_SCHOLAR: 0.1,
}


@dataclass
class RankingConfig:
    """
    Configuration for ranking.

    Presets:
    - default(): weights used by the search endpoints
    - neutral(): no source nudge, for comparing sources on equal footing
    """

    citation_weight: float = 1.5
    unknown_year_age: int = 10

    # (max_age, points), checked in order
    recency_bands: tuple[tuple[int, float], ...] = ((2, 2.0), (5, 1.0))

    source_weights: dict[RecordSource, float] = field(default_factory=lambda: DEFAULT_SOURCE_WEIGHTS.copy())

    top_n: int = 12

    # None means the current calendar year at ranking time
    current_year: int | None = None

    @classmethod
    def default(cls) -> RankingConfig:
        return cls()

    @classmethod
    def neutral(cls) -> RankingConfig:
        return cls(source_weights={})

    def reference_year(self) -> int:
        if self.current_year is not None:
            return self.current_year
        return datetime.now(timezone.utc).year


class Ranker:
    """
    Score and order merged records.

    Example:
        >>> ranker = Ranker(RankingConfig(current_year=2025))
        >>> ordered = ranker.rank(merged)
        >>> top = ranker.top(merged)
    """

    def __init__(self, config: RankingConfig | None = None) -> None:
        self.config = config or RankingConfig()

    def citation_score(self, record: LiteratureRecord) -> float:
        citations = max(0, record.citation_count or 0)
        return math.log10(1 + citations) * self.config.citation_weight

    def recency_score(self, record: LiteratureRecord, current_year: int | None = None) -> float:
        year_now = current_year if current_year is not None else self.config.reference_year()
        age = year_now - record.year if record.year else self.config.unknown_year_age
        for max_age, points in self.config.recency_bands:
            if age <= max_age:
                return points
        return 0.0

    def score(self, record: LiteratureRecord, current_year: int | None = None) -> float:
        return (
            self.citation_score(record)
            + self.recency_score(record, current_year)
            + self.config.source_weights.get(record.source, 0.0)
        )

    def rank(self, records: Sequence[LiteratureRecord]) -> list[LiteratureRecord]:
        """Return ``records`` in descending score order; ties keep input order."""
        year_now = self.config.reference_year()
        return sorted(records, key=lambda r: self.score(r, year_now), reverse=True)

    def top(self, records: Sequence[LiteratureRecord], n: int | None = None) -> list[LiteratureRecord]:
        """Return the ``n`` (default ``top_n``) best records."""
        limit = self.config.top_n if n is None else n
        return self.rank(records)[: max(0, limit)]
