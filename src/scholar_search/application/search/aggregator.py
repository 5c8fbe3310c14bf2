"""
LiteratureAggregator - concurrent fan-out over source adapters.

Every adapter is called at once and each call is bounded by its own deadline.
The aggregator waits for all of them to settle: one failing source never
cancels or hides the others. Adapter failures become per-source outcomes and,
when nothing at all comes back, the warning of the aggregation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from scholar_search.infrastructure.sources import BaseSourceAdapter
from scholar_search.models import LiteratureRecord, SourceOutcome
from scholar_search.shared.async_utils import gather_settled, with_deadline
from scholar_search.shared.exceptions import InvalidInputError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

NO_RESULTS_WARNING = "No results"


@dataclass(frozen=True)
class GatherResult:
    """Raw records in adapter order plus how each adapter settled."""

    records: tuple[LiteratureRecord, ...]
    outcomes: tuple[SourceOutcome, ...]

    @property
    def warning(self) -> str | None:
        """First failure in adapter order when nothing came back."""
        if self.records:
            return None
        for outcome in self.outcomes:
            if outcome.error:
                return outcome.error
        return NO_RESULTS_WARNING


class LiteratureAggregator:
    """
    Query several sources concurrently.

    Example:
        >>> aggregator = LiteratureAggregator([crossref, arxiv, s2, pubmed])
        >>> gathered = await aggregator.gather("CRISPR delivery", limit=20)
        >>> gathered.warning is None
        True
    """

    def __init__(
        self,
        adapters: Sequence[BaseSourceAdapter],
        *,
        deadline: float | None = None,
    ) -> None:
        """
        Args:
            adapters: Adapters in the order their results are concatenated
            deadline: Overall per-source bound in seconds. Defaults to each
                      adapter's configured timeout plus one second, so the
                      adapter's own typed timeout normally fires first.
        """
        self.adapters = list(adapters)
        self._deadline = deadline

    def _deadline_for(self, adapter: BaseSourceAdapter) -> float:
        if self._deadline is not None:
            return self._deadline
        return adapter.config.timeout + 1.0

    async def _call(self, adapter: BaseSourceAdapter, query: str, limit: int) -> list[LiteratureRecord]:
        deadline = self._deadline_for(adapter)
        return await with_deadline(
            adapter.search(query, limit),
            deadline,
            lambda: UpstreamTimeoutError(adapter.name, deadline),
        )

    async def gather(self, query: str, limit: int) -> GatherResult:
        """
        Search every adapter and wait for all of them.

        Raises:
            InvalidInputError: Empty or whitespace-only query
        """
        query = (query or "").strip()
        if not query:
            raise InvalidInputError("Missing query", field_name="query", value=query)

        results = await gather_settled(*(self._call(a, query, limit) for a in self.adapters))

        records: list[LiteratureRecord] = []
        outcomes: list[SourceOutcome] = []
        for adapter, result in zip(self.adapters, results):
            if isinstance(result, Exception):
                reason = str(result) or type(result).__name__
                logger.warning(f"{adapter.name} failed: {reason}")
                outcomes.append(SourceOutcome(source=adapter.source, error=reason))
                continue
            logger.info(f"{adapter.name}: {len(result)} records")
            records.extend(result)
            outcomes.append(SourceOutcome(source=adapter.source, records=tuple(result)))

        return GatherResult(records=tuple(records), outcomes=tuple(outcomes))
