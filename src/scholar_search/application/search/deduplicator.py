"""
Deduplicator - collapse records that describe the same work.

Identity key priority:
    doi:<doi>  >  arxiv:<id>  >  title:<normalized title>|year:<year>

A record that yields no key (no identifiers and a blank title) is dropped.
Within a key group one representative survives: the strictly more-cited
record, then on a tie the one with an abstract, otherwise the first seen.
Representatives are existing records; nothing is merged field-by-field.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from scholar_search.models import LiteratureRecord
from scholar_search.shared.identifiers import normalize_arxiv_id, normalize_doi, normalize_title

logger = logging.getLogger(__name__)


@dataclass
class MergeStats:
    """Statistics from one merge pass."""

    total_input: int = 0
    unique_records: int = 0
    duplicates_removed: int = 0
    dropped_without_key: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_input": self.total_input,
            "unique_records": self.unique_records,
            "duplicates_removed": self.duplicates_removed,
            "dropped_without_key": self.dropped_without_key,
            "by_source": self.by_source,
        }


def identity_key(record: LiteratureRecord) -> str | None:
    """Compute the identity key of ``record``, or None when it has none."""
    doi = normalize_doi(record.doi) or normalize_doi(record.external_ids.get("DOI"))
    if doi:
        return f"doi:{doi}"

    arxiv_id = normalize_arxiv_id(record.arxiv_id)
    if arxiv_id:
        return f"arxiv:{arxiv_id}"

    title = normalize_title(record.title)
    if not title:
        return None
    year = "" if record.year is None else str(record.year)
    return f"title:{title}|year:{year}"


def _prefer(candidate: LiteratureRecord, current: LiteratureRecord) -> bool:
    """True when ``candidate`` should replace the current representative."""
    candidate_count = candidate.citation_count or 0
    current_count = current.citation_count or 0
    if candidate_count != current_count:
        return candidate_count > current_count
    return candidate.has_abstract and not current.has_abstract


class Deduplicator:
    """
    Merge records from several sources into one list of distinct works.

    ``last_stats`` reflects only the most recent pass on this instance.
    ``merge_with_stats`` returns the statistics of the call itself.

    Example:
        >>> unique, stats = Deduplicator().merge_with_stats(crossref_records + s2_records)
        >>> stats.duplicates_removed
        3
    """

    def __init__(self) -> None:
        # Most recent pass only; not per-caller when the instance is shared
        self.last_stats = MergeStats()

    def merge(self, records: Iterable[LiteratureRecord]) -> list[LiteratureRecord]:
        """Deduplicate ``records``, discarding the statistics."""
        return self.merge_with_stats(records)[0]

    def merge_with_stats(self, records: Iterable[LiteratureRecord]) -> tuple[list[LiteratureRecord], MergeStats]:
        """
        Deduplicate ``records`` and report what the pass did.

        Output order is the order in which each key was first seen, so merging
        an already merged list returns it unchanged.
        """
        stats = MergeStats()
        groups: dict[str, LiteratureRecord] = {}

        for record in records:
            stats.total_input += 1
            source = record.source.value
            stats.by_source[source] = stats.by_source.get(source, 0) + 1

            key = identity_key(record)
            if key is None:
                stats.dropped_without_key += 1
                continue

            current = groups.get(key)
            if current is None:
                groups[key] = record
                continue

            stats.duplicates_removed += 1
            if _prefer(record, current):
                groups[key] = record

        stats.unique_records = len(groups)
        self.last_stats = stats
        logger.info(
            f"Merged {stats.total_input} records into {stats.unique_records} "
            f"({stats.duplicates_removed} duplicates, {stats.dropped_without_key} without identity)"
        )
        return list(groups.values()), stats
