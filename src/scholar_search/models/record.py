"""
LiteratureRecord - the unified record shape produced by every source adapter.

Records are frozen: the merger chooses a representative among adapter outputs
and never edits one in place, so adapter results stay replayable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class RecordSource(str, Enum):
    """Supported literature sources."""

    CROSSREF = "crossref"
    ARXIV = "arxiv"
    SEMANTIC_SCHOLAR = "semantic_scholar"
    PUBMED = "pubmed"

    @classmethod
    def parse(cls, value: str) -> RecordSource:
        """Parse a source name, accepting the short ``s2`` alias."""
        name = value.strip().lower().replace("-", "_")
        if name in ("s2", "semantic"):
            return cls.SEMANTIC_SCHOLAR
        return cls(name)


@dataclass(frozen=True)
class LiteratureRecord:
    """
    One paper/work as returned by a source adapter.

    ``doi`` and the ``arXiv`` entry of ``external_ids`` are always normalized
    before a record leaves its adapter. ``citation_count`` None means unknown.
    """

    id: str
    source: RecordSource
    title: str = ""
    year: int | None = None
    authors: tuple[str, ...] = ()
    abstract: str | None = None
    doi: str | None = None
    url: str | None = None
    citation_count: int | None = None
    external_ids: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the containers too
        object.__setattr__(self, "authors", tuple(self.authors))
        ids = {k: v for k, v in dict(self.external_ids).items() if v}
        object.__setattr__(self, "external_ids", MappingProxyType(ids))
        if self.citation_count is not None and self.citation_count < 0:
            object.__setattr__(self, "citation_count", 0)

    @property
    def arxiv_id(self) -> str | None:
        return self.external_ids.get("arXiv")

    @property
    def has_abstract(self) -> bool:
        return bool(self.abstract and self.abstract.strip())

    @property
    def citations_display(self) -> str:
        """Citation count for display; absent counts show as unknown."""
        return "unknown" if self.citation_count is None else str(self.citation_count)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase wire names, omitting absent fields."""
        data: dict[str, Any] = {
            "id": self.id,
            "source": self.source.value,
            "title": self.title,
        }
        if self.year is not None:
            data["year"] = self.year
        data["authors"] = list(self.authors)
        if self.abstract:
            data["abstract"] = self.abstract
        if self.doi:
            data["doi"] = self.doi
        if self.url:
            data["url"] = self.url
        if self.citation_count is not None:
            data["citationCount"] = self.citation_count
        if self.external_ids:
            data["externalIds"] = dict(self.external_ids)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LiteratureRecord:
        """Create a record from its wire representation."""
        citation_count = data.get("citationCount", data.get("citation_count"))
        year = data.get("year")
        return cls(
            id=str(data.get("id") or ""),
            source=RecordSource.parse(str(data.get("source", ""))),
            title=data.get("title") or "",
            year=int(year) if isinstance(year, (int, str)) and str(year).isdigit() else None,
            authors=tuple(data.get("authors") or ()),
            abstract=data.get("abstract") or None,
            doi=data.get("doi") or None,
            url=data.get("url") or None,
            citation_count=citation_count if isinstance(citation_count, int) else None,
            external_ids=data.get("externalIds") or data.get("external_ids") or {},
        )


@dataclass(frozen=True)
class SourceOutcome:
    """How a single adapter call settled."""

    source: RecordSource
    records: tuple[LiteratureRecord, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"ok": False, "error": self.error}
        return {"ok": True, "count": len(self.records)}


@dataclass(frozen=True)
class AggregationResult:
    """Merged set, ranked top-N and an optional non-fatal warning."""

    items: tuple[LiteratureRecord, ...] = ()
    top: tuple[LiteratureRecord, ...] = ()
    warning: str | None = None
    sources: tuple[SourceOutcome, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "items": [r.to_dict() for r in self.items],
            "top": [r.to_dict() for r in self.top],
        }
        if self.warning:
            data["warning"] = self.warning
        if self.sources:
            data["sources"] = {o.source.value: o.to_dict() for o in self.sources}
        return data


@dataclass(frozen=True)
class PubMedPaper:
    """Bibliographic summary of a single PubMed article."""

    pmid: str
    title: str = ""
    journal: str | None = None
    year: str | None = None
    authors: tuple[str, ...] = ()
    doi: str | None = None
    abstract: str | None = None

    @property
    def url(self) -> str:
        return f"https://pubmed.ncbi.nlm.nih.gov/{self.pmid}/"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "pmid": self.pmid,
            "title": self.title,
            "journal": self.journal or "",
            "authors": list(self.authors),
            "url": self.url,
        }
        if self.year:
            data["year"] = self.year
        if self.doi:
            data["doi"] = self.doi
        if self.abstract:
            data["abstract"] = self.abstract
        return data
