"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from scholar_search.config import SourceConfig
from scholar_search.models import LiteratureRecord, RecordSource

# ============================================================
# Record Fixtures
# ============================================================


@pytest.fixture
def make_record() -> Callable[..., LiteratureRecord]:
    """Factory for LiteratureRecord with sensible defaults."""

    def _make(
        title: str = "A study of things",
        source: RecordSource = RecordSource.CROSSREF,
        **kwargs: Any,
    ) -> LiteratureRecord:
        kwargs.setdefault("id", kwargs.get("doi") or title)
        return LiteratureRecord(source=source, title=title, **kwargs)

    return _make


# ============================================================
# HTTP Fixtures
# ============================================================


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an httpx.AsyncClient answering every request with ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


# ============================================================
# Mock Provider Responses
# ============================================================


@pytest.fixture
def crossref_payload() -> dict[str, Any]:
    """Crossref /works response with two items."""
    return {
        "status": "ok",
        "message": {
            "items": [
                {
                    "DOI": "10.1038/XYZ",
                    "title": ["Gene editing  in\n practice"],
                    "author": [
                        {"given": "Jane", "family": "Doe"},
                        {"family": "Smith"},
                    ],
                    "issued": {"date-parts": [[2021, 5, 3]]},
                    "is-referenced-by-count": 42,
                    "URL": "https://doi.org/10.1038/xyz",
                    "abstract": "<jats:p>Gene editing is <jats:italic>useful</jats:italic>.</jats:p>",
                },
                {
                    "DOI": "10.1000/no-date",
                    "title": ["Undated work"],
                    "issued": {"date-parts": [[None]]},
                    "created": {"date-parts": [[2019, 1, 1]]},
                },
            ]
        },
    }


@pytest.fixture
def s2_payload() -> dict[str, Any]:
    """Semantic Scholar /paper/search response."""
    return {
        "total": 2,
        "data": [
            {
                "paperId": "abc123",
                "title": "Gene editing in practice",
                "year": 2021,
                "authors": [{"authorId": "1", "name": "Jane Doe"}],
                "citationCount": 40,
                "abstract": "A longer abstract about gene editing in practice.",
                "externalIds": {"DOI": "10.1038/XYZ", "ArXiv": "2101.00001v2", "PubMed": "33333333"},
                "url": "https://www.semanticscholar.org/paper/abc123",
            },
            {
                "paperId": "def456",
                "title": "Unrelated",
                "year": None,
                "authors": [],
                "citationCount": None,
                "abstract": None,
                "externalIds": None,
                "url": None,
            },
        ],
    }


ARXIV_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:arxiv="http://arxiv.org/schemas/atom">
  <title>ArXiv Query</title>
  <entry>
    <id>http://arxiv.org/abs/2101.00001v2</id>
    <published>2021-01-01T00:00:00Z</published>
    <title>Gene editing
      in practice</title>
    <summary>  Preprint abstract
      spanning lines.  </summary>
    <author><name>Jane Doe</name></author>
    <author><name>John Roe</name></author>
    <arxiv:doi>10.1038/XYZ</arxiv:doi>
    <link href="http://arxiv.org/abs/2101.00001v2" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/2101.00001v2" rel="related" type="application/pdf"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/1999.12345v1</id>
    <published>1999-12-31T00:00:00Z</published>
    <title>No links here</title>
    <summary>Short.</summary>
  </entry>
</feed>
"""

ARXIV_ERROR_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/api/errors#incorrect_id_format_for_1234</id>
    <title>Error</title>
    <summary>incorrect id format for 1234</summary>
  </entry>
</feed>
"""


@pytest.fixture
def arxiv_feed() -> str:
    return ARXIV_FEED


@pytest.fixture
def arxiv_error_feed() -> str:
    return ARXIV_ERROR_FEED


@pytest.fixture
def esummary_payload() -> dict[str, Any]:
    """E-utilities esummary JSON for two PMIDs."""
    return {
        "result": {
            "uids": ["11111111", "22222222"],
            "11111111": {
                "uid": "11111111",
                "pubdate": "2020 Mar 15",
                "source": "Nat Med",
                "fulljournalname": "Nature medicine",
                "title": "Biomarkers of sepsis.",
                "authors": [{"name": "Doe J"}, {"name": "Roe R"}],
                "articleids": [
                    {"idtype": "pubmed", "value": "11111111"},
                    {"idtype": "doi", "value": "10.1038/S41591-020-0001"},
                ],
            },
            "22222222": {
                "uid": "22222222",
                "pubdate": "Spring 1998",
                "source": "J Test",
                "title": "Second paper.",
                "authors": [],
                "articleids": [],
            },
        }
    }


MEDLINE_TEXT = """
PMID- 11111111
OWN - NLM
TI  - Biomarkers of sepsis.
AB  - Sepsis is a leading cause of death.
      Biomarkers may help.
FAU - Doe, Jane
AU  - Doe J

PMID- 22222222
TI  - Second paper.
AU  - Roe R
"""


@pytest.fixture
def medline_text() -> str:
    return MEDLINE_TEXT


# ============================================================
# Adapter Fixtures
# ============================================================


class FakeAdapter:
    """Adapter stand-in with a scripted outcome and optional delay."""

    def __init__(self, source: RecordSource, records=(), error: Exception | None = None, delay: float = 0.0):
        self.source = source
        self.config = SourceConfig(timeout=1.0)
        self._records = list(records)
        self._error = error
        self._delay = delay
        self.calls: list[tuple[str, int]] = []

    @property
    def name(self) -> str:
        return self.source.value

    async def search(self, query: str, limit: int = 20):
        self.calls.append((query, limit))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._records

    async def close(self) -> None:
        pass


@pytest.fixture
def fake_adapter() -> type[FakeAdapter]:
    """The FakeAdapter class, for building scripted adapters."""
    return FakeAdapter
