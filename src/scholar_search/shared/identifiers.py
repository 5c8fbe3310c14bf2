"""
Identifier normalization shared by every source adapter.

Adapters apply these immediately after field extraction, so records leaving an
adapter already carry canonical identifiers and the merger can compare them
with plain string equality.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterable

_DOI_PREFIX_RE = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:\s*)", re.IGNORECASE)
_ARXIV_PREFIX_RE = re.compile(r"^arxiv:\s*", re.IGNORECASE)
_ARXIV_VERSION_RE = re.compile(r"v\d+$")
_WHITESPACE_RE = re.compile(r"\s+")
_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_TAG_RE = re.compile(r"<[^>]+>")


def normalize_doi(raw: str | None) -> str | None:
    """
    Canonicalize a DOI.

    Lowercases, strips ``https://doi.org/``, ``http://dx.doi.org/`` and
    ``doi:`` prefixes, and trims. Returns None for empty input.

    >>> normalize_doi("https://doi.org/10.1/ABC")
    '10.1/abc'
    """
    if not raw:
        return None
    doi = _DOI_PREFIX_RE.sub("", raw.strip().lower()).strip()
    return doi or None


def normalize_arxiv_id(raw: str | None) -> str | None:
    """
    Canonicalize an arXiv identifier.

    Strips an ``arXiv:`` prefix (any case) and the trailing version suffix.

    >>> normalize_arxiv_id("arXiv:1234.5678v3")
    '1234.5678'
    """
    if not raw:
        return None
    arxiv_id = _ARXIV_PREFIX_RE.sub("", raw.strip().lower())
    arxiv_id = _ARXIV_VERSION_RE.sub("", arxiv_id).strip()
    return arxiv_id or None


def normalize_title(raw: str | None) -> str:
    """Lowercase, collapse whitespace and strip punctuation. Dedup key only."""
    if not raw:
        return ""
    title = _WHITESPACE_RE.sub(" ", raw.lower())
    title = _PUNCTUATION_RE.sub("", title)
    return _WHITESPACE_RE.sub(" ", title).strip()


def collapse_whitespace(text: str | None) -> str:
    """Join line-wrapped text into a single line."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_markup(text: str | None) -> str:
    """Remove embedded markup tags (JATS, HTML) and unescape entities."""
    if not text:
        return ""
    return collapse_whitespace(html.unescape(_TAG_RE.sub(" ", text)))


def build_external_ids(pairs: Iterable[tuple[str, str | None]]) -> dict[str, str]:
    """Build an identifier mapping that never contains an empty value."""
    external_ids: dict[str, str] = {}
    for scheme, value in pairs:
        if isinstance(value, str) and value.strip():
            external_ids[scheme] = value.strip()
    return external_ids
