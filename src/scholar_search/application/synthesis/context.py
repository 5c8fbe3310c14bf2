"""
Literature digest and prompt construction for synthesis.

The digest numbers each paper (``#1``, ``#2``...) so the generated review can
cite them, and stays within a character budget so the prompt size is bounded
regardless of how many records a search returned.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from scholar_search.models import LiteratureRecord, RecordSource

DEFAULT_TOP_K = 10
ABSTRACT_CHAR_LIMIT = 1500
CONTEXT_CHAR_BUDGET = 12000

SOURCE_DISPLAY_NAMES: dict[RecordSource, str] = {
    RecordSource.CROSSREF: "Crossref",
    RecordSource.ARXIV: "arXiv",
    RecordSource.SEMANTIC_SCHOLAR: "Semantic Scholar",
    RecordSource.PUBMED: "PubMed",
}

PREAMBLE = "You are a research scientist conducting a literature review."

DEFAULT_DIRECTIVE = """Please provide:
1) Key breakthrough findings (cite paper numbers, e.g., #2, #5)
2) Areas of consensus vs. disagreement (cite)
3) Gaps / limitations in current research (cite)
4) Recommended next experiments or studies (cite)
5) A shortlist of 5 must-read papers with rationale

Respond concisely as a structured review with bullet points and numbered citations."""


def compact_authors(authors: Sequence[str]) -> str:
    """Up to three names, then "et al."."""
    if not authors:
        return ""
    if len(authors) <= 3:
        return ", ".join(authors)
    return f"{', '.join(authors[:3])} et al."


def cite_line(record: LiteratureRecord, index: int) -> str:
    """Header line for the ``index``-th (zero-based) record of a digest."""
    year = f" ({record.year})" if record.year else ""
    line = f"#{index + 1} {record.title}{year} — {compact_authors(record.authors)} [{record.source.value.upper()}]"
    if record.doi:
        line += f" — doi:{record.doi}"
    if record.url:
        line += f" — {record.url}"
    return line


def record_block(record: LiteratureRecord, index: int) -> str:
    abstract = (record.abstract or "").strip()
    if len(abstract) > ABSTRACT_CHAR_LIMIT:
        abstract = abstract[:ABSTRACT_CHAR_LIMIT] + "…"
    return f"{cite_line(record, index)}\nAbstract: {abstract or 'N/A'}"


def build_context(
    records: Sequence[LiteratureRecord],
    *,
    top_k: int = DEFAULT_TOP_K,
    max_chars: int = CONTEXT_CHAR_BUDGET,
) -> str:
    """
    Build the numbered digest of the first ``top_k`` records.

    Blocks are appended whole; the first block that would push the digest past
    ``max_chars`` ends it.
    """
    out = ""
    for i, record in enumerate(records[:top_k]):
        block = record_block(record, i)
        candidate = f"{out}\n\n{block}" if out else block
        if len(candidate) > max_chars:
            break
        out = candidate
    return out


def sources_label(records: Iterable[LiteratureRecord]) -> str:
    seen: list[RecordSource] = []
    for record in records:
        if record.source not in seen:
            seen.append(record.source)
    return ", ".join(SOURCE_DISPLAY_NAMES[s] for s in seen)


def build_prompt(context: str, directive: str | None = None, label: str | None = None) -> str:
    """Assemble preamble, digest and directive into one prompt."""
    origin = f" ({label})" if label else ""
    return (
        f"{PREAMBLE}\n\n"
        f"Here are top papers{origin}. Papers are numbered and include abstracts when available:\n\n"
        f"{context.strip()}\n\n"
        f"{(directive or '').strip() or DEFAULT_DIRECTIVE}"
    )


# Generated text is shown as plain text, so emphasis markers are removed
_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_ITALIC_RE = re.compile(r"(^|[\s(])\*(.*?)\*")
_BULLET_RE = re.compile(r"^[ \t]*\*[ \t]+", re.MULTILINE)


def clean_markup(text: str) -> str:
    """
    Strip Markdown emphasis from generated text.

    >>> clean_markup("**Key** *finding*\\n* item")
    'Key finding\\n- item'
    """
    text = _BOLD_RE.sub(r"\1", text)
    text = _ITALIC_RE.sub(r"\1\2", text)
    text = _BULLET_RE.sub("- ", text)
    return text.replace("*", "").strip()
