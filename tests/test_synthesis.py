"""Tests for literature digest construction and the synthesis service."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from scholar_search.application.synthesis.context import (
    DEFAULT_DIRECTIVE,
    PREAMBLE,
    build_context,
    build_prompt,
    cite_line,
    clean_markup,
    compact_authors,
    record_block,
    sources_label,
)
from scholar_search.application.synthesis.service import SynthesisService
from scholar_search.models import RecordSource
from scholar_search.shared.exceptions import InvalidInputError, SynthesisError

# ============================================================
# Digest
# ============================================================


class TestCiteLine:
    def test_full_line(self, make_record):
        record = make_record(
            title="Gene editing",
            year=2021,
            authors=("Doe J", "Roe R", "Poe P", "Moe M"),
            doi="10.1/x",
            url="https://doi.org/10.1/x",
        )

        assert cite_line(record, 0) == (
            "#1 Gene editing (2021) — Doe J, Roe R, Poe P et al. [CROSSREF] — doi:10.1/x — https://doi.org/10.1/x"
        )

    def test_minimal_line(self, make_record):
        record = make_record(title="Preprint", source=RecordSource.ARXIV, authors=("Doe J",))
        assert cite_line(record, 2) == "#3 Preprint — Doe J [ARXIV]"

    @pytest.mark.parametrize(
        "authors, expected",
        [
            ((), ""),
            (("A",), "A"),
            (("A", "B", "C"), "A, B, C"),
            (("A", "B", "C", "D"), "A, B, C et al."),
        ],
    )
    def test_compact_authors(self, authors, expected):
        assert compact_authors(authors) == expected


class TestRecordBlock:
    def test_missing_abstract(self, make_record):
        assert record_block(make_record(), 0).endswith("\nAbstract: N/A")

    def test_long_abstract_truncated(self, make_record):
        block = record_block(make_record(abstract="a" * 1600), 0)
        assert block.endswith("Abstract: " + "a" * 1500 + "…")

    def test_short_abstract_kept(self, make_record):
        assert record_block(make_record(abstract="  Short.  "), 0).endswith("Abstract: Short.")


class TestBuildContext:
    def test_numbered_blocks(self, make_record):
        records = [make_record(title="First"), make_record(title="Second")]

        context = build_context(records)

        assert context.startswith("#1 First")
        assert "\n\n#2 Second" in context

    def test_top_k(self, make_record):
        records = [make_record(title=f"Paper {n}") for n in range(3)]

        context = build_context(records, top_k=2)

        assert "#2 Paper 1" in context
        assert "#3" not in context

    def test_budget_stops_before_overflow(self, make_record):
        records = [make_record(title="First", abstract="x" * 200), make_record(title="Second", abstract="y" * 200)]
        first = record_block(records[0], 0)

        context = build_context(records, max_chars=len(first) + 5)

        assert context == first

    def test_empty(self):
        assert build_context([]) == ""


class TestPrompt:
    def test_default_directive(self):
        prompt = build_prompt("#1 Paper")

        assert prompt.startswith(PREAMBLE)
        assert "Here are top papers. Papers are numbered" in prompt
        assert prompt.endswith(DEFAULT_DIRECTIVE)

    def test_custom_directive_and_label(self):
        prompt = build_prompt("#1 Paper", "  Summarize in one line.  ", "Crossref, arXiv")

        assert "Here are top papers (Crossref, arXiv)." in prompt
        assert prompt.endswith("#1 Paper\n\nSummarize in one line.")

    def test_blank_directive_uses_default(self):
        assert build_prompt("#1 Paper", "   ").endswith(DEFAULT_DIRECTIVE)

    def test_sources_label_first_seen_order(self, make_record):
        records = [
            make_record(source=RecordSource.SEMANTIC_SCHOLAR),
            make_record(source=RecordSource.PUBMED),
            make_record(source=RecordSource.SEMANTIC_SCHOLAR),
        ]
        assert sources_label(records) == "Semantic Scholar, PubMed"


class TestCleanMarkup:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("**Key findings**: CRISPR works", "Key findings: CRISPR works"),
            ("This is *very* relevant (#2)", "This is very relevant (#2)"),
            ("* first\n* second", "- first\n- second"),
            ("Intro\n\n  * nested", "Intro\n\n- nested"),
            ("  plain text  ", "plain text"),
            ("stray * marker", "stray  marker"),
        ],
    )
    def test_clean(self, raw, expected):
        assert clean_markup(raw) == expected


# ============================================================
# SynthesisService
# ============================================================


@pytest.fixture
def generator() -> AsyncMock:
    mock = AsyncMock()
    mock.generate.return_value = "**Review** of #1"
    return mock


class TestSynthesisService:
    async def test_records_to_clean_text(self, generator, make_record):
        service = SynthesisService(generator)

        text = await service.synthesize_records([make_record(title="Gene editing", year=2021)])

        assert text == "Review of #1"
        prompt = generator.generate.await_args.args[0]
        assert "#1 Gene editing (2021)" in prompt
        assert "(Crossref)" in prompt

    async def test_top_k_limits_digest(self, generator, make_record):
        service = SynthesisService(generator, top_k=2)
        records = [make_record(title=f"Paper {n}") for n in range(3)]

        await service.synthesize_records(records)

        prompt = generator.generate.await_args.args[0]
        assert "#2 Paper 1" in prompt
        assert "#3" not in prompt

    async def test_directive_forwarded(self, generator, make_record):
        await SynthesisService(generator).synthesize_records([make_record()], "List three gaps.")

        assert generator.generate.await_args.args[0].endswith("List three gaps.")

    async def test_no_records_skips_generator(self, generator):
        with pytest.raises(InvalidInputError, match="No literature"):
            await SynthesisService(generator).synthesize_records([])
        generator.generate.assert_not_awaited()

    @pytest.mark.parametrize("context", ["", "   "])
    async def test_empty_context_skips_generator(self, generator, context):
        with pytest.raises(InvalidInputError, match="literature_context"):
            await SynthesisService(generator).synthesize_context(context)
        generator.generate.assert_not_awaited()

    async def test_prebuilt_context(self, generator):
        text = await SynthesisService(generator).synthesize_context("#1 Paper\nAbstract: N/A")

        assert text == "Review of #1"
        prompt = generator.generate.await_args.args[0]
        assert "Here are top papers. Papers are numbered" in prompt

    async def test_blank_reply_is_error(self, generator, make_record):
        generator.generate.return_value = "  \n "

        with pytest.raises(SynthesisError, match="empty response"):
            await SynthesisService(generator).synthesize_records([make_record()])

    async def test_generator_error_propagates(self, generator, make_record):
        generator.generate.side_effect = SynthesisError("Gemini API error [429]: slow down", status=429)

        with pytest.raises(SynthesisError) as exc_info:
            await SynthesisService(generator).synthesize_records([make_record()])
        assert exc_info.value.retryable is True
