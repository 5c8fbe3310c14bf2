"""Tests for the search pipeline (aggregate, merge, rank, analyze)."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from scholar_search.application.search.aggregator import NO_RESULTS_WARNING
from scholar_search.application.search.pipeline import LiteratureSearchPipeline, clamp_limit
from scholar_search.application.search.ranking import Ranker, RankingConfig
from scholar_search.models import LiteratureRecord, RecordSource
from scholar_search.shared.exceptions import BadUpstreamResponseError, InvalidInputError, SynthesisError


class TestClampLimit:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, 20),
            ("abc", 20),
            (0, 20),
            (-3, 1),
            (1, 1),
            (12, 12),
            ("15", 15),
            (7.9, 7),
            (500, 50),
            (True, 20),
            (float("inf"), 20),
        ],
    )
    def test_clamp(self, raw, expected):
        assert clamp_limit(raw) == expected


@pytest.fixture
def ranker() -> Ranker:
    return Ranker(RankingConfig(current_year=2025))


class TestSearch:
    async def test_crossref_and_s2_merge_into_richer_record(self, make_record, ranker, fake_adapter):
        crossref = make_record(title="Gene editing", doi="10.1038/xyz", year=2021)
        s2 = make_record(
            title="Gene editing",
            source=RecordSource.SEMANTIC_SCHOLAR,
            external_ids={"DOI": "10.1038/XYZ"},
            year=2021,
            abstract="The richer abstract.",
        )
        pipeline = LiteratureSearchPipeline(
            [fake_adapter(RecordSource.CROSSREF, [crossref]), fake_adapter(RecordSource.SEMANTIC_SCHOLAR, [s2])],
            ranker=ranker,
        )

        result = await pipeline.search("gene editing")

        assert result.items == (s2,)
        assert result.top == (s2,)
        assert result.warning is None

    async def test_all_sources_fail_well_formed(self, fake_adapter):
        pipeline = LiteratureSearchPipeline(
            [
                fake_adapter(RecordSource.CROSSREF, error=BadUpstreamResponseError("[502] bad gateway")),
                fake_adapter(RecordSource.ARXIV, error=BadUpstreamResponseError("arxiv: malformed")),
            ]
        )

        data = (await pipeline.search("q")).to_dict()

        assert data["items"] == []
        assert data["top"] == []
        assert data["warning"] == "[502] bad gateway"

    async def test_top_is_ranked_prefix(self, make_record, fake_adapter):
        records = [make_record(title=f"paper {n}", doi=f"10.1/{n}", year=2000, citation_count=n) for n in range(20)]
        pipeline = LiteratureSearchPipeline(
            [fake_adapter(RecordSource.CROSSREF, records)],
            ranker=Ranker(RankingConfig(current_year=2025, top_n=12)),
        )

        result = await pipeline.search("q")

        assert len(result.items) == 20
        assert [r.citation_count for r in result.top] == list(range(19, 7, -1))

    async def test_limit_clamped_before_adapters(self, fake_adapter):
        adapter = fake_adapter(RecordSource.CROSSREF)
        pipeline = LiteratureSearchPipeline([adapter])

        await pipeline.search("q", limit=999)

        assert adapter.calls == [("q", 50)]

    async def test_source_subset(self, fake_adapter):
        crossref = fake_adapter(RecordSource.CROSSREF)
        arxiv = fake_adapter(RecordSource.ARXIV)
        pipeline = LiteratureSearchPipeline([crossref, arxiv])

        result = await pipeline.search("q", sources=["arxiv"])

        assert crossref.calls == []
        assert arxiv.calls == [("q", 20)]
        assert [o.source for o in result.sources] == [RecordSource.ARXIV]

    async def test_unknown_source(self, fake_adapter):
        pipeline = LiteratureSearchPipeline([fake_adapter(RecordSource.CROSSREF)])
        with pytest.raises(InvalidInputError):
            await pipeline.search("q", sources=["scopus"])

    async def test_disabled_source(self, fake_adapter):
        pipeline = LiteratureSearchPipeline([fake_adapter(RecordSource.CROSSREF)])
        with pytest.raises(InvalidInputError, match="not enabled"):
            await pipeline.search("q", sources=["pubmed"])

    async def test_empty_query(self, fake_adapter):
        adapter = fake_adapter(RecordSource.CROSSREF)
        with pytest.raises(InvalidInputError):
            await LiteratureSearchPipeline([adapter]).search("  ")
        assert adapter.calls == []

    async def test_merge_drops_everything_still_warns(self, fake_adapter):
        keyless = [LiteratureRecord(id="x", source=RecordSource.CROSSREF, title="  ")]
        pipeline = LiteratureSearchPipeline([fake_adapter(RecordSource.CROSSREF, keyless)])

        result = await pipeline.search("crispr")

        assert result.items == ()
        assert result.top == ()
        assert result.warning == NO_RESULTS_WARNING
        assert result.sources[0].ok is True


class TestAnalyze:
    async def test_analyze_success(self, make_record, fake_adapter):
        record = make_record(title="Paper", doi="10.1/p")
        synthesis = AsyncMock()
        synthesis.synthesize_records.return_value = "Review text"
        pipeline = LiteratureSearchPipeline([fake_adapter(RecordSource.CROSSREF, [record])], synthesis=synthesis)

        result = await pipeline.analyze("q", directive="Be brief")

        assert result.text == "Review text"
        assert result.error is None
        synthesis.synthesize_records.assert_awaited_once_with((record,), "Be brief")
        data = result.to_dict()
        assert data["text"] == "Review text"
        assert len(data["top"]) == 1

    async def test_synthesis_failure_keeps_search(self, make_record, fake_adapter):
        record = make_record(title="Paper", doi="10.1/p")
        synthesis = AsyncMock()
        synthesis.synthesize_records.side_effect = SynthesisError("Gemini API error [500]: down", status=500)
        pipeline = LiteratureSearchPipeline([fake_adapter(RecordSource.CROSSREF, [record])], synthesis=synthesis)

        result = await pipeline.analyze("q")

        assert result.text is None
        assert result.error == "Gemini API error [500]: down"
        assert result.search.items == (record,)

    async def test_no_results_skips_synthesis(self, fake_adapter):
        synthesis = AsyncMock()
        pipeline = LiteratureSearchPipeline([fake_adapter(RecordSource.CROSSREF)], synthesis=synthesis)

        result = await pipeline.analyze("q")

        assert result.error == "No results"
        synthesis.synthesize_records.assert_not_awaited()

    async def test_without_synthesis_service(self, make_record, fake_adapter):
        pipeline = LiteratureSearchPipeline([fake_adapter(RecordSource.CROSSREF, [make_record()])])

        result = await pipeline.analyze("q")

        assert result.error == "Synthesis is not configured"
