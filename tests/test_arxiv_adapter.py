"""Tests for the arXiv Atom adapter."""

from __future__ import annotations

import httpx
import pytest

from scholar_search.infrastructure.sources.arxiv import ArxivAdapter
from scholar_search.models import RecordSource
from scholar_search.shared.exceptions import BadUpstreamResponseError


def _atom(text: str):
    return lambda request: httpx.Response(
        200, text=text, headers={"content-type": "application/atom+xml"}
    )


class TestArxivSearch:
    async def test_parses_entries(self, mock_client, arxiv_feed):
        adapter = ArxivAdapter(client=mock_client(_atom(arxiv_feed)))

        records = await adapter.search("gene editing", limit=2)

        assert len(records) == 2
        first = records[0]
        assert first.source is RecordSource.ARXIV
        assert first.id == "2101.00001"
        assert first.arxiv_id == "2101.00001"
        assert first.title == "Gene editing in practice"
        assert first.abstract == "Preprint abstract spanning lines."
        assert first.authors == ("Jane Doe", "John Roe")
        assert first.year == 2021
        assert first.doi == "10.1038/xyz"
        assert first.url == "http://arxiv.org/abs/2101.00001v2"
        assert dict(first.external_ids) == {"arXiv": "2101.00001", "DOI": "10.1038/xyz"}
        assert first.citation_count is None

    async def test_url_falls_back_to_id(self, mock_client, arxiv_feed):
        adapter = ArxivAdapter(client=mock_client(_atom(arxiv_feed)))

        records = await adapter.search("q")

        second = records[1]
        assert second.url == "http://arxiv.org/abs/1999.12345v1"
        assert second.doi is None
        assert dict(second.external_ids) == {"arXiv": "1999.12345"}
        assert second.year == 1999

    async def test_query_parameters(self, mock_client):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text='<feed xmlns="http://www.w3.org/2005/Atom"></feed>')

        adapter = ArxivAdapter(client=mock_client(handler))
        assert await adapter.search("graph networks", limit=9) == []

        params = seen[0].url.params
        assert params["search_query"] == "all:graph networks"
        assert params["start"] == "0"
        assert params["max_results"] == "9"

    async def test_error_feed(self, mock_client, arxiv_error_feed):
        adapter = ArxivAdapter(client=mock_client(_atom(arxiv_error_feed)))

        with pytest.raises(BadUpstreamResponseError, match="incorrect id format"):
            await adapter.search("q")

    async def test_malformed_xml(self, mock_client):
        adapter = ArxivAdapter(client=mock_client(_atom("<feed><entry>")))

        with pytest.raises(BadUpstreamResponseError, match="malformed"):
            await adapter.search("q")

    def test_entity_declarations_refused(self):
        bomb = (
            '<?xml version="1.0"?><!DOCTYPE lolz [<!ENTITY lol "lol">]>'
            '<feed xmlns="http://www.w3.org/2005/Atom"><title>&lol;</title></feed>'
        )
        adapter = ArxivAdapter(client=httpx.AsyncClient())

        with pytest.raises(BadUpstreamResponseError, match="malformed"):
            adapter.parse_feed(bomb)
