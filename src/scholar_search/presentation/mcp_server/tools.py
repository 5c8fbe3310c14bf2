"""
MCP Tools - literature search, PubMed lookup and synthesis.

Tools:
- search_literature: multi-source search, merged and ranked
- fetch_pubmed_paper: one PubMed article by PMID or best query match
- synthesize_literature: search, then a cited review of the top papers
"""

from __future__ import annotations

import json
import logging
from typing import Literal, Union

from mcp.server.fastmcp import FastMCP

from scholar_search.application.synthesis.context import cite_line
from scholar_search.container import ApplicationContainer
from scholar_search.models import AggregationResult, PubMedPaper
from scholar_search.shared.exceptions import ScholarSearchError

logger = logging.getLogger(__name__)

REGISTERED_TOOLS = ["search_literature", "fetch_pubmed_paper", "synthesize_literature"]


def format_error(error: ScholarSearchError | str, tool_name: str, suggestion: str | None = None) -> str:
    """Render an error the way agents read it best: one line, plus a hint."""
    message = error.message if isinstance(error, ScholarSearchError) else error
    if suggestion is None and isinstance(error, ScholarSearchError):
        suggestion = error.context.suggestion
    lines = [f"❌ {tool_name}: {message}"]
    if suggestion:
        lines.append(f"💡 {suggestion}")
    return "\n".join(lines)


def format_search_markdown(query: str, result: AggregationResult) -> str:
    lines = [f"## Literature search: {query}", ""]
    source_summary = ", ".join(
        f"{o.source.value}={len(o.records)}" if o.ok else f"{o.source.value}=failed" for o in result.sources
    )
    lines.append(f"**{len(result.items)} unique records** ({source_summary})")
    if result.warning:
        lines.append(f"⚠️ {result.warning}")
    lines.append("")

    for i, record in enumerate(result.top):
        lines.append(cite_line(record, i))
        lines.append(f"   Citations: {record.citations_display}")
    return "\n".join(lines).rstrip()


def format_paper_markdown(paper: PubMedPaper) -> str:
    lines = [f"## {paper.title or '(untitled)'}", ""]
    lines.append(f"- **PMID**: {paper.pmid}")
    if paper.journal:
        lines.append(f"- **Journal**: {paper.journal}")
    if paper.year:
        lines.append(f"- **Year**: {paper.year}")
    if paper.authors:
        lines.append(f"- **Authors**: {', '.join(paper.authors)}")
    if paper.doi:
        lines.append(f"- **DOI**: {paper.doi}")
    lines.append(f"- **URL**: {paper.url}")
    if paper.abstract:
        lines.extend(["", "### Abstract", paper.abstract])
    return "\n".join(lines)


def register_literature_tools(mcp: FastMCP, container: ApplicationContainer) -> list[str]:
    """Register all literature tools on ``mcp``; returns the tool names."""

    @mcp.tool()
    async def search_literature(
        query: str,
        limit: Union[int, str] = 20,
        sources: str | None = None,
        output_format: Literal["markdown", "json"] = "markdown",
    ) -> str:
        """
        Search Crossref, arXiv, Semantic Scholar and PubMed at once.

        Duplicates across sources are merged (same DOI, arXiv ID, or title and
        year) and the result is ranked by citations and recency.

        Args:
            query: Free-text search query
            limit: Records requested from each source (1-50, default 20)
            sources: Optional comma-separated subset, e.g. "crossref,arxiv"
            output_format: "markdown" (human-readable) or "json" (programmatic)

        Returns:
            Ranked top papers, or a warning when no source returned anything.

        Example:
            search_literature(query="CRISPR off-target detection", limit=10)
        """
        pipeline = container.pipeline()
        source_list = [s for s in sources.split(",") if s.strip()] if sources else None
        try:
            result = await pipeline.search(query, limit, source_list)
        except ScholarSearchError as e:
            return format_error(e, "search_literature", "Provide a non-empty query and known source names")

        if output_format == "json":
            return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
        return format_search_markdown(query.strip(), result)

    @mcp.tool()
    async def fetch_pubmed_paper(
        pmid: Union[str, int, None] = None,
        query: str | None = None,
    ) -> str:
        """
        Fetch one PubMed article with its abstract.

        Provide either a PMID, or a query whose best Title/Abstract match is
        returned. ``pmid`` wins when both are given.

        Args:
            pmid: PubMed ID (e.g., "12345678")
            query: Keywords to find a single best match

        Example:
            fetch_pubmed_paper(pmid="31978945")
        """
        pubmed = container.pubmed()
        try:
            paper = await pubmed.fetch_paper(pmid=str(pmid) if pmid is not None else None, query=query)
        except ScholarSearchError as e:
            return format_error(e, "fetch_pubmed_paper")
        return format_paper_markdown(paper)

    @mcp.tool()
    async def synthesize_literature(
        query: str,
        limit: Union[int, str] = 20,
        sources: str | None = None,
        directive: str | None = None,
    ) -> str:
        """
        Search all sources, then write a cited literature review of the top papers.

        The review cites papers by their number (#1, #2...) in the ranked list.

        Args:
            query: Free-text search query
            limit: Records requested from each source (1-50, default 20)
            sources: Optional comma-separated subset of sources
            directive: Optional replacement for the default review instructions

        Example:
            synthesize_literature(query="LLM hallucination mitigation")
        """
        pipeline = container.pipeline()
        source_list = [s for s in sources.split(",") if s.strip()] if sources else None
        try:
            analysis = await pipeline.analyze(query, limit, source_list, directive=directive)
        except ScholarSearchError as e:
            return format_error(e, "synthesize_literature")

        listing = format_search_markdown(query.strip(), analysis.search)
        if analysis.error:
            return f"{listing}\n\n{format_error(analysis.error, 'synthesize_literature')}"
        return f"{listing}\n\n## Review\n\n{analysis.text}"

    logger.info(f"Registered {len(REGISTERED_TOOLS)} literature tools")
    return list(REGISTERED_TOOLS)
