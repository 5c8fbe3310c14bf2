"""
MCP Server Instructions - usage guide for AI agents.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
Scholar Search MCP Server - multi-source literature search for AI agents

═══════════════════════════════════════════════════════════════════════════════
Choosing a tool
═══════════════════════════════════════════════════════════════════════════════

## 1. Finding papers on a topic
Call search_literature(query=...). Crossref, arXiv, Semantic Scholar and
PubMed are searched together; duplicates are merged and the list is ranked by
citations and recency.

```
search_literature(query="CRISPR off-target detection", limit=10)
search_literature(query="diffusion models", sources="arxiv,semantic_scholar")
```

## 2. One specific PubMed article
Call fetch_pubmed_paper with a PMID, or with keywords for the single best
Title/Abstract match.

```
fetch_pubmed_paper(pmid="31978945")
fetch_pubmed_paper(query="remimazolam ICU sedation")
```

## 3. A literature review
Call synthesize_literature(query=...). It searches first, then writes a
structured review that cites papers by their number in the ranked list.

═══════════════════════════════════════════════════════════════════════════════
Notes
═══════════════════════════════════════════════════════════════════════════════
- A source that fails or times out is skipped; the others still answer.
- "No results" is a warning, not an error. Try broader keywords.
- Citation counts shown as "unknown" were not reported by the source.
"""
