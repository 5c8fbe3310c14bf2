"""
Infrastructure Layer - external services.

Contains:
- sources: literature source adapters (Crossref, arXiv, Semantic Scholar, PubMed)
- llm: text-generation backend client
"""
