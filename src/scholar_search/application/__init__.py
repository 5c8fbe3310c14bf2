"""
Application Layer - use cases over the source adapters.

Contains:
- search: aggregation, deduplication, ranking and the search pipeline
- synthesis: literature digest and review generation
"""
