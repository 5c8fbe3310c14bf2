"""Data models shared across adapters, merge/rank and presentation layers."""

from .record import (
    AggregationResult,
    LiteratureRecord,
    PubMedPaper,
    RecordSource,
    SourceOutcome,
)

__all__ = [
    "AggregationResult",
    "LiteratureRecord",
    "PubMedPaper",
    "RecordSource",
    "SourceOutcome",
]
