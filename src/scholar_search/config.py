"""
Runtime configuration.

Environment variables are read once, at startup, by ``Settings.from_env``.
Adapters receive an explicit ``SourceConfig`` and never consult the
environment themselves, so they can be exercised with fixture configurations.

Environment Variables:
    CROSSREF_MAILTO: Contact email for the Crossref polite pool
    SEMANTIC_SCHOLAR_KEY: Optional Semantic Scholar API key
    NCBI_API_KEY / NCBI_API: Optional E-utilities API key
    NCBI_EMAIL: Contact email sent to E-utilities
    NCBI_TOOL: Client identifier sent to E-utilities
    GEMINI_API_KEY: Key for the literature-analysis text-generation backend
    GEMINI_MODEL: Model name (default: gemini-2.0-flash)
    SCHOLAR_SEARCH_SOURCES: Comma-separated enabled sources (default: all)
    SCHOLAR_SEARCH_TIMEOUT: Per-request timeout in seconds (default: 6)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from scholar_search.models import RecordSource
from scholar_search.shared.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 6.0
DEFAULT_NCBI_TOOL = "scholar-search"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
ALL_SOURCES: tuple[RecordSource, ...] = (
    RecordSource.CROSSREF,
    RecordSource.ARXIV,
    RecordSource.SEMANTIC_SCHOLAR,
    RecordSource.PUBMED,
)


@dataclass(frozen=True)
class SourceConfig:
    """
    Per-adapter configuration.

    Attributes:
        mailto: Contact email (Crossref polite pool, E-utilities ``email``)
        api_key: Optional auth token; absence only degrades rate limits
        tool: Client identifier (E-utilities ``tool``)
        timeout: Bounded wait for each network call, in seconds
    """

    mailto: str | None = None
    api_key: str | None = None
    tool: str | None = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class SynthesisConfig:
    """Text-generation backend settings."""

    api_key: str | None = None
    model: str = DEFAULT_GEMINI_MODEL
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    temperature: float = 0.3
    max_output_tokens: int = 2048
    timeout: float = 60.0


@dataclass(frozen=True)
class Settings:
    """Process-wide settings assembled from the environment."""

    crossref: SourceConfig = field(default_factory=SourceConfig)
    arxiv: SourceConfig = field(default_factory=SourceConfig)
    semantic_scholar: SourceConfig = field(default_factory=SourceConfig)
    pubmed: SourceConfig = field(default_factory=lambda: SourceConfig(tool=DEFAULT_NCBI_TOOL))
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    enabled_sources: tuple[RecordSource, ...] = ALL_SOURCES

    def source_config(self, source: RecordSource) -> SourceConfig:
        """Get the adapter configuration for ``source``."""
        return {
            RecordSource.CROSSREF: self.crossref,
            RecordSource.ARXIV: self.arxiv,
            RecordSource.SEMANTIC_SCHOLAR: self.semantic_scholar,
            RecordSource.PUBMED: self.pubmed,
        }[source]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        timeout = DEFAULT_TIMEOUT
        raw_timeout = get("SCHOLAR_SEARCH_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid SCHOLAR_SEARCH_TIMEOUT={raw_timeout!r}")

        enabled = ALL_SOURCES
        raw_sources = get("SCHOLAR_SEARCH_SOURCES")
        if raw_sources:
            enabled = parse_sources(raw_sources.split(","))

        settings = cls(
            crossref=SourceConfig(mailto=get("CROSSREF_MAILTO"), timeout=timeout),
            arxiv=SourceConfig(timeout=timeout),
            semantic_scholar=SourceConfig(api_key=get("SEMANTIC_SCHOLAR_KEY"), timeout=timeout),
            pubmed=SourceConfig(
                mailto=get("NCBI_EMAIL"),
                api_key=get("NCBI_API_KEY") or get("NCBI_API"),
                tool=get("NCBI_TOOL") or DEFAULT_NCBI_TOOL,
                timeout=timeout,
            ),
            synthesis=SynthesisConfig(
                api_key=get("GEMINI_API_KEY"),
                model=get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
            ),
            enabled_sources=enabled,
        )
        if not settings.crossref.mailto:
            logger.info("CROSSREF_MAILTO not set, Crossref requests leave the polite pool")
        if not settings.synthesis.api_key:
            logger.info("GEMINI_API_KEY not set, literature synthesis is unavailable")
        return settings


def parse_sources(names: list[str] | tuple[str, ...]) -> tuple[RecordSource, ...]:
    """
    Parse source names, preserving canonical adapter order.

    Raises:
        InvalidInputError: If a name is not a known source
    """
    requested: set[RecordSource] = set()
    for name in names:
        if not name or not name.strip():
            continue
        try:
            requested.add(RecordSource.parse(name))
        except ValueError as e:
            raise InvalidInputError(
                f"Unknown source {name.strip()!r}",
                field_name="sources",
                value=name,
            ) from e
    return tuple(s for s in ALL_SOURCES if s in requested)
