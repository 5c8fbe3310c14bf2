"""
Application DI Container (dependency-injector).

Centralizes service creation and lifecycle management for both presentation
layers (HTTP API and MCP server).

Usage::

    from scholar_search.container import ApplicationContainer

    container = ApplicationContainer()
    pipeline = container.pipeline()

    # In tests, pin the settings or override any provider:
    container.settings.override(providers.Object(Settings()))
    container.pipeline.override(providers.Object(mock_pipeline))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from scholar_search.application.search.deduplicator import Deduplicator
from scholar_search.application.search.pipeline import LiteratureSearchPipeline
from scholar_search.application.search.ranking import Ranker
from scholar_search.application.synthesis.service import SynthesisService
from scholar_search.config import Settings
from scholar_search.infrastructure.llm import GeminiClient
from scholar_search.infrastructure.sources import (
    BaseSourceAdapter,
    PubMedAdapter,
    create_source_adapters,
)
from scholar_search.models import RecordSource

logger = logging.getLogger(__name__)


def _create_gemini(settings: Settings) -> GeminiClient:
    return GeminiClient(settings.synthesis)


def _create_pubmed(settings: Settings, adapters: list[BaseSourceAdapter]) -> PubMedAdapter:
    """Reuse the aggregation adapter when PubMed is enabled, else build a dedicated one."""
    for adapter in adapters:
        if isinstance(adapter, PubMedAdapter):
            return adapter
    return PubMedAdapter(settings.source_config(RecordSource.PUBMED))


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for Scholar Search.

    Manages creation and lifecycle of all core services:
    - ``adapters``: enabled source adapters, in adapter order
    - ``pubmed``: single-paper PubMed lookup
    - ``gemini`` / ``synthesis``: literature review generation
    - ``pipeline``: multi-source search and analysis
    """

    settings = providers.Singleton(Settings.from_env)

    adapters = providers.Singleton(create_source_adapters, settings=settings)

    pubmed = providers.Singleton(_create_pubmed, settings=settings, adapters=adapters)

    gemini = providers.Singleton(_create_gemini, settings=settings)

    synthesis = providers.Singleton(SynthesisService, generator=gemini)

    pipeline = providers.Singleton(
        LiteratureSearchPipeline,
        adapters=adapters,
        deduplicator=providers.Singleton(Deduplicator),
        ranker=providers.Singleton(Ranker),
        synthesis=synthesis,
    )


async def shutdown_container(container: ApplicationContainer) -> None:
    """Close every HTTP client the container created."""
    closed: set[int] = set()
    clients = [*container.adapters(), container.pubmed(), container.gemini()]
    for client in clients:
        if id(client) in closed:
            continue
        closed.add(id(client))
        await client.close()
    logger.info("Closed %d HTTP clients", len(closed))


__all__ = ["ApplicationContainer", "shutdown_container"]
