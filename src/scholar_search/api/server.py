"""
HTTP API Server.

Exposes the literature pipeline over JSON endpoints:

- POST /api/lit/multisearch   multi-source search, merged and ranked
- POST /api/pubmed            single PubMed article by pmid or query
- POST /api/synthesis         review of a pre-built literature digest
- POST /api/lit/analyze       search followed by synthesis
- GET  /health
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from scholar_search import __version__
from scholar_search.container import ApplicationContainer, shutdown_container
from scholar_search.shared.exceptions import ScholarSearchError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_API_PORT = 8765


# Pydantic models for API requests
class MultiSearchRequest(BaseModel):
    """Multi-source search request."""

    model_config = ConfigDict(extra="ignore")

    query: str = ""
    limit: int | float | str | None = None
    sources: list[str] | str | None = None


class AnalyzeRequest(MultiSearchRequest):
    """Search followed by synthesis."""

    directive: str | None = None


class PubMedRequest(BaseModel):
    """Single-paper lookup; ``pmid`` takes priority over ``query``."""

    model_config = ConfigDict(extra="ignore")

    pmid: str | int | None = None
    query: str | None = None


class SynthesisRequest(BaseModel):
    """Review of a pre-built numbered digest."""

    model_config = ConfigDict(extra="ignore")

    literature_context: str = ""
    directive: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    sources: list[str]
    synthesis: bool


def _split_sources(sources: list[str] | str | None) -> list[str] | None:
    if sources is None:
        return None
    if isinstance(sources, str):
        return [s for s in sources.split(",") if s.strip()]
    return sources


def _container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def create_api_server(container: ApplicationContainer | None = None) -> FastAPI:
    """
    Create the FastAPI server.

    Args:
        container: Service container. A fresh one (settings from the
                   environment) is created when omitted.

    Returns:
        Configured FastAPI instance.
    """
    container = container or ApplicationContainer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        settings = container.settings()
        logger.info(f"HTTP API enabled sources: {', '.join(s.value for s in settings.enabled_sources)}")
        yield
        logger.info("HTTP API server shutting down")
        await shutdown_container(container)

    app = FastAPI(
        title="Scholar Search API",
        description="Multi-source scholarly literature search, merge, ranking and synthesis.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ScholarSearchError)
    async def handle_scholar_error(request: Request, exc: ScholarSearchError) -> JSONResponse:
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse({"error": message}, status_code=400)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        settings = _container(request).settings()
        return HealthResponse(
            status="healthy",
            version=__version__,
            sources=[s.value for s in settings.enabled_sources],
            synthesis=bool(settings.synthesis.api_key),
        )

    # -------------------------------------------------------------------------
    # Multi-source search
    # -------------------------------------------------------------------------

    @app.get("/api/lit/multisearch")
    async def multisearch_probe() -> dict[str, Any]:
        return {"ok": True, "service": "lit-multisearch"}

    @app.post("/api/lit/multisearch")
    async def multisearch(body: MultiSearchRequest, request: Request) -> dict[str, Any]:
        """
        Search every enabled source, merge duplicates and rank.

        Returns ``{items, top, sources}``; ``sources`` maps each queried source to
        ``{ok, count}`` or ``{ok: false, error}``. When the merged set is empty a
        ``warning`` is added, e.g. ``{items: [], top: [], warning, sources}``.
        """
        pipeline = _container(request).pipeline()
        result = await pipeline.search(body.query, body.limit, _split_sources(body.sources))
        return result.to_dict()

    @app.post("/api/lit/analyze")
    async def analyze(body: AnalyzeRequest, request: Request) -> dict[str, Any]:
        """Search, then synthesize a review of the top records."""
        pipeline = _container(request).pipeline()
        result = await pipeline.analyze(
            body.query,
            body.limit,
            _split_sources(body.sources),
            directive=body.directive,
        )
        return result.to_dict()

    # -------------------------------------------------------------------------
    # PubMed single paper
    # -------------------------------------------------------------------------

    @app.get("/api/pubmed")
    async def pubmed_probe() -> dict[str, Any]:
        return {"ok": True, "service": "pubmed-single", "using": "NCBI E-utilities"}

    @app.post("/api/pubmed", response_model=None)
    async def pubmed_paper(body: PubMedRequest, request: Request) -> dict[str, Any] | JSONResponse:
        """Resolve one PubMed article by pmid, or by the best match for a query."""
        pubmed = _container(request).pubmed()
        pmid = str(body.pmid).strip() if body.pmid is not None else None
        try:
            paper = await pubmed.fetch_paper(pmid=pmid, query=body.query)
        except UpstreamError as e:
            logger.error(f"PubMed lookup failed: {e.message}")
            return JSONResponse(e.to_dict(), status_code=502)
        return {"paper": paper.to_dict()}

    # -------------------------------------------------------------------------
    # Synthesis
    # -------------------------------------------------------------------------

    @app.post("/api/synthesis")
    async def synthesis(body: SynthesisRequest, request: Request) -> dict[str, Any]:
        """Generate a review from a numbered literature digest."""
        service = _container(request).synthesis()
        text = await service.synthesize_context(body.literature_context, body.directive)
        return {"text": text}

    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = DEFAULT_API_PORT,
) -> None:
    """
    Run the HTTP API server.

    Args:
        host: Host to bind to (default: 127.0.0.1 for local only)
        port: Port to bind to (default: 8765)
    """
    import uvicorn

    app = create_api_server()
    logger.info(f"Starting HTTP API server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Scholar Search HTTP API Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=DEFAULT_API_PORT, help="Port to bind to")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_api_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
