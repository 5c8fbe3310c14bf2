"""
Base Source Adapter - Common HTTP request pattern for literature providers.

Provides the shared transport behaviour every adapter relies on:
- httpx.AsyncClient management (owned or injected)
- Bounded wait per call, surfaced as UpstreamTimeoutError
- Status and content-type validation, surfaced as BadUpstreamResponseError
- Consistent logging

There are no retries here: a failed call fails, and the aggregator decides
what that means for the request.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, ClassVar

import httpx
from typing_extensions import Self

from scholar_search.config import SourceConfig
from scholar_search.models import LiteratureRecord, RecordSource
from scholar_search.shared.exceptions import (
    BadUpstreamResponseError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "scholar-search/1.0"

_HTML_RE = re.compile(r"<!doctype|<html", re.IGNORECASE)
_ERROR_SNIPPET_CHARS = 300


def looks_like_html(text: str) -> bool:
    """Upstream error pages are usually HTML regardless of the requested format."""
    return bool(_HTML_RE.search(text[:2048]))


class BaseSourceAdapter:
    """
    Base class for literature source adapters.

    Subclasses set ``source`` and implement ``search()``. They may override
    ``_default_headers()`` to add provider-specific headers such as a
    polite-pool contact or an API key.

    Example:
        class MyAdapter(BaseSourceAdapter):
            source = RecordSource.CROSSREF

            async def search(self, query: str, limit: int = 20) -> list[LiteratureRecord]:
                data = await self._get_json("https://api.example.com/works", params={"q": query})
                return [self._parse_item(item) for item in data.get("items", [])]
    """

    source: ClassVar[RecordSource]

    def __init__(
        self,
        config: SourceConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize adapter.

        Args:
            config: Per-adapter settings (contact email, API key, timeout)
            client: Optional pre-built client, e.g. with a mock transport.
                    An injected client is not closed by ``close()``.
        """
        self._config = config or SourceConfig()
        self._timeout = self._config.timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )

    @property
    def name(self) -> str:
        return self.source.value

    @property
    def config(self) -> SourceConfig:
        return self._config

    async def search(self, query: str, limit: int = 20) -> list[LiteratureRecord]:
        """Translate ``query`` into a provider call and return normalized records."""
        raise NotImplementedError

    def _default_headers(self) -> dict[str, str]:
        return {"User-Agent": USER_AGENT}

    async def _request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        accept: str = "application/json",
    ) -> httpx.Response:
        """
        Issue a GET request bounded by the configured timeout.

        Raises:
            UpstreamTimeoutError: Deadline exceeded
            BadUpstreamResponseError: Transport failure or non-2xx status
        """
        headers = {**self._default_headers(), "Accept": accept}
        logger.debug(f"{self.name}: GET {url}")
        try:
            response = await self._client.get(
                url,
                params=params,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{self.name}: request timed out after {self._timeout:g}s")
            raise UpstreamTimeoutError(self.name, self._timeout) from e
        except httpx.HTTPError as e:
            raise BadUpstreamResponseError(
                f"{self.name}: request failed: {e}",
                source=self.name,
            ) from e

        if not response.is_success:
            raise BadUpstreamResponseError(
                f"[{response.status_code}] {response.text[:_ERROR_SNIPPET_CHARS]}",
                source=self.name,
                status=response.status_code,
            )
        return response

    async def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        """
        GET and parse a JSON body.

        A non-JSON content type is tolerated when the body still parses; an
        HTML body is always rejected.
        """
        response = await self._request(url, params=params, accept="application/json")
        text = response.text
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type.lower() and looks_like_html(text):
            raise BadUpstreamResponseError(
                f"{self.name}: non-JSON (HTML) response",
                source=self.name,
                status=response.status_code,
            )
        try:
            return json.loads(text)
        except ValueError as e:
            raise BadUpstreamResponseError(
                f"{self.name}: invalid JSON",
                source=self.name,
                status=response.status_code,
            ) from e

    async def _get_text(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        accept: str = "text/plain",
    ) -> str:
        """GET a text body (Atom, MEDLINE), rejecting HTML error pages."""
        response = await self._request(url, params=params, accept=accept)
        text = response.text
        if looks_like_html(text):
            raise BadUpstreamResponseError(
                f"{self.name}: returned HTML (likely an error page)",
                source=self.name,
                status=response.status_code,
            )
        return text

    async def close(self) -> None:
        """Close the underlying HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
