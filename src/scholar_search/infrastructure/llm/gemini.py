"""
Gemini text-generation client.

Calls the ``generateContent`` REST endpoint directly over httpx. A single
non-streaming request per call; no retries.

API Documentation: https://ai.google.dev/api/generate-content
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from typing_extensions import Self

from scholar_search.config import SynthesisConfig
from scholar_search.shared.exceptions import SynthesisError

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Minimal Gemini client for one-shot prompts.

    Usage:
        async with GeminiClient(SynthesisConfig(api_key=key)) as gemini:
            text = await gemini.generate("Summarize ...")
    """

    def __init__(
        self,
        config: SynthesisConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or SynthesisConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    @property
    def configured(self) -> bool:
        return bool(self._config.api_key)

    @property
    def model(self) -> str:
        return self._config.model

    def _endpoint(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/models/{self._config.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        """
        Generate text for ``prompt``.

        Raises:
            SynthesisError: Missing key, transport failure, non-2xx status or
                            a body without candidate text
        """
        if not self._config.api_key:
            raise SynthesisError("GEMINI_API_KEY is not configured")

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "maxOutputTokens": self._config.max_output_tokens,
            },
        }
        logger.debug(f"Gemini: generateContent model={self._config.model} prompt_chars={len(prompt)}")
        try:
            response = await self._client.post(
                self._endpoint(),
                json=payload,
                headers={"x-goog-api-key": self._config.api_key},
                timeout=self._config.timeout,
            )
        except httpx.TimeoutException as e:
            raise SynthesisError(f"Gemini request timed out after {self._config.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise SynthesisError(f"Gemini request failed: {e}") from e

        if not response.is_success:
            raise SynthesisError(
                f"Gemini API error [{response.status_code}]: {response.text[:300]}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SynthesisError("Gemini returned invalid JSON", status=response.status_code) from e

        text = self._extract_text(data)
        if not text:
            raise SynthesisError("Gemini returned no text (blocked or empty candidates)")
        return text

    @staticmethod
    def _extract_text(data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
