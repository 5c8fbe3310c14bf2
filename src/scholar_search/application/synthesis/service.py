"""
SynthesisService - turn ranked records into a cited literature review.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from scholar_search.application.synthesis.context import (
    CONTEXT_CHAR_BUDGET,
    DEFAULT_TOP_K,
    build_context,
    build_prompt,
    clean_markup,
    sources_label,
)
from scholar_search.models import LiteratureRecord
from scholar_search.shared.exceptions import InvalidInputError, SynthesisError

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class SynthesisService:
    """
    Build a bounded digest, send it to the text generator and clean the reply.

    Example:
        >>> service = SynthesisService(GeminiClient(settings.synthesis))
        >>> text = await service.synthesize_records(result.top)
    """

    def __init__(
        self,
        generator: TextGenerator,
        *,
        top_k: int = DEFAULT_TOP_K,
        max_chars: int = CONTEXT_CHAR_BUDGET,
    ) -> None:
        self._generator = generator
        self.top_k = top_k
        self.max_chars = max_chars

    async def synthesize_records(
        self,
        records: Sequence[LiteratureRecord],
        directive: str | None = None,
    ) -> str:
        """
        Review the top ``top_k`` records.

        Raises:
            InvalidInputError: No records (the generator is not called)
            SynthesisError: Generation failed
        """
        if not records:
            raise InvalidInputError("No literature to analyze", field_name="records")
        selected = list(records[: self.top_k])
        context = build_context(selected, top_k=self.top_k, max_chars=self.max_chars)
        return await self.synthesize_context(context, directive, label=sources_label(selected))

    async def synthesize_context(
        self,
        literature_context: str,
        directive: str | None = None,
        *,
        label: str | None = None,
    ) -> str:
        """
        Review a pre-built digest.

        Raises:
            InvalidInputError: Empty digest (the generator is not called)
            SynthesisError: Generation failed or produced no text
        """
        if not literature_context or not literature_context.strip():
            raise InvalidInputError("Missing literature_context", field_name="literature_context")

        prompt = build_prompt(literature_context, directive, label)
        logger.info(f"Synthesizing review from {len(literature_context)} chars of context")
        raw = await self._generator.generate(prompt)
        text = clean_markup(raw)
        if not text:
            raise SynthesisError("Text generation returned an empty response")
        return text
