"""Literature review synthesis."""

from .context import build_context, build_prompt, clean_markup, cite_line
from .service import SynthesisService, TextGenerator

__all__ = [
    "SynthesisService",
    "TextGenerator",
    "build_context",
    "build_prompt",
    "cite_line",
    "clean_markup",
]
