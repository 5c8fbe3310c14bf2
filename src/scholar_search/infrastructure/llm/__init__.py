"""Text-generation backends."""

from .gemini import GeminiClient

__all__ = ["GeminiClient"]
