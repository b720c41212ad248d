"""Document extraction providers."""

from src.providers.extraction.llm_vision_provider import LLMVisionExtractionProvider

__all__ = ["LLMVisionExtractionProvider"]
