"""LLM provider adapters.

Two concrete implementations of ILLMProvider (src/interfaces/llm_provider.py):
    - OpenAILLMProvider:    gpt-4o / gpt-4o-mini (also any OpenAI-compatible gateway)
    - AnthropicLLMProvider: Claude Sonnet (vision + text)

At startup, main.py creates the provider matching the available API key
(OPENAI_API_KEY first, then ANTHROPIC_API_KEY) and injects it into
FastAPI's app.state for dependency injection.
"""

from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider", "AnthropicLLMProvider"]
