"""Public interface definitions for all external service providers.

Every external API or service in SmartForm Vault is accessed exclusively
through the abstract base classes defined in this package.  Concrete
adapters implement these interfaces and are injected at runtime.

ADAPTER PATTERN EXPLAINED (for junior developers):
    Instead of calling ``openai.chat.completions.create(...)`` directly in your
    code, you call ``llm_provider.complete(...)`` where ``llm_provider`` is any
    object implementing ``ILLMProvider``. This means:
        - Swapping OpenAI for Anthropic requires changing ONE place (the
          provider factory in main.py) instead of every file that uses LLMs.
        - Unit tests can inject a mock/fake provider without real API calls.

    The concrete providers live in ``src/providers/`` and are registered in
    ``src/main.py`` during application startup.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────────
    ILLMProvider               →  OpenAILLMProvider, AnthropicLLMProvider
    IExtractionProvider        →  LLMVisionExtractionProvider
    IVaultStore                →  SQLiteVaultStore
"""

from src.interfaces.extraction_provider import IExtractionProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.vault_store import IVaultStore

__all__ = [
    "IExtractionProvider",
    "ILLMProvider",
    "IVaultStore",
]
