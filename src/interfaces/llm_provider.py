"""Abstract base class for LLM service providers.

Defines the contract for any large-language-model backend used for document
field extraction (vision), the form assistant, advisory form warnings, and
translation.  Implementations wrap the OpenAI API (or any OpenAI-compatible
gateway) and the Anthropic API.  The adapter pattern keeps every call-site
provider-agnostic.
"""

from __future__ import annotations

# ABC = Abstract Base Class, Python's way of defining interfaces.
# If a concrete class forgets to implement an abstractmethod, Python raises
# TypeError when you try to instantiate it. This catches bugs at startup.
from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, AnthropicLLMProvider
# Located in: src/providers/llm/
class ILLMProvider(ABC):
    """Contract for LLM services used throughout SmartForm Vault.

    Providers must support plain text completion; vision (image analysis) is
    optional and declared via :meth:`supports_vision`.  Document extraction
    needs a vision-capable provider; everything else is text-only.
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The user-facing prompt containing the actual request or data.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        src.utils.errors.LLMError
            If the API call fails or returns an empty response.
        src.utils.errors.RateLimitError
            If the provider rejected the call with a rate-limit status.
        """

    @abstractmethod
    async def vision_extract(
        self,
        image_bytes: bytes,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        """Analyse an image using the model's vision capability.

        Parameters
        ----------
        image_bytes:
            Raw bytes of the image to analyse.
        prompt:
            A natural-language instruction describing what to extract.
        system_prompt:
            Optional system message sent ahead of the image.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        src.utils.errors.LLMError
            If the provider does not support vision or the API call fails.
        """

    @abstractmethod
    def supports_vision(self) -> bool:
        """Return ``True`` if this provider can process image inputs."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider.

        Example return values: ``"openai"``, ``"anthropic"``.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations check that credentials are present without making
        an inference call.
        """

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm credentials are valid.

        Unlike :meth:`is_available`, this method actively contacts the
        remote service.
        """
