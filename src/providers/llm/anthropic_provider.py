"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`.
Supports both text completion and vision analysis via the Claude Messages API.

Key differences from the OpenAI adapter:
    - System prompt is a separate parameter, not a message in the list
    - Vision uses an "image" content block with a base64 source (not image_url)
    - Response content is a list of blocks, so we filter for text blocks
    - Claude always supports vision, so there is no capability flag
"""

from __future__ import annotations

import base64

# The official Anthropic Python SDK (async version).
import anthropic
import structlog

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.utils.errors import LLMError, RateLimitError
from src.utils.image_preprocessor import detect_media_type

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Claude API.

    One model serves text and vision; override it with ``ANTHROPIC_MODEL``.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.anthropic_api_key
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        self._model = settings.anthropic_model or _DEFAULT_MODEL

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        """Generate a text completion via the Anthropic Messages API."""
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=temperature,
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitError(
                message="Rate limit exceeded. Please try again in a moment.",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        result = self._join_text(response, "Anthropic returned no text content")
        logger.info(
            "anthropic_completion",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return result

    async def vision_extract(
        self,
        image_bytes: bytes,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        """Analyse a document image using Claude's vision capability.

        The image block goes BEFORE the text prompt in the content array.
        """
        b64 = base64.b64encode(image_bytes).decode("utf-8")
        media_type = detect_media_type(image_bytes)
        kwargs: dict = {}
        if system_prompt:
            kwargs["system"] = system_prompt
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=4000,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": media_type,
                                    "data": b64,
                                },
                            },
                            {"type": "text", "text": prompt},
                        ],
                    }
                ],
                **kwargs,
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitError(
                message="Rate limit exceeded. Please try again in a moment.",
                provider_name=self.get_provider_name(),
            ) from exc
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic vision API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        result = self._join_text(response, "Anthropic vision returned no text content")
        logger.info(
            "anthropic_vision_extract",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return result

    def supports_vision(self) -> bool:
        return True

    def is_available(self) -> bool:
        """Return ``True`` if an Anthropic API key is configured."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """Try a minimal completion to verify the API key works."""
        if not self.is_available():
            return False
        try:
            await self._client.messages.create(
                model=self._model,
                max_tokens=10,
                messages=[{"role": "user", "content": "hi"}],
            )
            return True
        except anthropic.APIError:
            return False

    def get_provider_name(self) -> str:
        return "anthropic"

    def _join_text(self, response, empty_message: str) -> str:
        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise LLMError(message=empty_message, provider_name=self.get_provider_name())
        return "\n".join(text_blocks)
