"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
Supports both text completion and vision analysis.  When a custom
``openai_base_url`` is configured (a hosted AI gateway, TogetherAI,
Fireworks, Groq ...), the client points at that URL instead of the default
OpenAI endpoint.

Many hosted model gateways expose OpenAI-compatible REST APIs, so this one
adapter covers the document-extraction vision model, the assistant chat
model and the translation model behind a single key.
"""

from __future__ import annotations

# base64 is used to encode image bytes into a base64 string for the vision API.
# The OpenAI vision endpoint requires images as base64 data URIs.
import base64

# The official OpenAI Python SDK (async version).
import openai
import structlog

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.utils.errors import LLMError, ProviderUnavailableError, RateLimitError
from src.utils.image_preprocessor import detect_media_type

logger = structlog.get_logger(logger_name=__name__)

# HTTP 402 from hosted gateways means the account is out of credits.
_PAYMENT_REQUIRED = 402


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible API.

    Uses ``gpt-4o`` for vision tasks and ``gpt-4o-mini`` for text-only
    completions by default.  Both can be overridden via settings when the
    client points at a gateway with different model names.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        # API key loaded from OPENAI_API_KEY env var via Pydantic Settings.
        self._api_key = settings.openai_api_key

        # Build client kwargs; add base_url only when a custom endpoint is
        # configured. Document extraction on large scans can take a while,
        # so the read timeout is longer than the connect timeout.
        client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(60.0, connect=5.0),
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        # Separate models for text-only and vision tasks.
        self._text_model = settings.openai_text_model or "gpt-4o-mini"
        self._vision_model = settings.openai_vision_model or "gpt-4o"
        # Assume vision is available unless using a custom base_url that might
        # not support it. Can be explicitly enabled via openai_vision_model.
        self._has_vision = bool(settings.openai_vision_model) or not settings.openai_base_url
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )

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
        """Generate a text completion via the OpenAI-compatible chat API.

        Used by the assistant, the advisory form-warning call and
        translation.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self._text_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
            content = response.choices[0].message.content
            if content is None:
                raise LLMError(
                    message=f"{self._provider_label} returned empty response",
                    provider_name=self.get_provider_name(),
                )
            logger.info(
                "openai_completion",
                model=self._text_model,
                provider=self._provider_label,
                tokens=response.usage.total_tokens if response.usage else None,
            )
            return content
        except openai.APIError as exc:
            raise self._wrap_error(exc, "completion") from exc

    async def vision_extract(
        self,
        image_bytes: bytes,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        """Analyse a document image using the configured vision model."""
        if not self._has_vision:
            raise LLMError(
                message="Vision not supported by this provider configuration",
                provider_name=self.get_provider_name(),
            )
        b64 = base64.b64encode(image_bytes).decode("utf-8")
        media_type = detect_media_type(image_bytes)

        messages: list[dict] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        # Vision requests use a multi-part content array: one text part and
        # one image_url part carrying a data URI.
        messages.append(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{media_type};base64,{b64}"},
                    },
                ],
            }
        )
        try:
            response = await self._client.chat.completions.create(
                model=self._vision_model,
                messages=messages,
                max_tokens=4000,
            )
            content = response.choices[0].message.content
            if content is None:
                raise LLMError(
                    message=f"{self._provider_label} vision returned empty response",
                    provider_name=self.get_provider_name(),
                )
            logger.info(
                "openai_vision_extract",
                model=self._vision_model,
                provider=self._provider_label,
                tokens=response.usage.total_tokens if response.usage else None,
            )
            return content
        except openai.APIError as exc:
            raise self._wrap_error(exc, "vision") from exc

    def supports_vision(self) -> bool:
        return self._has_vision

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """Try listing models to verify the API key works."""
        if not self.is_available():
            return False
        try:
            await self._client.models.list()
            return True
        except openai.APIError:
            return False

    def get_provider_name(self) -> str:
        """Return 'openai' or 'openai-compatible' depending on configuration."""
        return self._provider_label

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _wrap_error(self, exc: openai.APIError, operation: str) -> Exception:
        """Translate an SDK exception into the application hierarchy.

        Rate limits and exhausted credits get their own types so the error
        middleware can return 429 / 502 with a useful message.
        """
        name = self.get_provider_name()
        if isinstance(exc, openai.RateLimitError):
            return RateLimitError(
                message="Rate limit exceeded. Please try again in a moment.",
                provider_name=name,
            )
        if isinstance(exc, openai.APIStatusError) and exc.status_code == _PAYMENT_REQUIRED:
            return ProviderUnavailableError(
                message="AI credits exhausted. Please add credits to continue.",
                provider_name=name,
            )
        if isinstance(exc, openai.APITimeoutError):
            return LLMError(message=f"{self._provider_label} {operation} timed out", provider_name=name)
        return LLMError(message=f"{self._provider_label} {operation} API error: {exc}", provider_name=name)
