"""Text translation via the configured LLM."""

from __future__ import annotations

from src.interfaces.llm_provider import ILLMProvider
from src.utils.logging import get_logger

_SYSTEM_PROMPT = """\
You are a professional translator. Translate the given text accurately to {target}.

Rules:
- Preserve the meaning and context
- Keep proper nouns, names, and technical terms as-is when appropriate
- Maintain formatting and structure
- Only return the translated text, no explanations"""


class TranslationService:
    """Translates UI strings and extracted document text."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        temperature: float = 0.1,
        max_tokens: int = 2000,
    ) -> None:
        self._llm = llm_provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = get_logger(__name__)

    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: str = "auto",
    ) -> str:
        """Return *text* translated to *target_language*, stripped.

        ``source_language="auto"`` lets the model detect the input language.

        Raises:
            ValueError: If *text* or *target_language* is empty.
        """
        if not text or not target_language:
            raise ValueError("Text and target language are required")

        user_prompt = f"Translate this to {target_language}:\n\n{text}"
        if source_language and source_language != "auto":
            user_prompt = f"Translate this from {source_language} to {target_language}:\n\n{text}"

        self._logger.info(
            "translation_request",
            preview=text[:50],
            source=source_language,
            target=target_language,
        )
        translated = await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT.format(target=target_language),
            user_prompt=user_prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        return translated.strip()
