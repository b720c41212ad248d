"""Form-filling assistant backed by the configured LLM.

Answers free-form questions about the user's extracted documents and forms.
When vault rows are supplied they are added to the system prompt grouped by
category, so the model can suggest concrete values ("use your PAN number
ABCDE1234F for field 7").

The same ``ask`` call serves the advisory step of the mock-form warning
generator (context ``"Mock form validation"``).
"""

from __future__ import annotations

from collections.abc import Sequence

from src.interfaces.llm_provider import ILLMProvider
from src.models.vault import VaultItem
from src.utils.logging import get_logger

_SYSTEM_PROMPT = """\
You are a helpful AI assistant for the SmartForm filling system. Your role is to:

1. Help users understand their extracted document data
2. Assist with form filling by suggesting values from their verified data
3. Answer questions about document types and required fields
4. Provide guidance on data verification
5. Help identify potential errors or inconsistencies in data
6. Suggest corrections for common mistakes

Be concise, helpful, and friendly. If you're suggesting data to fill in a form, \
be clear about which field it's for.
{vault_context}

Current context: {context}"""

_DEFAULT_CONTEXT = "General assistance"


def build_vault_context(vault_items: Sequence[VaultItem]) -> str:
    """Render vault rows as a prompt section grouped by category.

    Categories appear in first-seen order; an empty vault renders as "".
    """
    if not vault_items:
        return ""
    grouped: dict[str, list[str]] = {}
    for item in vault_items:
        grouped.setdefault(item.category, []).append(f"- {item.field_name}: {item.field_value}")

    lines = ["", "", "User's verified data from their vault:"]
    for category, entries in grouped.items():
        lines.append("")
        lines.append(f"{category.upper()}:")
        lines.extend(entries)
    return "\n".join(lines)


class AssistantService:
    """Chat completions grounded in the user's vault."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        temperature: float = 0.4,
        max_tokens: int = 1200,
    ) -> None:
        self._llm = llm_provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = get_logger(__name__)

    async def ask(
        self,
        message: str,
        context: str | None = None,
        vault_items: Sequence[VaultItem] | None = None,
    ) -> str:
        """Send *message* to the model and return its reply.

        Raises:
            ValueError: If *message* is empty or whitespace.
            LLMError / RateLimitError: Propagated from the provider.
        """
        if not message or not message.strip():
            raise ValueError("No message provided")

        system_prompt = _SYSTEM_PROMPT.format(
            vault_context=build_vault_context(vault_items or []),
            context=context or _DEFAULT_CONTEXT,
        )
        self._logger.info(
            "assistant_request",
            context=context or _DEFAULT_CONTEXT,
            preview=message[:100],
            vault_items=len(vault_items or []),
        )
        return await self._llm.complete(
            system_prompt=system_prompt,
            user_prompt=message,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
