"""Shared pytest fixtures for the SmartForm Vault test suite."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.models.vault import UserSession, VaultItem
from src.utils.errors import LLMError

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeLLMProvider(ILLMProvider):
    """In-memory ILLMProvider that records calls and returns canned replies.

    ``complete_reply`` / ``vision_reply`` may be a string or an exception
    instance, in which case the exception is raised.
    """

    def __init__(
        self,
        complete_reply: str | Exception = "OK",
        vision_reply: str | Exception = "{}",
        vision: bool = True,
        available: bool = True,
    ) -> None:
        self.complete_reply = complete_reply
        self.vision_reply = vision_reply
        self._vision = vision
        self._available = available
        self.complete_calls: list[dict[str, Any]] = []
        self.vision_calls: list[dict[str, Any]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        self.complete_calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if isinstance(self.complete_reply, Exception):
            raise self.complete_reply
        return self.complete_reply

    async def vision_extract(
        self,
        image_bytes: bytes,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        self.vision_calls.append(
            {"image_bytes": image_bytes, "prompt": prompt, "system_prompt": system_prompt}
        )
        if isinstance(self.vision_reply, Exception):
            raise self.vision_reply
        return self.vision_reply

    def supports_vision(self) -> bool:
        return self._vision

    def get_provider_name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return self._available

    async def validate_credentials(self) -> bool:
        return self._available


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_item(
    field_name: str,
    field_value: str,
    category: str = "personal",
    is_verified: bool = True,
    item_id: str | None = None,
    user_id: str = "user-1",
) -> VaultItem:
    """Build a VaultItem with a predictable id."""
    return VaultItem(
        id=item_id or f"{category}:{field_name}",
        category=category,
        field_name=field_name,
        field_value=field_value,
        is_verified=is_verified,
        user_id=user_id,
    )


def make_image_bytes(
    width: int = 100,
    height: int = 60,
    fmt: str = "JPEG",
    color: tuple[int, int, int] = (255, 255, 255),
) -> bytes:
    """Create a minimal in-memory image."""
    img = Image.new("RGB", (width, height), color=color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def user() -> UserSession:
    return UserSession(user_id="user-1")


@pytest.fixture
def fake_llm() -> FakeLLMProvider:
    return FakeLLMProvider()


@pytest.fixture
def failing_llm() -> FakeLLMProvider:
    error = LLMError("upstream exploded", provider_name="fake")
    return FakeLLMProvider(complete_reply=error, vision_reply=error)


@pytest.fixture
def complete_vault() -> list[VaultItem]:
    """A vault that fills every government-exam field with valid values."""
    return [
        make_item("Full Name", "Rahul Kumar Sharma"),
        make_item("Father's Name", "Suresh Kumar Sharma"),
        make_item("Mother's Name", "Sunita Sharma"),
        make_item("Date of Birth", "15/08/2002"),
        make_item("Gender", "Male"),
        make_item("Aadhaar Number", "1234 5678 9012", category="identity"),
        make_item("Mobile", "9876543210", category="contact"),
        make_item("Email", "Rahul.Sharma@Example.com", category="contact"),
        make_item("Address", "12 MG Road, Jaipur, Rajasthan", category="contact"),
        make_item("PIN Code", "302001", category="contact"),
    ]


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with no provider keys and a throwaway vault database."""
    return Settings(
        openai_api_key="",
        anthropic_api_key="",
        session_secret="",
        vault_db_path=str(tmp_path / "vault.db"),
        app_env="test",
    )
