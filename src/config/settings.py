"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first) environment variables, then the
project-root ``.env`` file, then the defaults below.  Field ``vault_db_path``
maps to env var ``VAULT_DB_PATH`` and so on.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SmartForm Vault application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === LLM Providers ===
    # Empty string means "not configured"; provider selection in main.py
    # skips providers with empty keys.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible gateway (e.g. a hosted AI gateway)
    openai_text_model: str = ""
    openai_vision_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""

    # === Vault Store ===
    vault_db_path: str = "data/vault.db"

    # === User sessions ===
    # Empty secret = development mode: the user id is read from X-User-Id.
    session_secret: str = ""
    session_ttl_hours: int = 168

    # === Mock form sessions ===
    form_session_ttl_seconds: int = 3600
    form_session_max: int = 1000
    # When True, manual edits run the field's value transform before
    # validation (vault-sourced values always do).
    forms_transform_manual_edits: bool = False

    # === Advisory warnings ===
    advisory_enabled: bool = True
    advisory_timeout_seconds: float = 20.0
    advisory_max_lines: int = 3
    # Similarity (0.0-1.0, rapidfuzz partial_ratio / 100) at or above which
    # an advisory line is treated as a duplicate of an existing warning.
    advisory_dedup_threshold: float = 0.9
    advisory_dedup_prefix_chars: int = 20

    # === Uploads ===
    max_upload_bytes: int = 10 * 1024 * 1024
    max_image_dim: int = 2048

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("anthropic")
        return providers
