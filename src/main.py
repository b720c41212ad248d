"""SmartForm Vault FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.providers.extraction.llm_vision_provider import LLMVisionExtractionProvider
from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.vault.sqlite_vault_store import SQLiteVaultStore
from src.services.assistant_service import AssistantService
from src.services.extraction_service import DocumentExtractionService
from src.services.form_session import FormSessionRegistry
from src.services.translation_service import TranslationService
from src.services.warning_generator import WarningGenerator
from src.utils.image_preprocessor import ImagePreprocessor
from src.utils.logging import configure_logging, get_logger

_APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# LLM provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Select the first configured LLM provider.

    Priority order: OpenAI (or an OpenAI-compatible gateway) -> Anthropic.
    Returns ``None`` when no key is set; the vault and mock forms still
    work, and the LLM-backed routes answer 503.
    """
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    return None


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(
    app_settings: Settings,
    llm_provider: ILLMProvider | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    *llm_provider* overrides the key-based selection.
    """
    config = load_config(settings=app_settings)
    assistant_cfg = config.get("assistant", {})
    translation_cfg = config.get("translation", {})

    # -- Storage --
    vault_store = SQLiteVaultStore(db_path=app_settings.vault_db_path)

    # -- LLM --
    primary_llm = llm_provider or _build_llm_provider(app_settings)

    # -- LLM-backed services (absent without a provider) --
    extraction_service: DocumentExtractionService | None = None
    assistant_service: AssistantService | None = None
    translation_service: TranslationService | None = None
    if primary_llm is not None:
        extraction_service = DocumentExtractionService(
            extraction_provider=LLMVisionExtractionProvider(llm_provider=primary_llm),
            preprocessor=ImagePreprocessor(max_dim=app_settings.max_image_dim),
        )
        assistant_service = AssistantService(
            llm_provider=primary_llm,
            temperature=assistant_cfg.get("temperature", 0.4),
            max_tokens=assistant_cfg.get("max_tokens", 1200),
        )
        translation_service = TranslationService(
            llm_provider=primary_llm,
            temperature=translation_cfg.get("temperature", 0.1),
            max_tokens=translation_cfg.get("max_tokens", 2000),
        )

    # -- Mock forms --
    warning_generator = WarningGenerator(
        advisor=assistant_service,
        enabled=app_settings.advisory_enabled,
        timeout_seconds=app_settings.advisory_timeout_seconds,
        max_lines=app_settings.advisory_max_lines,
        dedup_threshold=app_settings.advisory_dedup_threshold,
        dedup_prefix_chars=app_settings.advisory_dedup_prefix_chars,
    )
    form_sessions = FormSessionRegistry(
        warning_generator=warning_generator,
        max_sessions=app_settings.form_session_max,
        ttl_seconds=app_settings.form_session_ttl_seconds,
        transform_manual_edits=app_settings.forms_transform_manual_edits,
    )

    provider_registry: dict[str, Any] = {
        "llm": primary_llm.get_provider_name() if primary_llm is not None else None,
        "vision": bool(extraction_service and extraction_service.is_available()),
        "vault": vault_store.get_provider_name(),
        "advisory": warning_generator.advisory_enabled,
    }

    return {
        "settings": app_settings,
        "vault_store": vault_store,
        "extraction_service": extraction_service,
        "assistant_service": assistant_service,
        "translation_service": translation_service,
        "warning_generator": warning_generator,
        "form_sessions": form_sessions,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    llm_provider: ILLMProvider | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Components are built when the lifespan starts, so each application
    instance (and each test client) gets its own vault store and session
    registry.
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise all providers and services on startup."""
        components = _build_all(app_settings, llm_provider=llm_provider)
        for key, value in components.items():
            setattr(application.state, key, value)

        await components["vault_store"].initialize()

        _logger.info(
            "app_startup",
            version=_APP_VERSION,
            environment=app_settings.app_env,
            providers=components["provider_registry"],
        )
        yield
        _logger.info("app_shutdown", form_sessions=len(components["form_sessions"]))

    application = FastAPI(
        title="SmartForm Vault API",
        version=_APP_VERSION,
        description=(
            "Scan identity and academic documents into a personal data vault, "
            "then reuse the stored fields to pre-fill and check application "
            "forms before submitting them."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
