"""Utility modules for SmartForm Vault.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at SmartFormError;
  lookups, auth, extraction and storage each raise their own subclass so
  callers can handle failures granularly.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **auth** -- HMAC-signed user tokens (``{user_id}:{timestamp}:{hmac}``).
- **image_preprocessor** -- Pillow-based decode / EXIF-rotate / downscale
  of uploaded document photos before vision extraction.
"""

# -- Signed user tokens ----------------------------------------------------
from src.utils.auth import create_user_token, validate_user_token

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    AdvisoryUnavailableError,
    AuthenticationError,
    ConfigurationError,
    ExtractionError,
    FieldNotFoundError,
    InvalidImageError,
    LLMError,
    NotFoundError,
    ProviderUnavailableError,
    RateLimitError,
    SessionNotFoundError,
    SmartFormError,
    TemplateNotFoundError,
    VaultItemNotFoundError,
    VaultStoreError,
)

# -- Image preparation for extraction --------------------------------------
from src.utils.image_preprocessor import ImagePreprocessor, detect_media_type

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "AdvisoryUnavailableError",
    "AuthenticationError",
    "ConfigurationError",
    "ExtractionError",
    "FieldNotFoundError",
    "ImagePreprocessor",
    "InvalidImageError",
    "LLMError",
    "NotFoundError",
    "ProviderUnavailableError",
    "RateLimitError",
    "SessionNotFoundError",
    "SmartFormError",
    "TemplateNotFoundError",
    "VaultItemNotFoundError",
    "VaultStoreError",
    "configure_logging",
    "create_user_token",
    "detect_media_type",
    "get_logger",
    "validate_user_token",
]
