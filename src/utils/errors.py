"""Custom exception hierarchy for SmartForm Vault.

All application exceptions inherit from :class:`SmartFormError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "anthropic", "sqlite_vault") caused the
failure.

The hierarchy is organized by concern:

    SmartFormError  (base -- catch-all for any SmartForm error)
    +-- NotFoundError              (caller/registry mismatch)
    |   +-- TemplateNotFoundError
    |   +-- FieldNotFoundError
    |   +-- SessionNotFoundError
    |   +-- VaultItemNotFoundError
    +-- AuthenticationError        (missing or invalid session token)
    +-- ExtractionError            (document OCR / field extraction)
    |   +-- InvalidImageError      (upload is not a decodable image)
    +-- AdvisoryUnavailableError   (optional advisory-warning call)
    +-- LLMError                   (any LLM API call failure)
    +-- RateLimitError             (provider rate-limit exceeded)
    +-- ProviderUnavailableError   (external service down / unreachable)
    +-- VaultStoreError            (vault persistence failure)
    +-- ConfigurationError         (startup / missing config)

Format problems on form fields are NOT exceptions: they are expressed as
``FieldStatus.status == "invalid"`` by the reconciliation engine.
"""


class SmartFormError(Exception):
    """Base exception for all SmartForm errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for log
    output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Lookup errors
# ---------------------------------------------------------------------------

class NotFoundError(SmartFormError):
    """Raised when an id does not resolve (template, field, session, item).

    Signals a caller bug or a stale client: fatal to the operation, not to
    the user's session.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TemplateNotFoundError(NotFoundError):
    """Raised when a form template id is not in the registry."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(message=f"Unknown form template: {template_id}")


class FieldNotFoundError(NotFoundError):
    """Raised when a field id is not part of the selected template."""

    def __init__(self, field_id: str, template_id: str) -> None:
        self.field_id = field_id
        self.template_id = template_id
        super().__init__(
            message=f"Field '{field_id}' is not defined in template '{template_id}'"
        )


class SessionNotFoundError(NotFoundError):
    """Raised when a form session id is unknown, expired, or owned by another user."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(message=f"Form session not found: {session_id}")


class VaultItemNotFoundError(NotFoundError):
    """Raised when a vault item id does not exist for the current user."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(message=f"Vault item not found: {item_id}")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class AuthenticationError(SmartFormError):
    """Raised when a request carries no valid user session token."""

    def __init__(
        self,
        message: str = "Not authenticated",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External AI collaborators
# ---------------------------------------------------------------------------

class ExtractionError(SmartFormError):
    """Raised when document field extraction fails outright."""

    def __init__(
        self,
        message: str = "Document extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidImageError(ExtractionError):
    """Raised when uploaded bytes cannot be decoded as an image."""

    def __init__(
        self,
        message: str = "Uploaded file is not a readable image",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AdvisoryUnavailableError(SmartFormError):
    """Raised when the advisory-warning call fails or returns nothing usable.

    The warning generator always swallows this; it never reaches the user.
    """

    def __init__(
        self,
        message: str = "Advisory service unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(SmartFormError):
    """Raised when an LLM API call fails or returns an unparseable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(SmartFormError):
    """Raised when an API rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(SmartFormError):
    """Raised when an external service or provider is unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Storage / configuration
# ---------------------------------------------------------------------------

class VaultStoreError(SmartFormError):
    """Raised when the vault store cannot read or write rows."""

    def __init__(
        self,
        message: str = "Vault store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(SmartFormError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
