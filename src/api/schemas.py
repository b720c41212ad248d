"""Pydantic request/response schemas for the SmartForm Vault API.

Defines the public contract for all REST endpoints: document processing,
vault management, assisted filling, mock form sessions, the assistant,
translation and health.

# ─── HOW SCHEMAS WORK (Junior Developer Guide) ────────────────────────
#
# These Pydantic models define the *shape* of every HTTP request body
# and response body in the API.  FastAPI uses them for:
#
#   1. **Validation**: Incoming JSON is automatically validated against
#      the schema.  Invalid requests get a 422 error with details.
#   2. **Serialization**: Outgoing objects are automatically converted
#      to JSON matching the schema (via response_model=...).
#   3. **Documentation**: FastAPI generates OpenAPI/Swagger docs from
#      these schemas automatically (visible at /docs).
#
# Document, assistant and translation payloads use the camelCase keys
# the web frontend already sends (``imageBase64``, ``targetLanguage``);
# snake_case is accepted too via ``populate_by_name``.  Form-session
# payloads are plain snake_case.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.forms import ChecklistItem, FieldStatus, FormTemplate
from src.models.vault import DocumentType, ExtractedField, ExtractionResult, VaultItem

# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class ProcessDocumentRequest(BaseModel):
    """A base64-encoded document image to run through extraction."""

    model_config = ConfigDict(populate_by_name=True)

    image_base64: str = Field(..., alias="imageBase64", min_length=1)
    document_type: DocumentType = Field(default=DocumentType.OTHER, alias="documentType")
    language: str = Field(default="en", max_length=16)


class ProcessDocumentResponse(BaseModel):
    """Extraction result for the user to review before saving."""

    success: bool = True
    data: ExtractionResult


# ---------------------------------------------------------------------------
# Vault
# ---------------------------------------------------------------------------


class SaveVaultItemsRequest(BaseModel):
    """Reviewed fields the user chose to keep."""

    fields: list[ExtractedField] = Field(..., min_length=1)


class SaveVaultItemsResponse(BaseModel):
    saved: list[VaultItem]
    count: int


class VaultResponse(BaseModel):
    """The user's vault grouped by category, with verification counts."""

    by_category: dict[str, list[VaultItem]]
    total: int
    verified: int
    pending: int


class VaultItemDeletedResponse(BaseModel):
    id: str
    deleted: bool = True


# ---------------------------------------------------------------------------
# Assisted filling
# ---------------------------------------------------------------------------


class AssistedEntryResponse(BaseModel):
    """One vault row ready to copy into an external form."""

    id: str
    category: str
    field_name: str
    field_value: str
    is_verified: bool
    display_name: str
    copy_value: str = Field(description="Value after the field's format transform")
    format_hint: str | None = None
    warning: str | None = None


class AssistedResponse(BaseModel):
    query: str
    groups: dict[str, list[AssistedEntryResponse]]
    total: int
    verified: int
    pending: int


# ---------------------------------------------------------------------------
# Mock form sessions
# ---------------------------------------------------------------------------


class TemplatesResponse(BaseModel):
    templates: list[FormTemplate]


class CreateFormSessionRequest(BaseModel):
    template_id: str = Field(..., min_length=1)


class SelectTemplateRequest(BaseModel):
    template_id: str = Field(..., min_length=1)


class EditFieldRequest(BaseModel):
    """A manual edit; an empty string clears the field."""

    value: str = Field(default="", max_length=1000)


class WarningsResponse(BaseModel):
    local: list[str]
    advisory: list[str]
    all: list[str]


class FormSessionResponse(BaseModel):
    """Full view of a mock form session.

    ``advisory_pending`` is ``True`` while advisory warnings for the current
    generation have been requested but not yet applied; poll the session
    until it turns ``False``.
    """

    session_id: str
    template_id: str
    template_name: str
    generation: int
    fields: dict[str, FieldStatus]
    readiness: int = Field(ge=0, le=100)
    checklist: list[ChecklistItem]
    warnings: WarningsResponse
    advisory_pending: bool


class SubmissionCheckResponse(BaseModel):
    session_id: str
    ready: bool
    issues: list[str]
    message: str


# ---------------------------------------------------------------------------
# Assistant & translation
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    """A question for the form-filling assistant."""

    message: str = Field(..., min_length=1, max_length=4000)
    context: str | None = Field(default=None, max_length=200)
    include_vault: bool = Field(default=True, alias="includeVault")

    model_config = ConfigDict(populate_by_name=True)


class ChatResponse(BaseModel):
    success: bool = True
    message: str


class TranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1, max_length=10000)
    target_language: str = Field(..., alias="targetLanguage", min_length=1)
    source_language: str = Field(default="auto", alias="sourceLanguage")


class TranslateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    translated_text: str = Field(..., alias="translatedText")
