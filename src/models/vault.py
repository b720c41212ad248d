"""Vault and document-extraction models.

The vault is the per-user table of extracted document fields.  Rows are
written after the user reviews an :class:`ExtractionResult` and are read by
the assisted-filling view and the reconciliation engine.

Extraction models accept the camelCase keys produced by the vision LLM
(``fieldName``, ``needsVerification`` ...) through pydantic aliases, and
serialise back to camelCase with ``model_dump(by_alias=True)`` for the
document endpoints.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentType(str, Enum):  # noqa: UP042
    """Document kinds the upload flow accepts."""

    AADHAAR = "aadhaar"
    PAN = "pan"
    PASSPORT = "passport"
    MARKSHEET = "marksheet"
    DRIVING_LICENSE = "driving_license"
    VOTER_ID = "voter_id"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _DOCUMENT_LABELS[self]


_DOCUMENT_LABELS = {
    DocumentType.AADHAAR: "Aadhaar Card",
    DocumentType.PAN: "PAN Card",
    DocumentType.PASSPORT: "Passport",
    DocumentType.MARKSHEET: "Marksheet / Certificate",
    DocumentType.DRIVING_LICENSE: "Driving License",
    DocumentType.VOTER_ID: "Voter ID",
    DocumentType.OTHER: "Other Document",
}

# Categories the extraction prompt asks the model to use.
VAULT_CATEGORIES = ("personal", "identity", "contact", "academic")


class VaultItem(BaseModel):
    """One stored field of a user's vault.

    At most one row exists per ``(user_id, category, field_name)``; the same
    ``field_name`` may appear under different categories.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    field_name: str
    field_value: str
    is_verified: bool = False
    user_id: str | None = None
    verification_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserSession(BaseModel):
    """The authenticated user on whose behalf a request runs."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)
    email: str | None = None


class ExtractedField(BaseModel):
    """A single field read from a document by the extraction model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: str = "personal"
    field_name: str = Field(alias="fieldName", min_length=1)
    field_value: str = Field(alias="fieldValue")
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    needs_verification: bool = Field(default=False, alias="needsVerification")
    original_label: str | None = Field(default=None, alias="originalLabel")

    @field_validator("category", mode="before")
    @classmethod
    def _normalise_category(cls, value: object) -> str:
        return str(value or "personal").strip().lower()

    @field_validator("field_value", mode="before")
    @classmethod
    def _stringify_value(cls, value: object) -> str:
        # Models sometimes return numbers for ids and marks.
        return "" if value is None else str(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> float:
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(100.0, number))


class ExtractionResult(BaseModel):
    """Structured output of one document extraction call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    raw_text: str = Field(default="", alias="rawText")
    document_type: str = Field(default="other", alias="documentType")
    fields: list[ExtractedField] = Field(default_factory=list)
    overall_confidence: float = Field(default=0.0, ge=0.0, le=100.0, alias="overallConfidence")
    warnings: list[str] = Field(default_factory=list)

    @field_validator("overall_confidence", mode="before")
    @classmethod
    def _clamp_overall(cls, value: object) -> float:
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(100.0, number))
