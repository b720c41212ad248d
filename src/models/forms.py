"""Form template and reconciliation models.

Defines the immutable template vocabulary (field descriptors, templates,
per-template rule sets) and the derived, per-session values the
reconciliation engine produces (field statuses, warnings, checklist items,
submission verdicts).

Templates are defined once at import time in
``src/config/form_templates.py`` and never mutated; ``FieldStatus`` objects
are recomputed on every auto-fill or edit and never persisted.
"""

from __future__ import annotations

import re
from enum import Enum
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.utils.errors import FieldNotFoundError


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    # ASCII classes only; a trailing "$" must not accept a final newline.
    if pattern.endswith("$") and not pattern.endswith("\\$"):
        pattern = pattern[:-1] + r"\Z"
    return re.compile(pattern, re.ASCII)


class FieldState(str, Enum):  # noqa: UP042
    """Reconciliation status of a single form field.

    ``MISMATCH`` belongs to the status vocabulary shown by the frontend but
    no rule currently emits it.
    """

    EMPTY = "empty"
    FILLED = "filled"
    INVALID = "invalid"
    MISMATCH = "mismatch"


class ValueTransform(str, Enum):  # noqa: UP042
    """Named pure string transforms applied to vault-sourced values."""

    UPPER = "upper"
    LOWER = "lower"

    def apply(self, value: str) -> str:
        if self is ValueTransform.UPPER:
            return value.upper()
        return value.lower()


# ---------------------------------------------------------------------------
# Template vocabulary (immutable)
# ---------------------------------------------------------------------------


class FieldDescriptor(BaseModel):
    """One expected field of a form template.

    ``vault_key_aliases`` is tried in order against vault ``field_name``
    values; the first alias that finds an item wins.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    label: str
    vault_key_aliases: tuple[str, ...] = Field(min_length=1)
    required: bool = True
    expected_format: str | None = None
    validation_pattern: str | None = None
    value_transform: ValueTransform | None = None
    static_warning: str | None = None
    placeholder: str | None = None

    @field_validator("validation_pattern")
    @classmethod
    def _pattern_compiles(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                _compile(value)
            except re.error as exc:
                raise ValueError(f"invalid validation_pattern {value!r}: {exc}") from exc
        return value

    def transform(self, value: str) -> str:
        """Apply the descriptor's value transform, if any."""
        if self.value_transform is None:
            return value
        return self.value_transform.apply(value)

    def accepts(self, value: str) -> bool:
        """Return ``True`` if *value* satisfies the validation pattern.

        Descriptors without a pattern accept everything.  Patterns carry
        their own anchors, so this is a search, not a full match.
        """
        if self.validation_pattern is None:
            return True
        return _compile(self.validation_pattern).search(value) is not None


class FormTemplate(BaseModel):
    """A named, ordered list of expected form fields."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    fields: tuple[FieldDescriptor, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def _unique_field_ids(self) -> FormTemplate:
        seen: set[str] = set()
        for field in self.fields:
            if field.id in seen:
                raise ValueError(f"duplicate field id '{field.id}' in template '{self.id}'")
            seen.add(field.id)
        return self

    def get_field(self, field_id: str) -> FieldDescriptor:
        """Return the descriptor for *field_id*.

        Raises
        ------
        FieldNotFoundError
            If the template has no such field.
        """
        for field in self.fields:
            if field.id == field_id:
                return field
        raise FieldNotFoundError(field_id, self.id)

    @property
    def required_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.required)


class StaticCheck(BaseModel):
    """A template-specific rule evaluated against a filled field value.

    The check fires (emits ``message``) when the field has a non-empty value
    that does not fully match ``pattern``.  With ``ignore_whitespace`` the
    value is compared after all whitespace is removed.
    """

    model_config = ConfigDict(frozen=True)

    field_id: str
    pattern: str
    message: str
    ignore_whitespace: bool = False

    def violated_by(self, value: str) -> bool:
        if not value:
            return False
        candidate = re.sub(r"\s", "", value) if self.ignore_whitespace else value
        return _compile(self.pattern).fullmatch(candidate) is None


class TemplateRuleSet(BaseModel):
    """Structured per-template rules: static checks and checklist designations."""

    model_config = ConfigDict(frozen=True)

    template_id: str
    static_checks: tuple[StaticCheck, ...] = ()
    name_field_id: str | None = "name"
    email_field_id: str | None = "email"
    phone_field_id: str | None = "mobile"


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


class FieldStatus(BaseModel):
    """The current value and status of one field in a form session."""

    model_config = ConfigDict(frozen=True)

    value: str = ""
    status: FieldState = FieldState.EMPTY
    warning: str | None = None


StatusMap = dict[str, FieldStatus]


class ChecklistItem(BaseModel):
    """One informational readiness predicate and its current outcome."""

    model_config = ConfigDict(frozen=True)

    label: str
    passed: bool


class WarningReport(BaseModel):
    """Warnings for a form, in two phases.

    ``local`` is computed synchronously from the status map; ``advisory``
    arrives later from the external text-generation call.  Local warnings
    always precede advisory ones.
    """

    local: list[str] = Field(default_factory=list)
    advisory: list[str] = Field(default_factory=list)

    @property
    def all_warnings(self) -> list[str]:
        return [*self.local, *self.advisory]


class SubmissionCheck(BaseModel):
    """Verdict of a "check readiness" request."""

    model_config = ConfigDict(frozen=True)

    ready: bool
    issues: list[str] = Field(default_factory=list)
    message: str
