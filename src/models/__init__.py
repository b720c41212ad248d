"""SmartForm Vault domain models; re-exports all public model classes.

Submodules:
    - forms.py: form templates, field statuses, warnings, checklist
    - vault.py: vault rows, user sessions, document extraction results
"""

from __future__ import annotations

from src.models.forms import (
    ChecklistItem,
    FieldDescriptor,
    FieldState,
    FieldStatus,
    FormTemplate,
    StaticCheck,
    StatusMap,
    SubmissionCheck,
    TemplateRuleSet,
    ValueTransform,
    WarningReport,
)
from src.models.vault import (
    VAULT_CATEGORIES,
    DocumentType,
    ExtractedField,
    ExtractionResult,
    UserSession,
    VaultItem,
)

__all__ = [
    # forms
    "ChecklistItem",
    "FieldDescriptor",
    "FieldState",
    "FieldStatus",
    "FormTemplate",
    "StaticCheck",
    "StatusMap",
    "SubmissionCheck",
    "TemplateRuleSet",
    "ValueTransform",
    "WarningReport",
    # vault
    "VAULT_CATEGORIES",
    "DocumentType",
    "ExtractedField",
    "ExtractionResult",
    "UserSession",
    "VaultItem",
]
