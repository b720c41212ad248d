"""Unit tests for the Pydantic domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.models.forms import (
    FieldDescriptor,
    FieldState,
    FieldStatus,
    FormTemplate,
    StaticCheck,
    ValueTransform,
    WarningReport,
)
from src.models.vault import (
    DocumentType,
    ExtractedField,
    ExtractionResult,
    UserSession,
    VaultItem,
)
from src.utils.errors import FieldNotFoundError


def _descriptor(**overrides) -> FieldDescriptor:
    data = {"id": "name", "label": "Name", "vault_key_aliases": ("Full Name",)}
    data.update(overrides)
    return FieldDescriptor(**data)


# ======================================================================
# Vault models
# ======================================================================


class TestExtractedField:
    def test_accepts_camel_case_keys(self) -> None:
        field = ExtractedField.model_validate(
            {
                "category": "Identity ",
                "fieldName": "PAN Number",
                "fieldValue": "ABCDE1234F",
                "confidence": 91,
                "needsVerification": True,
                "originalLabel": "Permanent Account Number",
            }
        )
        assert field.category == "identity"
        assert field.field_name == "PAN Number"
        assert field.needs_verification is True
        assert field.original_label == "Permanent Account Number"

    def test_numeric_value_stringified(self) -> None:
        field = ExtractedField.model_validate({"fieldName": "Marks", "fieldValue": 87.5})
        assert field.field_value == "87.5"

    def test_missing_category_defaults_to_personal(self) -> None:
        field = ExtractedField.model_validate(
            {"category": None, "fieldName": "Gender", "fieldValue": "F"}
        )
        assert field.category == "personal"

    @pytest.mark.parametrize("raw,expected", [(150, 100.0), (-3, 0.0), ("high", 0.0), ("88", 88.0)])
    def test_confidence_clamped(self, raw, expected: float) -> None:
        field = ExtractedField.model_validate(
            {"fieldName": "Name", "fieldValue": "x", "confidence": raw}
        )
        assert field.confidence == expected

    def test_field_name_required(self) -> None:
        with pytest.raises(ValidationError):
            ExtractedField.model_validate({"fieldName": "", "fieldValue": "x"})


class TestExtractionResult:
    def test_dumps_camel_case(self) -> None:
        result = ExtractionResult(raw_text="text", document_type="pan", overall_confidence=88)
        dumped = result.model_dump(by_alias=True)
        assert dumped["rawText"] == "text"
        assert dumped["overallConfidence"] == 88.0
        assert dumped["fields"] == []


class TestVaultModels:
    def test_vault_item_is_frozen(self) -> None:
        item = VaultItem(id="1", category="personal", field_name="Name", field_value="A")
        with pytest.raises(ValidationError):
            item.field_value = "B"  # type: ignore[misc]

    def test_user_session_requires_id(self) -> None:
        with pytest.raises(ValidationError):
            UserSession(user_id="")

    def test_document_type_labels(self) -> None:
        assert DocumentType.AADHAAR.label == "Aadhaar Card"
        assert DocumentType("driving_license") is DocumentType.DRIVING_LICENSE


# ======================================================================
# Form models
# ======================================================================


class TestFieldDescriptor:
    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _descriptor(validation_pattern="([0-9")

    def test_aliases_required(self) -> None:
        with pytest.raises(ValidationError):
            _descriptor(vault_key_aliases=())

    def test_accepts_without_pattern(self) -> None:
        assert _descriptor().accepts("anything at all")

    def test_pattern_is_searched(self) -> None:
        descriptor = _descriptor(validation_pattern=r"\d{6}")
        assert descriptor.accepts("PIN 302001")
        assert not descriptor.accepts("30200")

    def test_transform(self) -> None:
        assert _descriptor(value_transform=ValueTransform.LOWER).transform("A@B.IN") == "a@b.in"
        assert _descriptor().transform("Mixed") == "Mixed"


class TestFormTemplate:
    def test_duplicate_field_ids_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FormTemplate(id="t", name="T", fields=(_descriptor(), _descriptor()))

    def test_needs_fields(self) -> None:
        with pytest.raises(ValidationError):
            FormTemplate(id="t", name="T", fields=())

    def test_get_field(self) -> None:
        template = FormTemplate(
            id="t", name="T", fields=(_descriptor(), _descriptor(id="dob", required=False))
        )
        assert template.get_field("dob").label == "Name"
        assert [f.id for f in template.required_fields] == ["name"]
        with pytest.raises(FieldNotFoundError):
            template.get_field("missing")


class TestDerivedModels:
    def test_field_status_defaults_to_empty(self) -> None:
        assert FieldStatus() == FieldStatus(value="", status=FieldState.EMPTY, warning=None)

    def test_warning_report_local_first(self) -> None:
        report = WarningReport(local=["a"], advisory=["b"])
        assert report.all_warnings == ["a", "b"]

    def test_static_check_ignores_empty_values(self) -> None:
        check = StaticCheck(field_id="name", pattern=r"[A-Z]+", message="upper")
        assert check.violated_by("") is False
        assert check.violated_by("abc") is True
