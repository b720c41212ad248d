"""Unit tests for the submission-readiness checklist."""

from __future__ import annotations

from src.config.form_templates import COLLEGE_ADMISSION, GOVT_EXAM, SCHOLARSHIP
from src.models.forms import FieldState, FieldStatus
from src.services import reconciliation
from src.services.checklist import (
    ALL_REQUIRED_FILLED,
    CONTACT_DETAILS,
    NAME_MATCHES_ID,
    NO_FORMAT_ERRORS,
    build_checklist,
)
from tests.conftest import make_item


def _outcomes(template, status_map) -> dict[str, bool]:
    return {item.label: item.passed for item in build_checklist(template, status_map)}


class TestBuildChecklist:
    def test_fixed_order(self) -> None:
        labels = [item.label for item in build_checklist(GOVT_EXAM, {})]
        assert labels == [ALL_REQUIRED_FILLED, NO_FORMAT_ERRORS, NAME_MATCHES_ID, CONTACT_DETAILS]

    def test_complete_vault_passes_everything(self, complete_vault) -> None:
        status_map = reconciliation.auto_fill(GOVT_EXAM, complete_vault)
        assert all(_outcomes(GOVT_EXAM, status_map).values())

    def test_empty_vault(self) -> None:
        outcomes = _outcomes(GOVT_EXAM, reconciliation.auto_fill(GOVT_EXAM, []))
        assert outcomes == {
            ALL_REQUIRED_FILLED: False,
            NO_FORMAT_ERRORS: True,
            NAME_MATCHES_ID: False,
            CONTACT_DETAILS: False,
        }

    def test_invalid_counts_as_filled_but_fails_format(self, complete_vault) -> None:
        status_map = reconciliation.auto_fill(GOVT_EXAM, complete_vault)
        status_map["mobile"] = FieldStatus(value="98765", status=FieldState.INVALID)
        outcomes = _outcomes(GOVT_EXAM, status_map)
        assert outcomes[ALL_REQUIRED_FILLED] is True
        assert outcomes[NO_FORMAT_ERRORS] is False
        assert outcomes[CONTACT_DETAILS] is False

    def test_contact_needs_email_and_mobile(self) -> None:
        status_map = reconciliation.auto_fill(
            COLLEGE_ADMISSION, [make_item("Email", "a@b.co"), make_item("Mobile", "9876543210")]
        )
        assert _outcomes(COLLEGE_ADMISSION, status_map)[CONTACT_DETAILS] is True

        status_map = reconciliation.auto_fill(COLLEGE_ADMISSION, [make_item("Email", "a@b.co")])
        assert _outcomes(COLLEGE_ADMISSION, status_map)[CONTACT_DETAILS] is False

    def test_template_without_contact_fields(self) -> None:
        status_map = reconciliation.auto_fill(SCHOLARSHIP, [make_item("Full Name", "Asha")])
        outcomes = _outcomes(SCHOLARSHIP, status_map)
        assert outcomes[NAME_MATCHES_ID] is True
        assert outcomes[CONTACT_DETAILS] is False
