"""Submission-readiness checklist for a reconciled form.

Four fixed predicates over the status map.  The checklist is informational:
it never blocks editing or the submission check, it only tells the user
what is left.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.config.form_templates import get_rule_set
from src.models.forms import ChecklistItem, FieldState, FieldStatus, FormTemplate

ALL_REQUIRED_FILLED = "All required fields filled"
NO_FORMAT_ERRORS = "No format errors"
NAME_MATCHES_ID = "Name matches ID document"
CONTACT_DETAILS = "Contact details verified"


def _is_filled(status_map: Mapping[str, FieldStatus], field_id: str | None) -> bool:
    if field_id is None:
        return False
    status = status_map.get(field_id)
    return status is not None and status.status == FieldState.FILLED


def build_checklist(
    template: FormTemplate,
    status_map: Mapping[str, FieldStatus],
) -> list[ChecklistItem]:
    """Evaluate the readiness predicates for *template*.

    "All required fields filled" means every required field has a
    non-empty status; an invalid value still counts as filled here and is
    reported by "No format errors" instead.
    """
    rules = get_rule_set(template.id)

    all_required = all(
        f.id in status_map and status_map[f.id].status != FieldState.EMPTY
        for f in template.required_fields
    )
    no_invalid = not any(s.status == FieldState.INVALID for s in status_map.values())

    return [
        ChecklistItem(label=ALL_REQUIRED_FILLED, passed=all_required),
        ChecklistItem(label=NO_FORMAT_ERRORS, passed=no_invalid),
        ChecklistItem(label=NAME_MATCHES_ID, passed=_is_filled(status_map, rules.name_field_id)),
        ChecklistItem(
            label=CONTACT_DETAILS,
            passed=_is_filled(status_map, rules.email_field_id)
            and _is_filled(status_map, rules.phone_field_id),
        ),
    ]
