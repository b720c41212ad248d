"""Vault-to-form reconciliation and validation engine.

Given a form template and the current user's vault rows, this module fills
every template field from the vault and classifies it:

    empty    -- no vault row matched (or the user cleared the value)
    filled   -- a value is present and passes the field's pattern
    invalid  -- a value is present but fails the field's pattern

Matching walks each field's alias list in order and compares vault
``field_name`` case-insensitively; the first alias that finds a row wins,
even if a later alias would also match.  Category is ignored.

Everything here is pure and synchronous: no I/O, no hidden state, so
``auto_fill`` with the same inputs always yields the same map.  Format
problems are data (``FieldStatus.status``), never exceptions; the only
raising path is an unknown field id in ``edit_field``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from src.models.forms import FieldDescriptor, FieldState, FieldStatus, FormTemplate, StatusMap
from src.models.vault import VaultItem

MISSING_REQUIRED_WARNING = "Required field - no data found"


def match_field(descriptor: FieldDescriptor, vault_items: Iterable[VaultItem]) -> VaultItem | None:
    """Return the vault row that feeds *descriptor*, or ``None``.

    Alias order is the tie-break: every row is scanned for the first alias
    before the second alias is tried.  Within one alias, the first row in
    *vault_items* order wins.
    """
    items = list(vault_items)
    for alias in descriptor.vault_key_aliases:
        wanted = alias.casefold()
        for item in items:
            if item.field_name.casefold() == wanted:
                return item
    return None


def derive_status(descriptor: FieldDescriptor, matched: VaultItem | None) -> FieldStatus:
    """Classify a vault-sourced value for *descriptor*.

    The value transform runs before validation.  A filled field carries the
    descriptor's static warning whether or not the vault row is verified.
    """
    if matched is None:
        return FieldStatus(
            value="",
            status=FieldState.EMPTY,
            warning=MISSING_REQUIRED_WARNING if descriptor.required else None,
        )

    value = descriptor.transform(matched.field_value)
    if not descriptor.accepts(value):
        return FieldStatus(
            value=value,
            status=FieldState.INVALID,
            warning=f"Format mismatch: expected {descriptor.expected_format}",
        )
    return FieldStatus(value=value, status=FieldState.FILLED, warning=descriptor.static_warning)


def auto_fill(template: FormTemplate, vault_items: Iterable[VaultItem]) -> StatusMap:
    """Fill every field of *template* from the vault.

    Total: the result has exactly one entry per template field, in template
    order, for any vault contents including none.
    """
    items = list(vault_items)
    return {
        descriptor.id: derive_status(descriptor, match_field(descriptor, items))
        for descriptor in template.fields
    }


def edit_field(
    field_id: str,
    raw_value: str,
    template: FormTemplate,
    apply_transform: bool = False,
) -> FieldStatus:
    """Re-validate one field after a manual edit.

    By default the field's value transform is NOT applied to typed input,
    so a lowercase name in an UPPERCASE field is kept as typed (and may then
    fail a case-sensitive pattern).  Pass ``apply_transform=True`` to
    transform before validating, the same as vault-sourced values.

    Raises
    ------
    FieldNotFoundError
        If *field_id* is not part of *template*.
    """
    descriptor = template.get_field(field_id)
    value = descriptor.transform(raw_value) if apply_transform else raw_value

    if not value:
        return FieldStatus(value="", status=FieldState.EMPTY)
    if not descriptor.accepts(value):
        return FieldStatus(
            value=value,
            status=FieldState.INVALID,
            warning=f"Format: {descriptor.expected_format}",
        )
    return FieldStatus(value=value, status=FieldState.FILLED)


def compute_readiness(template: FormTemplate, status_map: Mapping[str, FieldStatus]) -> int:
    """Return the percentage (0-100) of template fields in ``filled`` state.

    Rounds half up: 1 of 8 fields (12.5%) reports 13.  Integer arithmetic
    avoids float banker's rounding.
    """
    total = len(template.fields)
    filled = 0
    for descriptor in template.fields:
        status = status_map.get(descriptor.id)
        if status is not None and status.status == FieldState.FILLED:
            filled += 1
    return (200 * filled + total) // (2 * total)
