"""Assisted filling: copy-ready vault values for real forms.

For every vault row the user sees the value already converted to the
shape forms usually expect (names upper-cased, emails lower-cased) together
with a format hint and, for fields that cause most rejections, a warning.
Format entries come from ``FIELD_FORMATS`` keyed by the exact vault field
name; rows without an entry are shown as stored.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from src.config.form_templates import FieldFormat, get_field_format
from src.models.vault import VaultItem


@dataclass(frozen=True)
class AssistedEntry:
    """One vault row prepared for copying."""

    item: VaultItem
    display_name: str
    copy_value: str
    format_hint: str | None
    warning: str | None


@dataclass(frozen=True)
class VaultCounts:
    total: int
    verified: int

    @property
    def pending(self) -> int:
        return self.total - self.verified


def display_value(item: VaultItem) -> str:
    """Return the value the user should paste for *item*."""
    field_format = get_field_format(item.field_name)
    if field_format is None:
        return item.field_value
    return field_format.apply(item.field_value)


def _to_entry(item: VaultItem) -> AssistedEntry:
    field_format: FieldFormat | None = get_field_format(item.field_name)
    return AssistedEntry(
        item=item,
        display_name=field_format.name if field_format else item.field_name,
        copy_value=display_value(item),
        format_hint=field_format.format if field_format else None,
        warning=field_format.warning if field_format else None,
    )


def matches_query(item: VaultItem, query: str) -> bool:
    """Case-insensitive substring match on field name, value, or category."""
    needle = query.casefold()
    return (
        needle in item.field_name.casefold()
        or needle in item.field_value.casefold()
        or needle in item.category.casefold()
    )


def entries(items: Sequence[VaultItem], query: str = "") -> dict[str, list[AssistedEntry]]:
    """Filter *items* by *query* and group them by category.

    Categories keep the order in which they first appear in *items*; an
    empty query keeps everything.
    """
    grouped: dict[str, list[AssistedEntry]] = {}
    for item in items:
        if query and not matches_query(item, query):
            continue
        grouped.setdefault(item.category, []).append(_to_entry(item))
    return grouped


def counts(items: Sequence[VaultItem]) -> VaultCounts:
    """Count all rows and verified rows (over the unfiltered vault)."""
    return VaultCounts(total=len(items), verified=sum(1 for i in items if i.is_verified))
