"""Abstract base class for vault persistence.

The vault is a multi-tenant key/value table of extracted document fields.
Every operation takes the owning ``user_id`` explicitly; implementations
must filter on it so one user can never read or modify another user's rows
(the equivalent of row-level security on a hosted database).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from src.models.vault import ExtractedField, VaultItem


# Concrete implementation: SQLiteVaultStore
# Located in: src/providers/vault/
class IVaultStore(ABC):
    """Contract for per-user vault storage.

    All operations are async to support network-backed stores.  Rows are
    returned in no particular order; callers must not rely on ordering.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if needed.  Called once at startup."""

    @abstractmethod
    async def list_items(self, user_id: str) -> list[VaultItem]:
        """Return every vault row owned by *user_id*."""

    @abstractmethod
    async def upsert_fields(
        self,
        user_id: str,
        fields: Sequence[ExtractedField],
    ) -> list[VaultItem]:
        """Insert or update one row per extracted field.

        Rows are keyed on ``(user_id, category, field_name)``; an existing row
        has its value and verification state replaced.  A field is stored as
        verified when it does not need verification.

        Returns
        -------
        list[VaultItem]
            The stored rows, in the order of *fields*.

        Raises
        ------
        src.utils.errors.VaultStoreError
            If the write fails.
        """

    @abstractmethod
    async def delete_item(self, user_id: str, item_id: str) -> None:
        """Delete one row owned by *user_id*.

        Raises
        ------
        src.utils.errors.VaultItemNotFoundError
            If no row with that id belongs to the user.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
