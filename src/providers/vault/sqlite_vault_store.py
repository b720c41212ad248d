"""SQLite-backed vault store.

Persists each user's extracted document fields to a local SQLite database
at ``data/vault.db``.  Uses ``aiosqlite`` for async I/O.

Every statement carries ``WHERE user_id = ?``; the store is the only
tenant boundary in this deployment, standing in for row-level security on
a hosted database.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from pathlib import Path

import aiosqlite
import structlog

from src.interfaces.vault_store import IVaultStore
from src.models.vault import ExtractedField, VaultItem
from src.utils.errors import VaultItemNotFoundError, VaultStoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/vault.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS data_vault (
    id                 TEXT    PRIMARY KEY,
    user_id            TEXT    NOT NULL,
    category           TEXT    NOT NULL,
    field_name         TEXT    NOT NULL,
    field_value        TEXT    NOT NULL,
    is_verified        INTEGER NOT NULL DEFAULT 0,
    verification_date  TEXT,
    created_at         TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at         TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    UNIQUE(user_id, category, field_name)
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_vault_user ON data_vault(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_vault_user_category ON data_vault(user_id, category);",
]

# verification_date is stamped for verified rows and cleared otherwise.
_UPSERT_SQL = """\
INSERT INTO data_vault (id, user_id, category, field_name, field_value,
                        is_verified, verification_date)
VALUES (?, ?, ?, ?, ?, ?,
        CASE WHEN ? THEN strftime('%Y-%m-%dT%H:%M:%fZ', 'now') END)
ON CONFLICT(user_id, category, field_name)
DO UPDATE SET field_value       = excluded.field_value,
              is_verified       = excluded.is_verified,
              verification_date = excluded.verification_date,
              updated_at        = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_COLUMNS = (
    "id, user_id, category, field_name, field_value, is_verified, "
    "verification_date, created_at, updated_at"
)

_SELECT_ONE_SQL = f"""\
SELECT {_SELECT_COLUMNS}
FROM data_vault
WHERE user_id = ? AND category = ? AND field_name = ?;
"""


def _row_to_item(row: aiosqlite.Row) -> VaultItem:
    data = dict(row)
    data["is_verified"] = bool(data["is_verified"])
    return VaultItem.model_validate(data)


class SQLiteVaultStore(IVaultStore):
    """SQLite-backed vault persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the data_vault table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("vault_db_initialized", path=str(self._db_path))

    async def list_items(self, user_id: str) -> list[VaultItem]:
        """Return every row owned by *user_id*, oldest first."""
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM data_vault "
                    "WHERE user_id = ? ORDER BY created_at, field_name",
                    (user_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise VaultStoreError(
                f"Could not read vault: {exc}", provider_name=self.get_provider_name()
            ) from exc
        return [_row_to_item(r) for r in rows]

    async def upsert_fields(
        self,
        user_id: str,
        fields: Sequence[ExtractedField],
    ) -> list[VaultItem]:
        """Insert or update one row per field.  Returns the stored rows."""
        stored: list[VaultItem] = []
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                for field in fields:
                    verified = not field.needs_verification
                    await db.execute(
                        _UPSERT_SQL,
                        (
                            str(uuid.uuid4()),
                            user_id,
                            field.category,
                            field.field_name,
                            field.field_value,
                            int(verified),
                            int(verified),
                        ),
                    )
                await db.commit()
                # A key repeated within one request is read back once.
                keys = dict.fromkeys((f.category, f.field_name) for f in fields)
                for category, field_name in keys:
                    cursor = await db.execute(
                        _SELECT_ONE_SQL,
                        (user_id, category, field_name),
                    )
                    row = await cursor.fetchone()
                    if row is not None:
                        stored.append(_row_to_item(row))
        except aiosqlite.Error as exc:
            raise VaultStoreError(
                f"Could not save vault items: {exc}", provider_name=self.get_provider_name()
            ) from exc

        logger.info("vault_items_saved", user_id=user_id, count=len(stored))
        return stored

    async def delete_item(self, user_id: str, item_id: str) -> None:
        """Delete one of the user's rows; foreign or unknown ids raise."""
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    "DELETE FROM data_vault WHERE id = ? AND user_id = ?",
                    (item_id, user_id),
                )
                await db.commit()
                deleted = cursor.rowcount
        except aiosqlite.Error as exc:
            raise VaultStoreError(
                f"Could not delete vault item: {exc}", provider_name=self.get_provider_name()
            ) from exc

        if not deleted:
            raise VaultItemNotFoundError(item_id)
        logger.info("vault_item_deleted", user_id=user_id, item_id=item_id)

    def get_provider_name(self) -> str:
        return "sqlite_vault"
