"""Vault store adapters."""

from src.providers.vault.sqlite_vault_store import SQLiteVaultStore

__all__ = ["SQLiteVaultStore"]
