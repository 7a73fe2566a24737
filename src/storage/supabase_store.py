"""
Hangman - Supabase Store

Persists envelopes in a Supabase key-value table with columns
`key` (text, primary key) and `payload` (text).
"""

import logging

from supabase import Client

from src.engine.errors import StorageError
from src.storage.base import PersistenceStore

logger = logging.getLogger(__name__)


class SupabaseStore(PersistenceStore):
    """Key-value persistence in a Supabase table."""

    def __init__(self, client: Client, table: str = "kv_store", **kwargs) -> None:
        super().__init__(**kwargs)
        self.client = client
        self.table_name = table

    @property
    def table(self):
        return self.client.table(self.table_name)

    def _read(self, full_key: str) -> str | None:
        try:
            data = (
                self.table
                .select("payload")
                .eq("key", full_key)
                .execute()
            )
        except Exception:
            logger.exception("Failed to read %s from Supabase", full_key)
            return None
        if data.data:
            return data.data[0]["payload"]
        return None

    def _write(self, full_key: str, payload: str) -> None:
        try:
            (
                self.table
                .upsert({"key": full_key, "payload": payload})
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Failed to write {full_key} to Supabase: {exc}") from exc

    def _remove(self, full_key: str) -> bool:
        try:
            data = self.table.delete().eq("key", full_key).execute()
        except Exception:
            logger.exception("Failed to delete %s from Supabase", full_key)
            return False
        return bool(data.data)

    def _keys(self) -> list[str]:
        try:
            data = (
                self.table
                .select("key")
                .like("key", f"{self.prefix}%")
                .execute()
            )
        except Exception:
            logger.exception("Failed to list keys from Supabase")
            return []
        return [row["key"] for row in data.data or []]
