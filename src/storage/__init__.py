"""
Hangman Storage Layer.

Key-value persistence for statistics, achievements, best times, practice
progress and the cached word catalog.
"""

from src.config.settings import Settings, get_settings
from src.storage.base import PersistenceStore
from src.storage.client import get_supabase_client
from src.storage.file_store import JsonFileStore
from src.storage.memory import MemoryStore
from src.storage.repository import GameRepository
from src.storage.supabase_store import SupabaseStore


def create_store(settings: Settings | None = None) -> PersistenceStore:
    """Build the store selected by `settings.storage_backend`."""
    settings = settings or get_settings()
    if settings.storage_backend == "file":
        return JsonFileStore(settings.storage_dir, prefix=settings.storage_prefix)
    if settings.storage_backend == "supabase":
        return SupabaseStore(
            get_supabase_client(),
            table=settings.supabase_table,
            prefix=settings.storage_prefix,
        )
    return MemoryStore(max_bytes=settings.storage_max_bytes, prefix=settings.storage_prefix)


__all__ = [
    "create_store",
    "GameRepository",
    "get_supabase_client",
    "JsonFileStore",
    "MemoryStore",
    "PersistenceStore",
    "SupabaseStore",
]
