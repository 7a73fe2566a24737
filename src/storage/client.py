"""
Hangman - Supabase Client

Cached factory for the Supabase client used by the remote store.
"""

from functools import lru_cache

from supabase import Client, create_client

from src.config.settings import get_settings


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Create and cache a Supabase client instance."""
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ValueError("HANGMAN_SUPABASE_URL and HANGMAN_SUPABASE_ANON_KEY must be set.")
    return create_client(settings.supabase_url, settings.supabase_anon_key)
