"""
Hangman - Catalog Loader

Obtains a playable catalog: provider first, then the cached copy, then
the built-in catalog. Anything but a fresh provider load flags offline
mode.
"""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from src.catalog.fallback import fallback_catalog
from src.catalog.provider import WordCatalogProvider
from src.engine.errors import CatalogLoadError, StorageError
from src.engine.validators import validate_catalog
from src.storage.base import PersistenceStore
from src.storage.models import CatalogSnapshot

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "words"
CATALOG_CACHE_TTL_MS = 7 * 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class CatalogLoad:
    """Result of a catalog load."""
    catalog: dict[str, dict[str, list[str]]]
    source: str
    offline: bool = False


def load_catalog(
    provider: WordCatalogProvider | None,
    store: PersistenceStore | None = None,
    cache_ttl_ms: int = CATALOG_CACHE_TTL_MS,
) -> CatalogLoad:
    """
    Load, validate and cache the word catalog.

    Args:
        provider: Catalog source; None skips straight to the cache
        store: Where good catalogs are cached
        cache_ttl_ms: Lifetime of the cached copy

    Returns:
        The catalog, where it came from, and whether the game is offline
    """
    if provider is not None:
        try:
            catalog = validate_catalog(provider.load())
        except CatalogLoadError as exc:
            logger.warning("Word catalog unavailable: %s", exc)
        except ValueError as exc:
            logger.warning("Word catalog from %s rejected: %s", provider.name, exc)
        else:
            _cache(store, catalog, provider.name, cache_ttl_ms)
            logger.info("Loaded word catalog from %s", provider.name)
            return CatalogLoad(catalog=catalog, source=provider.name)

    cached = _cached(store)
    if cached is not None:
        logger.warning("Using cached word catalog")
        return CatalogLoad(catalog=cached, source="cache", offline=True)

    logger.warning("Using built-in word catalog")
    return CatalogLoad(catalog=fallback_catalog(), source="builtin", offline=True)


def _cache(
    store: PersistenceStore | None,
    catalog: dict[str, dict[str, list[str]]],
    source: str,
    ttl_ms: int,
) -> None:
    if store is None:
        return
    try:
        store.set(CATALOG_CACHE_KEY, catalog, expiration=ttl_ms, metadata={"source": source})
    except StorageError:
        logger.exception("Could not cache word catalog")


def _cached(store: PersistenceStore | None) -> dict[str, dict[str, list[str]]] | None:
    if store is None:
        return None
    raw = store.get(CATALOG_CACHE_KEY)
    if raw is None:
        return None
    try:
        return validate_catalog(CatalogSnapshot.model_validate(raw).root)
    except (ValidationError, ValueError) as exc:
        logger.warning("Discarding cached word catalog: %s", exc)
        store.delete(CATALOG_CACHE_KEY)
        return None
