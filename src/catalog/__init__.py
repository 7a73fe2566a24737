"""
Hangman Word Catalog.

Providers, caching and the built-in fallback catalog.
"""

from src.catalog.fallback import FALLBACK_CATALOG, fallback_catalog
from src.catalog.loader import CatalogLoad, load_catalog
from src.catalog.provider import (
    HttpCatalogProvider,
    StaticCatalogProvider,
    WordCatalogProvider,
)

__all__ = [
    "CatalogLoad",
    "fallback_catalog",
    "FALLBACK_CATALOG",
    "HttpCatalogProvider",
    "load_catalog",
    "StaticCatalogProvider",
    "WordCatalogProvider",
]
