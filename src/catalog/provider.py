"""
Hangman - Word Catalog Providers

Sources for the difficulty -> category -> words catalog. The HTTP
provider fetches one JSON document per difficulty and retries transient
failures with exponential backoff.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Mapping

import httpx

from src.engine.base import Difficulty
from src.engine.errors import CatalogLoadError

logger = logging.getLogger(__name__)

RETRY_BASE_DELAY = 1.0


class WordCatalogProvider(ABC):
    """Abstract source of a word catalog."""

    name = "provider"

    @abstractmethod
    def load(self) -> dict[str, dict[str, list[str]]]:
        """
        Fetch the raw catalog.

        Raises:
            CatalogLoadError: If no catalog could be obtained
        """


class StaticCatalogProvider(WordCatalogProvider):
    """Serves an in-memory catalog."""

    name = "static"

    def __init__(self, catalog: Mapping[str, Mapping[str, list[str]]]) -> None:
        self._catalog = catalog

    def load(self) -> dict[str, dict[str, list[str]]]:
        return {
            difficulty: {category: list(words) for category, words in categories.items()}
            for difficulty, categories in self._catalog.items()
        }


class HttpCatalogProvider(WordCatalogProvider):
    """Fetches `<base_url>/<difficulty>.json` for every difficulty."""

    name = "http"

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        base_delay: float = RETRY_BASE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep

    def load(self) -> dict[str, dict[str, list[str]]]:
        """
        Load every difficulty, keeping those that succeed.

        Raises:
            CatalogLoadError: If not a single difficulty could be loaded
        """
        catalog: dict[str, dict[str, list[str]]] = {}
        failed: list[str] = []
        for difficulty in Difficulty:
            try:
                catalog[difficulty.value] = self._fetch(difficulty)
            except CatalogLoadError:
                logger.warning("Failed to load %s words", difficulty.value)
                failed.append(difficulty.value)

        if not catalog:
            raise CatalogLoadError(f"Failed to load any word list: {', '.join(failed)}")
        if failed:
            logger.warning("Partial catalog, missing: %s", ", ".join(failed))
        return catalog

    def _fetch(self, difficulty: Difficulty) -> dict[str, list[str]]:
        url = f"{self.base_url}/{difficulty.value}.json"
        for attempt in range(self.max_retries + 1):
            try:
                response = self.client.get(url)
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                if attempt == self.max_retries:
                    raise CatalogLoadError(f"{url}: {exc}") from exc
                delay = self.base_delay * 2 ** attempt
                logger.debug("Retrying %s in %.1fs after %s", url, delay, exc)
                self.sleep(delay)
                continue
            if not isinstance(data, dict):
                raise CatalogLoadError(f"{url}: expected an object, got {type(data).__name__}")
            return data
        raise CatalogLoadError(url)
