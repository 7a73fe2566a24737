"""
Hangman - Persistence Store Port

Key-value store contract used by the engine. Values are wrapped in an
envelope carrying version, timestamps and caller metadata. Expired or
unreadable entries behave as absent.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from src.storage.models import StoreEnvelope

logger = logging.getLogger(__name__)

STORE_VERSION = "1.0.0"
DEFAULT_EXPIRATION_MS: int | None = None


def now_ms() -> int:
    return int(time.time() * 1000)


class PersistenceStore(ABC):
    """Abstract base class for key-value persistence."""

    def __init__(
        self,
        prefix: str = "hangman_",
        version: str = STORE_VERSION,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.prefix = prefix
        self.version = version
        self.clock = clock

    # -- Raw backend operations ------------------------------------------

    @abstractmethod
    def _read(self, full_key: str) -> str | None:
        """Return the serialized envelope, or None if absent."""

    @abstractmethod
    def _write(self, full_key: str, payload: str) -> None:
        """Store a serialized envelope. Raises StorageError on failure."""

    @abstractmethod
    def _remove(self, full_key: str) -> bool:
        """Delete an entry. Returns True if something was removed."""

    @abstractmethod
    def _keys(self) -> list[str]:
        """All full keys held by this store."""

    # -- Public port -----------------------------------------------------

    def full_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if absent, expired or corrupt."""
        envelope = self._load_envelope(key)
        return envelope.value if envelope else None

    def get_envelope(self, key: str) -> StoreEnvelope | None:
        return self._load_envelope(key)

    def set(
        self,
        key: str,
        value: Any,
        *,
        expiration: int | None = DEFAULT_EXPIRATION_MS,
        metadata: dict | None = None,
    ) -> bool:
        """
        Store a value.

        Args:
            key: Unprefixed key
            value: JSON-serializable value
            expiration: Lifetime in milliseconds, None = never expires
            metadata: Free-form metadata stored alongside the value

        Returns:
            True on success

        Raises:
            StorageError: If the backend rejects the write
        """
        timestamp = self.clock()
        envelope = StoreEnvelope(
            value=value,
            version=self.version,
            timestamp=timestamp,
            expiration=timestamp + expiration if expiration is not None else None,
            metadata=metadata or {},
        )
        self._write(self.full_key(key), envelope.model_dump_json())
        return True

    def delete(self, key: str) -> bool:
        return self._remove(self.full_key(key))

    def has(self, key: str) -> bool:
        return self._load_envelope(key) is not None

    def keys(self) -> list[str]:
        """Unprefixed keys of every entry, including expired ones."""
        return [k[len(self.prefix):] for k in self._keys() if k.startswith(self.prefix)]

    def cleanup_expired(self) -> int:
        """Remove expired and corrupt entries. Returns the number removed."""
        removed = 0
        for key in self.keys():
            if self._load_envelope(key) is None and self.delete(key):
                removed += 1
        return removed

    def prune(self, count: int = 1, protected: Iterable[str] = ()) -> int:
        """
        Free space by dropping expired entries, then the `count` oldest.

        Args:
            count: Live entries to drop
            protected: Unprefixed keys that are never evicted

        Returns:
            Number of entries removed
        """
        removed = self.cleanup_expired()
        keep = set(protected)
        entries = []
        for key in self.keys():
            if key in keep:
                continue
            envelope = self._load_envelope(key)
            if envelope is not None:
                entries.append((envelope.timestamp, key))
        for _, key in sorted(entries)[:count]:
            if self.delete(key):
                logger.warning("Pruned cache entry %s to free space", key)
                removed += 1
        return removed

    def _load_envelope(self, key: str) -> StoreEnvelope | None:
        full_key = self.full_key(key)
        payload = self._read(full_key)
        if payload is None:
            return None
        try:
            envelope = StoreEnvelope.model_validate(json.loads(payload))
        except (ValueError, ValidationError):
            logger.warning("Discarding unreadable entry %s", key)
            self._remove(full_key)
            return None
        if envelope.expiration is not None and envelope.expiration <= self.clock():
            logger.debug("Entry %s expired", key)
            self._remove(full_key)
            return None
        return envelope
