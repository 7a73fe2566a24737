"""
Hangman - In-Memory Store

Process-local store, optionally capped at a byte quota to mimic a
browser-style storage limit.
"""

from src.engine.errors import StorageError
from src.storage.base import PersistenceStore


class MemoryStore(PersistenceStore):
    """Dictionary-backed persistence with an optional quota."""

    def __init__(self, max_bytes: int | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.max_bytes = max_bytes
        self._data: dict[str, str] = {}

    @property
    def used_bytes(self) -> int:
        return sum(len(k) + len(v) for k, v in self._data.items())

    def _read(self, full_key: str) -> str | None:
        return self._data.get(full_key)

    def _write(self, full_key: str, payload: str) -> None:
        if self.max_bytes is not None:
            current = self._data.get(full_key)
            projected = self.used_bytes + len(payload) + len(full_key)
            if current is not None:
                projected -= len(full_key) + len(current)
            if projected > self.max_bytes:
                raise StorageError(
                    f"Quota exceeded writing {full_key}: {projected} > {self.max_bytes} bytes."
                )
        self._data[full_key] = payload

    def _remove(self, full_key: str) -> bool:
        return self._data.pop(full_key, None) is not None

    def _keys(self) -> list[str]:
        return list(self._data)
