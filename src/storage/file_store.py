"""
Hangman - JSON File Store

One JSON envelope per key in a directory.
"""

import logging
import os
from pathlib import Path

from src.engine.errors import StorageError
from src.storage.base import PersistenceStore

logger = logging.getLogger(__name__)


class JsonFileStore(PersistenceStore):
    """File-based persistence."""

    SUFFIX = ".json"

    def __init__(self, directory: str | Path, **kwargs) -> None:
        super().__init__(**kwargs)
        self.directory = Path(directory).expanduser()

    def _path(self, full_key: str) -> Path:
        return self.directory / f"{full_key}{self.SUFFIX}"

    def _read(self, full_key: str) -> str | None:
        path = self._path(full_key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError:
            logger.exception("Could not read %s", path)
            return None

    def _write(self, full_key: str, payload: str) -> None:
        path = self._path(full_key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}") from exc

    def _remove(self, full_key: str) -> bool:
        path = self._path(full_key)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError:
            logger.exception("Could not delete %s", path)
            return False
        return True

    def _keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return [p.name[: -len(self.SUFFIX)] for p in self.directory.glob(f"*{self.SUFFIX}")]
