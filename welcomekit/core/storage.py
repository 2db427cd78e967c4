"""
Key-value slots for persisted state. RecentsStore writes one named slot holding a
serialized list; the backing store is injected (memory, JSON file, or QSettings in gui/).
"""
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Protocol

from .exceptions import PersistenceError


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Process-local slots. Used in tests and when persistence is not wanted."""

    def __init__(self, initial: Optional[dict] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class JsonFileStorage:
    """
    All slots in one JSON object on disk. Writes go to a temp file in the same
    directory and are swapped in with os.replace so readers never see a half-written file.
    """

    def __init__(self, path: os.PathLike | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except PersistenceError:
                data = {}
            data[key] = value
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp = tempfile.mkstemp(prefix=".%s." % self.path.name, dir=self.path.parent)
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        json.dump(data, f, indent=2)
                    os.replace(tmp, self.path)
                except BaseException:
                    Path(tmp).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise PersistenceError(f"Cannot write {self.path}: {e}") from e
