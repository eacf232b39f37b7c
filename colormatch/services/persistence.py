import os
import json
import contextlib
import logging
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger("color_match")

HIGH_SCORE_KEY = "highScore"
SOUND_ENABLED_KEY = "soundEnabled"
DIFFICULTY_KEY = "difficulty"
GAMES_PLAYED_KEY = "gamesPlayed"

class PersistenceError(Exception):
    pass

class PersistenceGateway(ABC):
    """Typed key-value storage the engine loads settings and the high score from."""

    @abstractmethod
    def _read(self, key: str) -> Any:
        ...

    @abstractmethod
    def _write(self, key: str, value: Any) -> None:
        ...

    def get_int(self, key: str) -> int:
        value = self._read(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return int(value)

    def set_int(self, key: str, value: int) -> None:
        self._write(key, int(value))

    def get_bool(self, key: str) -> bool:
        value = self._read(key)
        return value if isinstance(value, bool) else False

    def set_bool(self, key: str, value: bool) -> None:
        self._write(key, bool(value))

    def get_string(self, key: str) -> Optional[str]:
        value = self._read(key)
        return value if isinstance(value, str) else None

    def set_string(self, key: str, value: str) -> None:
        self._write(key, str(value))

class InMemoryStore(PersistenceGateway):
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self.values: Dict[str, Any] = dict(initial or {})

    def _read(self, key: str) -> Any:
        return self.values.get(key)

    def _write(self, key: str, value: Any) -> None:
        self.values[key] = value

class JsonFileStore(PersistenceGateway):
    """Keeps every key in one JSON object on disk.

    A missing or unreadable document behaves like an empty store. Writes go
    to a temporary file first and replace the document in one step.
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning({"event": "storage_corrupt", "path": self.path})
            return {}
        except OSError as e:
            raise PersistenceError(f"cannot read {self.path}") from e
        return data if isinstance(data, dict) else {}

    def _read(self, key: str) -> Any:
        with self._lock:
            return self._load().get(key)

    def _write(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            directory = os.path.dirname(self.path)
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".colormatch-", suffix=".json")
            except OSError as e:
                raise PersistenceError(f"cannot write {self.path}") from e
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except (OSError, TypeError, ValueError) as e:
                with contextlib.suppress(OSError):
                    os.remove(tmp_path)
                raise PersistenceError(f"cannot write {self.path}") from e
