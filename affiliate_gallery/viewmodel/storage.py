"""
Per-visitor key/value storage.

Keys mirror what the public page keeps in the browser: ``liked_<id>`` and
``disliked_<id>`` presence flags, ``seen_content_id`` and
``seen_announcement_id``.
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

logger = logging.getLogger(__name__)

SEEN_CONTENT_KEY = "seen_content_id"
SEEN_ANNOUNCEMENT_KEY = "seen_announcement_id"


def liked_key(item_id: int) -> str:
    return f"liked_{item_id}"


def disliked_key(item_id: int) -> str:
    return f"disliked_{item_id}"


class LocalStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def has(self, key: str) -> bool: ...


class MemoryStore:
    """Dictionary-backed store, one per visitor session."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(MemoryStore):
    """
    Store persisted to a JSON file after every change.
    An unreadable file starts the store empty instead of failing.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(self._read())

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store {self.path}: {str(e)}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._write()

    def remove(self, key: str) -> None:
        if self.has(key):
            super().remove(key)
            self._write()
