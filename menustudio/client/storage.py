"""Key/value token storage compatible with the Supabase auth client's storage interface."""

import json
import logging
import os
import threading
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class MemoryTokenStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


class FileTokenStorage(MemoryTokenStorage):
    """Tokens persisted as a JSON object in a single file, rewritten on every change."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._items, f)
        os.replace(tmp_path, self.path)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            super().set_item(key, value)
            self._save()

    def remove_item(self, key: str) -> None:
        with self._lock:
            super().remove_item(key)
            self._save()
