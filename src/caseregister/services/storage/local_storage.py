"""File-backed string key/value store.

Mirrors the browser ``localStorage`` contract: keys and values are
strings, and callers JSON-encode anything structured. The whole map is
kept in one JSON file which is rewritten atomically on every change.
"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalStorage:
    """Persistent ``str -> str`` map stored in a single JSON file.

    Args:
        path: Location of the backing file. Created on first write.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._items: dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(self._items, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._flush()

    def set_items(self, items: dict[str, str]) -> None:
        """Write several keys with a single file rewrite."""
        self._items.update(items)
        self._flush()
