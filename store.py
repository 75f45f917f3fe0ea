"""
Key-value persistence for the last cleanly validated batch of entries
"""

import json
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from entry import NormalizedEntry, RawEntry

DEFAULT_STATE_DIR = Path.home() / ".montgomery"
DEFAULT_STORE_KEY = "Montgomery"
STORE_FILE_NAME = "store.json"


class KeyValueStore:
    """String keys mapped to serialized string values in one JSON file"""

    def __init__(self, state_dir: Optional[Union[str, Path]] = None):
        self.state_dir = Path(state_dir or os.getenv("MONTGOMERY_STATE_DIR") or DEFAULT_STATE_DIR).expanduser()
        self.path = self.state_dir / STORE_FILE_NAME

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            return {}
        if not isinstance(raw, dict):
            return {}
        return {key: value for key, value in raw.items() if isinstance(value, str)}

    def _write(self, items: Dict[str, str]) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(items, fh, indent=2)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if items.pop(key, None) is not None:
            self._write(items)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class EntryStore:
    """Reads and writes the entry batch under one fixed key."""

    def __init__(self, backend: Optional[KeyValueStore] = None, key: Optional[str] = None):
        self.backend = backend or KeyValueStore()
        self.key = key or os.getenv("MONTGOMERY_STORE_KEY", DEFAULT_STORE_KEY)

    def load(self) -> List[RawEntry]:
        """Return the stored batch; anything unreadable counts as no entries."""
        serialized = self.backend.get_item(self.key)
        if not serialized:
            return []
        try:
            payload = json.loads(serialized)
        except json.JSONDecodeError:
            return []
        if not isinstance(payload, list):
            return []
        try:
            return [RawEntry.model_validate(item) for item in payload]
        except ValidationError:
            return []

    def save(self, entries: Iterable[NormalizedEntry]) -> None:
        serialized = json.dumps([entry.model_dump() for entry in entries])
        self.backend.set_item(self.key, serialized)

    def clear(self) -> None:
        self.backend.clear()
