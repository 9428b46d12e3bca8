"""
Client-local persistence.

``LocalStorage`` mirrors the browser's ``localStorage``: a flat mapping of
string keys to string values.  Here it is kept in one JSON file so state
survives between sessions.  ``Favorites`` stores its ids as a JSON list under
the fixed key ``neodex-favorites``, reads it once on construction and
rewrites it on every toggle.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional


logger = logging.getLogger(__name__)

FAVORITES_KEY = "neodex-favorites"
STORAGE_FILENAME = "localstorage.json"


class LocalStorage:
    def __init__(self, directory: Path) -> None:
        self.path = Path(directory) / STORAGE_FILENAME
        # Lock to synchronise access to the storage file
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)


class Favorites:
    """The set of favourite ids, in the order they were added."""

    def __init__(self, storage: LocalStorage, key: str = FAVORITES_KEY) -> None:
        self.storage = storage
        self.key = key
        self._ids: List[int] = self._load()

    def _load(self) -> List[int]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed favourites under %r", self.key)
            return []
        ids: List[int] = []
        for value in data if isinstance(data, list) else []:
            if isinstance(value, int) and value not in ids:
                ids.append(value)
        return ids

    def _save(self) -> None:
        self.storage.set_item(self.key, json.dumps(self._ids))

    def toggle(self, pokemon_id: int) -> bool:
        """Add or remove ``pokemon_id``; return whether it is now a favourite."""
        if pokemon_id in self._ids:
            self._ids.remove(pokemon_id)
            added = False
        else:
            self._ids.append(pokemon_id)
            added = True
        self._save()
        return added

    def ids(self) -> List[int]:
        return list(self._ids)

    def __contains__(self, pokemon_id: object) -> bool:
        return pokemon_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)
