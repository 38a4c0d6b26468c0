"""
Room Storage - Durable backends for the room table.

The table is written as a whole snapshot on every save: one JSON object
mapping room id to the room document. Mutation volume is low, so a full
rewrite keeps the file consistent without an append log.

Backends:
- JsonFileStore: one JSON file, replaced atomically via a temp file
- MemoryStore: in-process dict, for tests and SALVO_PERSIST=0
"""

from __future__ import annotations
from copy import deepcopy
from pathlib import Path
from typing import Any, Protocol
import json
import logging


logger = logging.getLogger(__name__)


class RoomStore(Protocol):
    """Persistence backend for the full room table."""

    def load_all(self) -> dict[str, dict[str, Any]]:
        ...

    def save_all(self, rooms: dict[str, dict[str, Any]]) -> None:
        ...


class JsonFileStore:
    """
    File-backed room table.

    Usage:
        store = JsonFileStore("game.json")
        rooms = store.load_all()
        store.save_all(rooms)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load_all(self) -> dict[str, dict[str, Any]]:
        """
        Read the whole table.

        A missing or empty file is an empty table. A corrupted file is
        logged and treated as empty rather than blocking startup.
        """
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Room table %s is corrupted, starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Room table %s is not an object, starting empty", self.path)
            return {}
        return data

    def save_all(self, rooms: dict[str, dict[str, Any]]) -> None:
        """Overwrite the whole table."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(rooms, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)


class MemoryStore:
    """In-memory room table. Keeps a deep copy of the last snapshot."""

    def __init__(self, rooms: dict[str, dict[str, Any]] | None = None):
        self.rooms: dict[str, dict[str, Any]] = deepcopy(rooms) if rooms else {}
        self.save_count = 0

    def load_all(self) -> dict[str, dict[str, Any]]:
        return deepcopy(self.rooms)

    def save_all(self, rooms: dict[str, dict[str, Any]]) -> None:
        self.rooms = deepcopy(rooms)
        self.save_count += 1
