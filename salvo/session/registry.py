"""
Room Registry - Creates, looks up, and persists rooms.

LIFECYCLE:
1. A client asks for a new room -> create_room() (status WAITING)
2. Clients check a room id before connecting -> validate_room()
3. Every accepted mutation -> persist() writes the full table
4. Room empty after its session started -> remove()

The registry is an explicit service with an injected store. There is
no module-level room table.

CONCURRENCY:
- One asyncio.Lock per room, handed out by lock(room_id)
- Never a lock across all rooms
"""

from __future__ import annotations
from typing import Callable
import asyncio
import logging
import secrets
import time
import uuid

from ..engine_core.errors import CreateFailed, PersistenceError, RoomFull, RoomNotFound
from ..engine_core.placement import DEFAULT_FLEET, parse_fleet
from ..engine_core.state import Room, RoomStatus
from .storage import MemoryStore, RoomStore


logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def generate_room_id() -> str:
    """
    Short, time-based room id.

    Last four base36 digits of the current time in milliseconds plus two
    random base36 characters, e.g. "room_k3f9x2".
    """
    stamp = _to_base36(int(time.time() * 1000))[-4:]
    suffix = "".join(secrets.choice(_BASE36) for _ in range(2))
    return f"room_{stamp}{suffix}"


def generate_player_token() -> str:
    """Opaque identity for a player slot."""
    return f"player_{uuid.uuid4().hex[:12]}"


class RoomRegistry:
    """
    Holds every live room.

    Responsibilities:
    - Generate room ids and create rooms
    - Validate room ids for joining
    - Persist the whole table after each mutation
    - Restore rooms from the store at startup
    """

    def __init__(
        self,
        store: RoomStore | None = None,
        fleet: tuple[int, ...] = DEFAULT_FLEET,
        id_factory: Callable[[], str] = generate_room_id,
    ):
        self.store: RoomStore = store if store is not None else MemoryStore()
        self.fleet = parse_fleet(fleet)
        self.id_factory = id_factory
        self._rooms: dict[str, Room] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def create_room(self, fleet: tuple[int, ...] | list[int] | None = None) -> Room:
        """
        Create and persist a new room in WAITING state.

        Raises:
            CreateFailed: the generated id is already taken; retry
            PersistenceError: the room exists in memory but was not saved
        """
        room_id = self.id_factory()
        if room_id in self._rooms:
            raise CreateFailed(f"Room id {room_id} already exists")

        room = Room(
            room_id=room_id,
            fleet=parse_fleet(fleet) if fleet is not None else self.fleet,
        )
        self._rooms[room_id] = room
        logger.info("Created room %s with fleet %s", room_id, list(room.fleet))
        self.persist()
        return room

    def create_room_with_retry(
        self,
        fleet: tuple[int, ...] | list[int] | None = None,
        attempts: int = 5,
    ) -> Room:
        """create_room(), retrying id collisions up to `attempts` times."""
        for attempt in range(1, attempts + 1):
            try:
                return self.create_room(fleet)
            except CreateFailed:
                logger.info("Room id collision (attempt %d/%d)", attempt, attempts)
        raise CreateFailed(f"Could not allocate a room id after {attempts} attempts")

    def validate_room(self, room_id: str) -> Room:
        """
        Check that a room exists and can take another player.

        Returns the room.

        Raises:
            RoomNotFound: unknown room id
            RoomFull: both slots taken, or the session already started
        """
        room = self.require(room_id)
        if room.is_full() or room.status != RoomStatus.WAITING:
            raise RoomFull()
        return room

    def get(self, room_id: str) -> Room | None:
        """Get a room by ID."""
        return self._rooms.get(room_id)

    def require(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound()
        return room

    def remove(self, room_id: str) -> bool:
        """Drop a room from the table. Caller persists."""
        room = self._rooms.pop(room_id, None)
        self._locks.pop(room_id, None)
        if room:
            logger.info("Removed room %s", room_id)
        return room is not None

    def list_rooms(self) -> list[Room]:
        return list(self._rooms.values())

    def lock(self, room_id: str) -> asyncio.Lock:
        """The lock serializing all mutations of one room."""
        lock = self._locks.get(room_id)
        if lock is None:
            lock = self._locks[room_id] = asyncio.Lock()
        return lock

    def persist(self):
        """
        Write the full room table to the store.

        In-memory state is authoritative: a failure here is reported to
        the caller but does not roll anything back.
        """
        snapshot = {room_id: room.to_dict() for room_id, room in self._rooms.items()}
        try:
            self.store.save_all(snapshot)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to persist %d room(s): %s", len(snapshot), e)
            raise PersistenceError(f"Failed to persist rooms: {e}") from e

    def load(self) -> int:
        """
        Restore rooms from the store.

        No connection survives a restart, so WAITING rooms come back with
        both slots free. A room past WAITING can never be rejoined, so it
        is dropped and disappears from the store on the next persist().
        Malformed records are skipped.

        Returns:
            Number of rooms restored
        """
        restored = 0
        for room_id, data in self.store.load_all().items():
            try:
                room = Room.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed room record %s: %s", room_id, e)
                continue
            if room.status != RoomStatus.WAITING:
                logger.info("Dropping room %s left in %s", room_id, room.status.value)
                continue
            for player in room.players:
                player.token = None
            self._rooms[room.room_id] = room
            restored += 1

        logger.info("Restored %d room(s) from storage", restored)
        return restored
