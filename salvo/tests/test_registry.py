"""
Tests for the room registry and its storage backends.
"""

import json

import pytest

from ..engine_core.action import Action
from ..engine_core.errors import CreateFailed, PersistenceError, RoomFull, RoomNotFound
from ..engine_core.reducer import Reducer
from ..engine_core.state import RoomStatus
from ..session import JsonFileStore, MemoryStore, RoomRegistry, generate_room_id


class FailingStore(MemoryStore):
    def save_all(self, rooms):
        raise OSError("disk full")


class TestCreateRoom:
    """Tests for room creation."""

    def test_creates_waiting_room(self, registry, store):
        room = registry.create_room()

        assert room.status == RoomStatus.WAITING
        assert room.fleet == (2,)
        assert room.room_id in registry
        assert store.rooms[room.room_id]["status"] == "waiting"

    def test_custom_fleet(self, registry):
        room = registry.create_room(fleet=[3, 2])
        assert room.fleet == (3, 2)

    def test_collision_is_create_failed(self, store):
        registry = RoomRegistry(store=store, id_factory=lambda: "room_same")
        registry.create_room()

        with pytest.raises(CreateFailed):
            registry.create_room()
        assert len(registry) == 1

    def test_retry_gets_past_collision(self, store):
        ids = iter(["room_a", "room_a", "room_b"])
        registry = RoomRegistry(store=store, id_factory=lambda: next(ids))
        registry.create_room()

        room = registry.create_room_with_retry()

        assert room.room_id == "room_b"

    def test_retry_gives_up(self, store):
        registry = RoomRegistry(store=store, id_factory=lambda: "room_same")
        registry.create_room()

        with pytest.raises(CreateFailed):
            registry.create_room_with_retry(attempts=3)

    def test_generated_id_shape(self):
        room_id = generate_room_id()
        assert room_id.startswith("room_")
        assert len(room_id) == len("room_") + 6


class TestValidateRoom:
    """Tests for validate_room."""

    def test_unknown_room(self, registry):
        with pytest.raises(RoomNotFound):
            registry.validate_room("room_nope")

    def test_open_room(self, registry):
        room = registry.create_room()
        assert registry.validate_room(room.room_id) is room

    def test_full_room(self, registry):
        room = registry.create_room()
        Reducer().apply(room, Action.join("a"))
        Reducer().apply(room, Action.join("b"))

        with pytest.raises(RoomFull):
            registry.validate_room(room.room_id)

    def test_started_room_with_free_slot_is_full(self, registry):
        room = registry.create_room()
        Reducer().apply(room, Action.join("a"))
        Reducer().apply(room, Action.join("b"))
        Reducer().apply(room, Action.disconnect(1))

        with pytest.raises(RoomFull):
            registry.validate_room(room.room_id)


class TestPersistence:
    """Tests for persist() and load()."""

    def test_persist_writes_full_snapshot(self, registry, store):
        first = registry.create_room()
        second = registry.create_room_with_retry()
        Reducer().apply(first, Action.join("a"))
        registry.persist()

        assert set(store.rooms) == {first.room_id, second.room_id}
        assert store.rooms[first.room_id]["players"][0] == "a"

    def test_failure_keeps_memory_state(self):
        registry = RoomRegistry(store=FailingStore(), fleet=(2,))

        with pytest.raises(PersistenceError):
            registry.create_room()
        assert len(registry) == 1

    def test_load_restores_waiting_rooms(self, store):
        original = RoomRegistry(store=store, fleet=(2,))
        room = original.create_room()

        restored = RoomRegistry(store=store)
        assert restored.load() == 1

        copy = restored.get(room.room_id)
        assert copy.status == RoomStatus.WAITING
        assert copy.fleet == (2,)

    def test_load_drops_started_rooms(self, store):
        """A started room has lost its players for good."""
        original = RoomRegistry(store=store, fleet=(2,))
        started = original.create_room()
        waiting = original.create_room_with_retry()
        Reducer().apply(started, Action.join("a"))
        Reducer().apply(started, Action.join("b"))
        original.persist()

        restored = RoomRegistry(store=store)
        assert restored.load() == 1
        assert started.room_id not in restored
        assert waiting.room_id in restored

        restored.persist()
        assert set(store.rooms) == {waiting.room_id}

    def test_load_frees_waiting_slots(self, store):
        original = RoomRegistry(store=store)
        room = original.create_room()
        Reducer().apply(room, Action.join("a"))
        original.persist()

        restored = RoomRegistry(store=store)
        restored.load()

        assert restored.get(room.room_id).is_empty()

    def test_load_skips_malformed(self):
        store = MemoryStore({"room_bad": {"roomId": "room_bad"}})
        registry = RoomRegistry(store=store)

        assert registry.load() == 0

    def test_remove(self, registry):
        room = registry.create_room()

        assert registry.remove(room.room_id)
        assert registry.get(room.room_id) is None
        assert not registry.remove(room.room_id)

    def test_lock_is_per_room(self, registry):
        a = registry.create_room()
        b = registry.create_room_with_retry()

        assert registry.lock(a.room_id) is registry.lock(a.room_id)
        assert registry.lock(a.room_id) is not registry.lock(b.room_id)


class TestJsonFileStore:
    """Tests for the file backend."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "rooms" / "game.json"
        registry = RoomRegistry(store=JsonFileStore(path), fleet=(2,))
        room = registry.create_room()

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[room.room_id]["roomId"] == room.room_id

        restored = RoomRegistry(store=JsonFileStore(path))
        assert restored.load() == 1
        assert restored.get(room.room_id).fleet == (2,)

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileStore(tmp_path / "none.json").load_all() == {}

    def test_empty_file_is_empty(self, tmp_path):
        path = tmp_path / "game.json"
        path.write_text("", encoding="utf-8")
        assert JsonFileStore(path).load_all() == {}

    def test_corrupted_file_is_empty(self, tmp_path):
        path = tmp_path / "game.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonFileStore(path).load_all() == {}

    def test_no_temp_file_left(self, tmp_path):
        path = tmp_path / "game.json"
        JsonFileStore(path).save_all({})

        assert [p.name for p in tmp_path.iterdir()] == ["game.json"]
