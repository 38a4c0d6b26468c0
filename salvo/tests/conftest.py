"""
Pytest fixtures for Salvo tests.
"""

import itertools

import pytest

from ..engine_core.action import Action
from ..engine_core.reducer import Reducer
from ..engine_core.state import Room, RoomStatus
from ..session import MemoryStore, RoomRegistry
from .utils import horizontal, standard_layout


@pytest.fixture
def reducer() -> Reducer:
    return Reducer()


@pytest.fixture
def room() -> Room:
    """Fresh WAITING room with the standard fleet."""
    return Room(room_id="room_test")


@pytest.fixture
def setup_room(reducer: Reducer, room: Room) -> Room:
    """Room with both players seated (SETUP)."""
    reducer.apply(room, Action.join("player_a"))
    reducer.apply(room, Action.join("player_b"))
    assert room.status == RoomStatus.SETUP
    return room


@pytest.fixture
def playing_room(reducer: Reducer, setup_room: Room) -> Room:
    """Room with both standard fleets placed (PLAYING, turn 0)."""
    reducer.apply(setup_room, Action.place_ships(0, standard_layout()))
    reducer.apply(setup_room, Action.place_ships(1, standard_layout()))
    assert setup_room.status == RoomStatus.PLAYING
    return setup_room


@pytest.fixture
def duel_room(reducer: Reducer) -> Room:
    """PLAYING room with fleet (2,): each side has one ship at (0,0)-(1,0)."""
    room = Room(room_id="room_duel", fleet=(2,))
    reducer.apply(room, Action.join("player_a"))
    reducer.apply(room, Action.join("player_b"))
    reducer.apply(room, Action.place_ships(0, horizontal(0, 0, 2)))
    reducer.apply(room, Action.place_ships(1, horizontal(0, 0, 2)))
    assert room.status == RoomStatus.PLAYING
    return room


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def registry(store: MemoryStore) -> RoomRegistry:
    """Registry over an in-memory store, fleet (2,) for short games."""
    ids = itertools.count(1)
    return RoomRegistry(store=store, fleet=(2,), id_factory=lambda: f"room_{next(ids)}")
