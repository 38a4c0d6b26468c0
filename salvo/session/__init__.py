"""
Session Module - Rooms, their storage, and the connections attached to them.

A room represents one two-player game:
- Created on request, in WAITING state
- Joined by two connections, which get slots 0 and 1
- Driven by inbound messages, one at a time per room
- Removed once both players have left a started session

Rooms are DURABLE:
- The full room table is rewritten after every accepted mutation
- Rooms are restored from storage at startup

Connection bindings are not: they die with the connection.
"""

from .registry import RoomRegistry, generate_room_id, generate_player_token
from .storage import RoomStore, JsonFileStore, MemoryStore
from .broker import ConnectionBroker, Binding, Transport
from .messages import (
    PlaceShipsMessage,
    FireMessage,
    PingMessage,
    InboundMessage,
    AssignPlayerMessage,
    UpdateMessage,
    ErrorMessage,
    PongMessage,
    decode_inbound,
)

__all__ = [
    "RoomRegistry",
    "generate_room_id",
    "generate_player_token",
    "RoomStore",
    "JsonFileStore",
    "MemoryStore",
    "ConnectionBroker",
    "Binding",
    "Transport",
    "PlaceShipsMessage",
    "FireMessage",
    "PingMessage",
    "InboundMessage",
    "AssignPlayerMessage",
    "UpdateMessage",
    "ErrorMessage",
    "PongMessage",
    "decode_inbound",
]
