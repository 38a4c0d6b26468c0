"""
API Module - Web client interface.

Exposes the room server over HTTP and WebSocket.
The web client:
1. Creates a room (or gets a room id from a friend)
2. Validates the room id
3. Opens a WebSocket to join and play

Framing, handshake, and routing live here; game rules do not.
"""

from .schemas import (
    # Requests
    CreateRoomRequest,
    # Responses
    CreateRoomResponse,
    ValidateRoomResponse,
    RoomListResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    RoomSummary,
    ErrorCode,
)
from .app import create_app, build_registry

__all__ = [
    # Requests
    "CreateRoomRequest",
    # Responses
    "CreateRoomResponse",
    "ValidateRoomResponse",
    "RoomListResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "RoomSummary",
    "ErrorCode",
    # App
    "create_app",
    "build_registry",
]
