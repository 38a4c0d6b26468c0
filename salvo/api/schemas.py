"""
Pydantic Schemas for API - Request/response models for the HTTP surface.

These models define the contract between the web client and the room
server for room creation and lookup. The per-connection WebSocket
protocol lives in salvo.session.messages.

Error Codes:
- NOT_FOUND: Room does not exist
- FULL: Room has two players or its session already started
- CREATE_FAILED: Could not allocate a room id
- VALIDATION_ERROR: Fleet in the request was invalid
- PERSISTENCE_ERROR: Room table could not be written
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    NOT_FOUND = "NOT_FOUND"
    FULL = "FULL"
    CREATE_FAILED = "CREATE_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class RoomStatusValue(str, Enum):
    """Room status values."""
    WAITING = "waiting"
    SETUP = "setup"
    PLAYING = "playing"
    GAMEOVER = "gameover"


# =============================================================================
# Request Models
# =============================================================================

class CreateRoomRequest(BaseModel):
    """Optional body for room creation."""
    fleet: Optional[list[int]] = Field(
        None, description="Ship lengths, e.g. [5, 4, 3, 3, 2]; server default if omitted"
    )


# =============================================================================
# Response Models
# =============================================================================

class CreateRoomResponse(BaseModel):
    """Response from room creation."""
    success: bool = True
    roomId: str
    fleet: list[int] = Field(default_factory=list)


class ValidateRoomResponse(BaseModel):
    """Response from room validation."""
    success: bool
    message: str
    reason: Optional[ErrorCode] = None


class RoomSummary(BaseModel):
    """One room in a listing."""
    roomId: str
    status: RoomStatusValue
    players: int = Field(ge=0, le=2)


class RoomListResponse(BaseModel):
    """All rooms currently held by the server."""
    rooms: list[RoomSummary]
    count: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: ErrorCode
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "salvo"
    version: str
    rooms: int = 0
