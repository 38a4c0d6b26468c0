"""
FastAPI Application - HTTP and WebSocket surface for the room server.

Endpoints:
    POST   /api/create-room              Create a room (optional fleet)
    GET    /api/validate-room/{room_id}  Check a room can be joined
    GET    /api/rooms                    List rooms
    GET    /health                       Health check
    WS     /ws?roomId=...                Join a room and play

WebSocket flow:
    1. Connection is accepted and seated in the first free slot
    2. Server sends assign_player, then an update to everyone in the room
    3. Client sends place_ships during setup, fire during play
    4. Every accepted transition sends each player their own update
    5. Closing the socket releases the slot (ends a started game)

Run with:
    uvicorn salvo.api.app:create_app --factory
"""

from typing import Optional
import logging

from fastapi import Body, FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings
from ..engine_core.errors import CreateFailed, PersistenceError, RoomFull, RoomNotFound
from ..session import ConnectionBroker, JsonFileStore, MemoryStore, RoomRegistry
from .schemas import (
    CreateRoomRequest,
    CreateRoomResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    RoomListResponse,
    RoomSummary,
    ValidateRoomResponse,
)


logger = logging.getLogger(__name__)


def build_registry(settings: Settings) -> RoomRegistry:
    """Registry backed by the configured store, with persisted rooms restored."""
    store = JsonFileStore(settings.data_file) if settings.persist else MemoryStore()
    registry = RoomRegistry(store=store, fleet=settings.fleet)
    registry.load()
    return registry


def create_app(registry: Optional[RoomRegistry] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        registry: Optional RoomRegistry (built from settings if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or Settings.from_env()
    registry = registry if registry is not None else build_registry(settings)
    broker = ConnectionBroker(registry)

    app = FastAPI(
        title="Salvo Room Server",
        description="Two-player Battleship rooms over WebSocket.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.registry = registry
    app.state.broker = broker
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                message=message,
            ).model_dump(mode="json"),
        )

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/create-room",
        response_model=CreateRoomResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid fleet"},
            500: {"model": ErrorResponse, "description": "Room table not saved"},
            503: {"model": ErrorResponse, "description": "Room id allocation failed"},
        },
        tags=["Rooms"],
        summary="Create a new room",
    )
    async def create_room(body: Optional[CreateRoomRequest] = Body(None)):
        """
        Create a room in WAITING state.

        Share the returned `roomId` with the second player.
        """
        fleet = body.fleet if body else None
        try:
            room = registry.create_room_with_retry(fleet)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))
        except CreateFailed as e:
            return make_error_response(ErrorCode.CREATE_FAILED, e.message, status_code=503)
        except PersistenceError as e:
            return make_error_response(ErrorCode.PERSISTENCE_ERROR, e.message, status_code=500)

        return CreateRoomResponse(roomId=room.room_id, fleet=list(room.fleet))

    @app.get(
        "/api/validate-room/{room_id}",
        response_model=ValidateRoomResponse,
        responses={
            403: {"model": ValidateRoomResponse, "description": "Room is full"},
            404: {"model": ValidateRoomResponse, "description": "Room not found"},
        },
        tags=["Rooms"],
        summary="Check that a room can be joined",
    )
    async def validate_room(room_id: str):
        try:
            registry.validate_room(room_id)
        except RoomNotFound:
            return JSONResponse(
                status_code=404,
                content=ValidateRoomResponse(
                    success=False, message="Room does not exist.", reason=ErrorCode.NOT_FOUND,
                ).model_dump(mode="json"),
            )
        except RoomFull:
            return JSONResponse(
                status_code=403,
                content=ValidateRoomResponse(
                    success=False, message="Room is full.", reason=ErrorCode.FULL,
                ).model_dump(mode="json"),
            )
        return ValidateRoomResponse(success=True, message="Room available!")

    @app.get(
        "/api/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List rooms",
    )
    async def list_rooms() -> RoomListResponse:
        rooms = [
            RoomSummary(
                roomId=room.room_id,
                status=room.status.value,
                players=len(room.occupied_slots()),
            )
            for room in registry.list_rooms()
        ]
        return RoomListResponse(rooms=rooms, count=len(rooms))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket, roomId: Optional[str] = Query(None)):
        """
        One player's connection to a room.

        Messages from server:
        - assign_player: Your slot (0 or 1), sent once
        - update: Your view of the room after each accepted change
        - error: Rejected message, or refused connection (then closed)
        - pong: Reply to ping

        Messages from client:
        - place_ships: {board: 10x10 of 0/1}
        - fire: {x, y}
        - ping: Keep-alive
        """
        await websocket.accept()
        binding = await broker.connect(roomId, websocket)
        if binding is None:
            return

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                # Text and binary frames both carry JSON
                data = frame.get("text") or frame.get("bytes") or ""
                await broker.handle_raw(binding, data)
        except WebSocketDisconnect:
            pass
        finally:
            await broker.disconnect(binding)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(version=__version__, rooms=len(registry))

    return app
