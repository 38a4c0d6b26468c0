"""
Connection Messages - The per-connection protocol as closed tagged unions.

Inbound (client -> server), discriminated on "type":
    place_ships {board: int[10][10]}   cells 0 (empty) or 1 (ship)
    fire        {x: int, y: int}       also accepts {coords: {x, y}}
    ping        {}

Outbound (server -> client):
    assign_player {playerIndex: 0|1}
    update        {state: ViewState}
    error         {message, code}
    pong          {}

Inbound messages are decoded exactly once, at the transport boundary,
by decode_inbound(). Everything past that point handles typed models.
"""

from __future__ import annotations
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

from ..engine_core.board import BOARD_SIZE, Cell, Coord
from ..engine_core.errors import InvalidMessage


# =============================================================================
# Inbound
# =============================================================================

class PlaceShipsMessage(BaseModel):
    """Submit a complete fleet layout."""
    type: Literal["place_ships"] = "place_ships"
    board: list[list[int]] = Field(description="10x10 grid, 0 = empty, 1 = ship")

    @field_validator("board")
    @classmethod
    def check_board(cls, board: list[list[int]]) -> list[list[int]]:
        if len(board) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in board):
            raise ValueError(f"board must be {BOARD_SIZE}x{BOARD_SIZE}")
        allowed = {int(Cell.EMPTY), int(Cell.SHIP)}
        if any(value not in allowed for row in board for value in row):
            raise ValueError("board cells must be 0 (empty) or 1 (ship)")
        return board

    def ship_cells(self) -> list[Coord]:
        """(x, y) of every ship cell; rows are y, columns are x."""
        return [
            (x, y)
            for y, row in enumerate(self.board)
            for x, value in enumerate(row)
            if value == Cell.SHIP
        ]


class FireMessage(BaseModel):
    """Fire at a cell on the opponent's board."""
    type: Literal["fire"] = "fire"
    x: int
    y: int

    @model_validator(mode="before")
    @classmethod
    def unwrap_coords(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("coords"), dict) and "x" not in data:
            coords = data["coords"]
            return {**data, "x": coords.get("x"), "y": coords.get("y")}
        return data


class PingMessage(BaseModel):
    """Keep-alive."""
    type: Literal["ping"] = "ping"


InboundMessage = Annotated[
    Union[PlaceShipsMessage, FireMessage, PingMessage],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def decode_inbound(raw: str | bytes | dict[str, Any]) -> InboundMessage:
    """
    Decode one inbound frame.

    Raises:
        InvalidMessage: not JSON, unknown type, or missing/invalid fields
    """
    try:
        if isinstance(raw, dict):
            return _inbound_adapter.validate_python(raw)
        return _inbound_adapter.validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        detail = first.get("msg", "invalid message")
        raise InvalidMessage(f"Invalid message: {detail}") from e


# =============================================================================
# Outbound
# =============================================================================

class AssignPlayerMessage(BaseModel):
    """Sent once, right after a connection joins a room."""
    type: Literal["assign_player"] = "assign_player"
    playerIndex: int


class UpdateMessage(BaseModel):
    """Per-viewer room state after an accepted transition."""
    type: Literal["update"] = "update"
    state: dict[str, Any]


class ErrorMessage(BaseModel):
    """Rejection, sent to the originating connection only."""
    type: Literal["error"] = "error"
    message: str
    code: Optional[str] = None


class PongMessage(BaseModel):
    """Reply to ping."""
    type: Literal["pong"] = "pong"


OutboundMessage = Union[AssignPlayerMessage, UpdateMessage, ErrorMessage, PongMessage]
