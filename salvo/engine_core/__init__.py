"""
Engine Core - Room state and the rules that govern it.

The engine:
1. Holds each player's 10x10 board
2. Validates fleet layouts against the room's fleet
3. Applies join/place/fire/disconnect actions via the reducer
4. Projects per-viewer views that hide the opponent's ships
"""

from .board import Board, Cell, BOARD_SIZE
from .state import Room, RoomStatus, PlayerSlot, LastShot
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer
from .placement import DEFAULT_FLEET, PlacementResult, parse_fleet, validate_fleet
from .redaction import ViewState, project
from .errors import GameError

__all__ = [
    "Board",
    "Cell",
    "BOARD_SIZE",
    "Room",
    "RoomStatus",
    "PlayerSlot",
    "LastShot",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "DEFAULT_FLEET",
    "PlacementResult",
    "parse_fleet",
    "validate_fleet",
    "ViewState",
    "project",
    "GameError",
]
