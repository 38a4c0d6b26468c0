"""
State Redactor - Per-viewer projection of a room.

Each player sees:
- Their own board exactly as it is
- The opponent's board with undiscovered SHIP cells shown as EMPTY
- HIT and MISS cells on both boards

Once the game is over, the opponent's board is shown unredacted so the
remaining ships are revealed.

project() is pure: it copies, never edits the room, and is recomputed
for every recipient on every broadcast.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from .board import Board, Cell
from .state import Room, RoomStatus


@dataclass(frozen=True)
class ViewState:
    """What one player is allowed to see of a room."""
    room_id: str
    you: int
    status: RoomStatus
    turn: int
    winner: int | None
    players: tuple[bool, bool]
    ships_placed: tuple[bool, bool]
    boards: tuple[tuple[tuple[int, ...], ...], tuple[tuple[int, ...], ...]]
    fleet: tuple[int, ...]
    last_shot: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the view."""
        return {
            "roomId": self.room_id,
            "you": self.you,
            "status": self.status.value,
            "turn": self.turn,
            "winner": self.winner,
            "players": list(self.players),
            "shipsPlaced": list(self.ships_placed),
            "boards": [[list(row) for row in board] for board in self.boards],
            "fleet": list(self.fleet),
            "lastShot": self.last_shot,
        }


def _hidden(board: Board) -> tuple[tuple[int, ...], ...]:
    return tuple(
        tuple(int(Cell.EMPTY if cell == Cell.SHIP else cell) for cell in row)
        for row in board.grid
    )


def _visible(board: Board) -> tuple[tuple[int, ...], ...]:
    return tuple(tuple(int(cell) for cell in row) for row in board.grid)


def project(room: Room, viewer_slot: int) -> ViewState:
    """
    Project the room into what `viewer_slot` may see.

    Args:
        room: Full room state (not modified)
        viewer_slot: 0 or 1

    Returns:
        ViewState for that viewer
    """
    if viewer_slot not in (0, 1):
        raise ValueError(f"Invalid viewer slot: {viewer_slot}")

    reveal = room.status == RoomStatus.GAMEOVER
    boards = tuple(
        _visible(board) if slot == viewer_slot or reveal else _hidden(board)
        for slot, board in enumerate(room.boards)
    )

    return ViewState(
        room_id=room.room_id,
        you=viewer_slot,
        status=room.status,
        turn=room.turn,
        winner=room.winner,
        players=(room.players[0].attached, room.players[1].attached),
        ships_placed=(room.ships_placed[0], room.ships_placed[1]),
        boards=boards,
        fleet=tuple(room.fleet),
        last_shot=room.last_shot.to_dict() if room.last_shot else None,
    )
