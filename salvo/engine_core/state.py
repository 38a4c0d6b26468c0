"""
Room State - One game session between two players.

Design principles:
- Owned by the registry, mutated only by the Reducer
- Serializable: to_dict()/from_dict() round-trip the whole room
- Player tokens are opaque and never leave the server
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import time

from .board import Board, Cell
from .placement import DEFAULT_FLEET


SLOTS = (0, 1)


class RoomStatus(Enum):
    """Room lifecycle. Moves forward only; GAMEOVER is terminal."""
    WAITING = "waiting"  # Fewer than two players attached
    SETUP = "setup"  # Both slots filled, fleets being arranged
    PLAYING = "playing"  # Both fleets placed, shots alternate
    GAMEOVER = "gameover"  # Fleet sunk or a player left mid-session


@dataclass
class PlayerSlot:
    """A seat in the room. `token` is None while the seat is free."""
    token: str | None = None

    @property
    def attached(self) -> bool:
        return self.token is not None


@dataclass
class LastShot:
    """The most recent resolved shot, for clients to highlight."""
    slot: int
    x: int
    y: int
    outcome: Cell

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.slot,
            "x": self.x,
            "y": self.y,
            "hit": self.outcome == Cell.HIT,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LastShot:
        return cls(
            slot=int(data["player"]),
            x=int(data["x"]),
            y=int(data["y"]),
            outcome=Cell.HIT if data.get("hit") else Cell.MISS,
        )


@dataclass
class Room:
    """
    Full state of one room.

    Contains:
    - Two player slots and two boards, indexed by slot (0 or 1)
    - Which slots have submitted a fleet
    - Whose turn it is and the winner, if any
    """
    room_id: str
    fleet: tuple[int, ...] = DEFAULT_FLEET
    players: list[PlayerSlot] = field(default_factory=lambda: [PlayerSlot(), PlayerSlot()])
    boards: list[Board] = field(default_factory=lambda: [Board(), Board()])
    ships_placed: list[bool] = field(default_factory=lambda: [False, False])
    turn: int = 0
    status: RoomStatus = RoomStatus.WAITING
    winner: int | None = None
    last_shot: LastShot | None = None
    shot_count: int = 0
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    def occupied_slots(self) -> list[int]:
        return [slot for slot in SLOTS if self.players[slot].attached]

    def is_full(self) -> bool:
        return len(self.occupied_slots()) == len(SLOTS)

    def is_empty(self) -> bool:
        return not self.occupied_slots()

    def first_free_slot(self) -> int | None:
        for slot in SLOTS:
            if not self.players[slot].attached:
                return slot
        return None

    def touch(self):
        self.updated_at = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Self-describing document for durable storage."""
        return {
            "roomId": self.room_id,
            "fleet": list(self.fleet),
            "players": [p.token for p in self.players],
            "boards": [b.to_rows() for b in self.boards],
            "shipsPlaced": list(self.ships_placed),
            "turn": self.turn,
            "status": self.status.value,
            "winner": self.winner,
            "lastShot": self.last_shot.to_dict() if self.last_shot else None,
            "shotCount": self.shot_count,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Room:
        last_shot = data.get("lastShot")
        return cls(
            room_id=data["roomId"],
            fleet=tuple(data.get("fleet") or DEFAULT_FLEET),
            players=[PlayerSlot(token=t) for t in data.get("players", [None, None])],
            boards=[Board.from_rows(rows) for rows in data["boards"]],
            ships_placed=[bool(v) for v in data.get("shipsPlaced", [False, False])],
            turn=int(data.get("turn", 0)),
            status=RoomStatus(data.get("status", RoomStatus.WAITING.value)),
            winner=data.get("winner"),
            last_shot=LastShot.from_dict(last_shot) if last_shot else None,
            shot_count=int(data.get("shotCount", 0)),
            created_at=float(data.get("createdAt", time.time())),
            updated_at=float(data.get("updatedAt", time.time())),
        )
