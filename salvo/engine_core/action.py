"""
Action System - Actions, payloads, and results.

Actions represent everything that can happen to a room:
1. A player joining a free slot
2. A player submitting a fleet layout
3. A player firing a shot
4. A player's connection going away

All room mutations flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .board import Cell, Coord


class ActionType(Enum):
    """Types of actions in the system."""
    JOIN = "join"
    PLACE_SHIPS = "place_ships"
    FIRE = "fire"
    DISCONNECT = "disconnect"


@dataclass
class ActionPayload:
    """
    Payload for an action.

    Different action types use different fields; the reducer checks
    what it needs.
    """
    slot: int | None = None
    token: str | None = None

    # place_ships
    cells: list[Coord] = field(default_factory=list)

    # fire
    x: int | None = None
    y: int | None = None


@dataclass
class Action:
    """A complete action to be applied to a room."""
    action_type: ActionType
    payload: ActionPayload

    @classmethod
    def join(cls, token: str) -> Action:
        """Factory for join action."""
        return cls(
            action_type=ActionType.JOIN,
            payload=ActionPayload(token=token),
        )

    @classmethod
    def place_ships(cls, slot: int, cells: list[Coord]) -> Action:
        """Factory for fleet submission."""
        return cls(
            action_type=ActionType.PLACE_SHIPS,
            payload=ActionPayload(slot=slot, cells=list(cells)),
        )

    @classmethod
    def fire(cls, slot: int, x: int, y: int) -> Action:
        """Factory for a shot."""
        return cls(
            action_type=ActionType.FIRE,
            payload=ActionPayload(slot=slot, x=x, y=y),
        )

    @classmethod
    def disconnect(cls, slot: int) -> Action:
        """Factory for a lost connection."""
        return cls(
            action_type=ActionType.DISCONNECT,
            payload=ActionPayload(slot=slot),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was accepted
    - Whether the room actually changed (repeated disconnects do not)
    - The error code and message on rejection
    - Action-specific output (assigned slot, shot outcome)
    """
    success: bool
    changed: bool = False
    error: str | None = None
    error_code: str | None = None

    slot: int | None = None
    outcome: Cell | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def accepted(cls, changes: list[str] | None = None, **extra: Any) -> ActionResult:
        """Create a success result for an action that changed the room."""
        return cls(success=True, changed=True, state_changes=changes or [], **extra)

    @classmethod
    def unchanged(cls, reason: str) -> ActionResult:
        """Create a success result for an accepted no-op."""
        return cls(success=True, changed=False, state_changes=[reason])
