"""
Reducer - Applies actions to a room.

The reducer is the single point of room mutation.
All state changes must go through apply().

Design principles:
- Validates before applying; a rejected action changes nothing
- Returns ActionResult with success/failure and the error code
- Status only moves forward: WAITING -> SETUP -> PLAYING -> GAMEOVER,
  with GAMEOVER reachable from SETUP/PLAYING by disconnect
- The winner, once recorded, is never overwritten

The reducer does no locking. Callers serialize actions per room.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .action import Action, ActionResult, ActionType
from .board import Board, Cell
from .errors import GameError, InvalidTransition, NotYourTurn, RoomFull
from .placement import validate_or_raise
from .state import SLOTS, LastShot, Room, RoomStatus


logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to a room.

    Stateless - all state is in the Room.
    """

    def apply(self, room: Room, action: Action) -> ActionResult:
        """
        Apply an action to the room.

        Returns ActionResult; on failure the room is untouched.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=InvalidTransition.code,
            )

        try:
            self._validate_action(room, action)
            result = handler(room, action)
        except GameError as e:
            logger.debug(
                "Rejected %s in room %s: %s",
                action.action_type.value, room.room_id, e.message,
            )
            return ActionResult.failure(e.message, error_code=e.code)

        if result.changed:
            room.touch()
        return result

    def _validate_action(self, room: Room, action: Action):
        """
        Check that the action is legal in the current status.

        Raises the matching GameError if not.
        """
        action_type = action.action_type
        slot = action.payload.slot

        if action_type in {ActionType.PLACE_SHIPS, ActionType.FIRE}:
            if room.status == RoomStatus.GAMEOVER:
                raise InvalidTransition("Game is over - no actions allowed")
            if slot not in SLOTS or not room.players[slot].attached:
                raise InvalidTransition(f"Slot {slot} is not attached to this room")

        if action_type == ActionType.PLACE_SHIPS:
            if room.status != RoomStatus.SETUP:
                raise InvalidTransition("Ships can only be placed during setup")
            if room.ships_placed[slot]:
                raise InvalidTransition("Ships already placed")

        if action_type == ActionType.FIRE:
            if room.status != RoomStatus.PLAYING or room.turn != slot:
                raise NotYourTurn()

        if action_type == ActionType.JOIN:
            if room.status != RoomStatus.WAITING or room.is_full():
                raise RoomFull()

        if action_type == ActionType.DISCONNECT and slot not in SLOTS:
            raise InvalidTransition(f"Unknown slot {slot}")

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.JOIN: self._handle_join,
            ActionType.PLACE_SHIPS: self._handle_place_ships,
            ActionType.FIRE: self._handle_fire,
            ActionType.DISCONNECT: self._handle_disconnect,
        }
        return handlers.get(action_type)

    def _handle_join(self, room: Room, action: Action) -> ActionResult:
        """Seat a player in the first free slot."""
        slot = room.first_free_slot()
        room.players[slot].token = action.payload.token
        changes = [f"Player {slot} joined"]

        if room.is_full():
            room.status = RoomStatus.SETUP
            changes.append("Both players present - setup begins")

        return ActionResult.accepted(changes, slot=slot)

    def _handle_place_ships(self, room: Room, action: Action) -> ActionResult:
        """
        Accept a fleet layout.

        The layout is built on a fresh board and validated before the
        room sees it, so a bad layout never reaches room state.
        """
        slot = action.payload.slot
        candidate = Board()
        candidate.place_ship(action.payload.cells)
        validate_or_raise(candidate, room.fleet)

        room.boards[slot] = candidate
        room.ships_placed[slot] = True
        changes = [f"Player {slot} placed ships"]

        if all(room.ships_placed):
            room.status = RoomStatus.PLAYING
            room.turn = 0
            changes.append("Both fleets placed - battle begins")

        return ActionResult.accepted(changes, slot=slot)

    def _handle_fire(self, room: Room, action: Action) -> ActionResult:
        """
        Resolve a shot against the opponent's board.

        Turn passes on every resolved shot, hit or miss, unless the shot
        sinks the last ship.
        """
        slot = action.payload.slot
        x, y = action.payload.x, action.payload.y
        opponent = 1 - slot
        target = room.boards[opponent]

        outcome = target.resolve_shot(x, y)
        room.last_shot = LastShot(slot=slot, x=x, y=y, outcome=outcome)
        room.shot_count += 1
        changes = [f"Player {slot} fired at ({x}, {y}): {outcome.name.lower()}"]

        if target.all_ships_sunk():
            room.status = RoomStatus.GAMEOVER
            room.winner = slot
            changes.append(f"Player {slot} wins")
        else:
            room.turn = opponent

        return ActionResult.accepted(changes, slot=slot, outcome=outcome)

    def _handle_disconnect(self, room: Room, action: Action) -> ActionResult:
        """
        Free a slot whose connection went away.

        Mid-session (SETUP or PLAYING) this ends the game and the player
        still attached, if any, wins. Idempotent: freeing a free slot is
        an accepted no-op.
        """
        slot = action.payload.slot
        if not room.players[slot].attached:
            return ActionResult.unchanged(f"Slot {slot} already free")

        room.players[slot].token = None
        changes = [f"Player {slot} left"]

        if room.status in {RoomStatus.SETUP, RoomStatus.PLAYING}:
            other = 1 - slot
            room.status = RoomStatus.GAMEOVER
            if room.winner is None and room.players[other].attached:
                room.winner = other
            changes.append(f"Game over by disconnect - winner {room.winner}")

        return ActionResult.accepted(changes, slot=slot)

