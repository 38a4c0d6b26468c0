"""
Error taxonomy for the room engine.

Every rejection the engine can produce is a GameError subclass with a
stable `code`. The code is what travels over the wire; the message is
for humans.

All errors are locally recoverable: a rejected operation leaves the room
exactly as it was. PersistenceError is the only one raised after the
in-memory state has already been committed.
"""

from __future__ import annotations


class GameError(Exception):
    """Base class for all engine rejections."""

    code: str = "GameError"

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


# Room lookup

class RoomNotFound(GameError):
    """The room does not exist."""
    code = "NotFound"


class RoomFull(GameError):
    """Both player slots are occupied."""
    code = "Full"


class CreateFailed(GameError):
    """Generated room id collided with an existing room."""
    code = "CreateFailed"


# State machine

class InvalidTransition(GameError):
    """Message is not legal in the current room status."""
    code = "InvalidTransition"


class NotYourTurn(GameError):
    """It is not this player's turn to fire."""
    code = "NotYourTurn"


# Board

class OutOfBounds(GameError):
    """Coordinate is outside the board."""
    code = "OutOfBounds"


class Occupied(GameError):
    """Target cell already holds a ship."""
    code = "Occupied"


class AlreadyTargeted(GameError):
    """Cell has already been fired upon."""
    code = "AlreadyTargeted"


# Fleet placement

class PlacementError(GameError):
    """Submitted layout does not match the fleet."""
    code = "InvalidPlacement"


class WrongShipCount(PlacementError):
    """Layout has the wrong number of ships."""
    code = "WrongShipCount"


class WrongShipSizes(PlacementError):
    """Layout ship lengths do not match the fleet."""
    code = "WrongShipSizes"


class NonLinearShip(PlacementError):
    """A ship is not a single straight line."""
    code = "NonLinearShip"


# Storage

class PersistenceError(GameError):
    """Room table could not be written to durable storage."""
    code = "PersistenceError"


# Transport

class InvalidMessage(GameError):
    """Message could not be decoded."""
    code = "InvalidMessage"
