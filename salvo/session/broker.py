"""
Connection Broker - Binds live connections to room slots.

Flow for every inbound message:
1. Transport decodes the frame (messages.decode_inbound)
2. Broker takes the room's lock and applies the matching action
3. Rejection -> error to the originating connection only
4. Acceptance -> persist the table, then send each attached player
   their own projection of the room

Bindings are runtime-only. A disconnect ends the binding for good;
there is no reconnecting to a slot.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Protocol
import logging

from ..engine_core.action import Action, ActionResult
from ..engine_core.errors import GameError, InvalidMessage, PersistenceError, RoomNotFound
from ..engine_core.reducer import Reducer
from ..engine_core.redaction import project
from ..engine_core.state import SLOTS, Room, RoomStatus
from .messages import (
    AssignPlayerMessage,
    ErrorMessage,
    FireMessage,
    InboundMessage,
    OutboundMessage,
    PingMessage,
    PlaceShipsMessage,
    PongMessage,
    UpdateMessage,
    decode_inbound,
)
from .registry import RoomRegistry, generate_player_token


logger = logging.getLogger(__name__)


class Transport(Protocol):
    """What the broker needs from a connection (a FastAPI WebSocket fits)."""

    async def send_json(self, data: Any) -> None:
        ...

    async def close(self, code: int = 1000) -> None:
        ...


@dataclass(eq=False)
class Binding:
    """A live connection seated in one slot of one room."""
    room_id: str
    slot: int
    token: str
    transport: Transport
    closed: bool = False


class ConnectionBroker:
    """
    Routes connection events to rooms and fans out updates.

    Usage:
        broker = ConnectionBroker(registry)

        binding = await broker.connect(room_id, websocket)
        if binding:
            await broker.handle_raw(binding, frame)
            ...
            await broker.disconnect(binding)
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self.reducer = Reducer()
        self._bindings: dict[str, list[Binding | None]] = {}

    def bindings(self, room_id: str) -> list[Binding]:
        """Live bindings for a room, in slot order."""
        return [b for b in self._bindings.get(room_id, []) if b is not None]

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self, room_id: str | None, transport: Transport) -> Binding | None:
        """
        Seat a new connection in a room.

        On success sends assign_player, then broadcasts the new state.
        If the room is unknown or cannot take a player, sends an error
        and closes the transport.

        Returns:
            The binding, or None if the connection was refused
        """
        if not room_id or self.registry.get(room_id) is None:
            await self._refuse(transport, "Invalid room", RoomNotFound.code)
            return None

        async with self.registry.lock(room_id):
            room = self.registry.get(room_id)
            if room is None:
                await self._refuse(transport, "Invalid room", RoomNotFound.code)
                return None

            try:
                self.registry.validate_room(room_id)
            except GameError as e:
                await self._refuse(transport, e.message, e.code)
                return None

            token = generate_player_token()
            result = self.reducer.apply(room, Action.join(token))
            if not result.success:
                await self._refuse(transport, result.error, result.error_code)
                return None

            binding = Binding(room_id=room_id, slot=result.slot, token=token, transport=transport)
            self._bindings.setdefault(room_id, [None, None])[binding.slot] = binding
            logger.info("Player %d (%s) joined room %s", binding.slot, token, room_id)

            await self._send(binding, AssignPlayerMessage(playerIndex=binding.slot))
            await self._commit(room, binding)
            return binding

    async def disconnect(self, binding: Binding):
        """
        Release a binding.

        Safe to call more than once: only the first call has any effect.
        Mid-session this ends the game in favour of whoever is left.
        """
        if binding.closed:
            return
        binding.closed = True

        async with self.registry.lock(binding.room_id):
            slots = self._bindings.get(binding.room_id)
            if slots and slots[binding.slot] is binding:
                slots[binding.slot] = None

            room = self.registry.get(binding.room_id)
            if room is None:
                return

            result = self.reducer.apply(room, Action.disconnect(binding.slot))
            if not result.changed:
                return
            logger.info("Player %d left room %s", binding.slot, room.room_id)
            if room.status == RoomStatus.GAMEOVER:
                logger.info("Room %s is over, winner %s", room.room_id, room.winner)

            if room.is_empty() and room.status != RoomStatus.WAITING:
                self.registry.remove(room.room_id)
                self._bindings.pop(room.room_id, None)

            await self._commit(room, origin=None)

    # =========================================================================
    # Inbound messages
    # =========================================================================

    async def handle_raw(self, binding: Binding, raw: str | bytes | dict[str, Any]) -> ActionResult | None:
        """Decode one frame and handle it. Decode failures go back to the sender."""
        try:
            message = decode_inbound(raw)
        except InvalidMessage as e:
            await self._send(binding, ErrorMessage(message=e.message, code=e.code))
            return None
        return await self.handle(binding, message)

    async def handle(self, binding: Binding, message: InboundMessage) -> ActionResult | None:
        """
        Apply a decoded message to the binding's room.

        Returns the ActionResult, or None for messages that are not
        room actions (ping) or arrive on a dead binding.
        """
        if binding.closed:
            return None
        if isinstance(message, PingMessage):
            await self._send(binding, PongMessage())
            return None

        action = self._to_action(binding, message)

        async with self.registry.lock(binding.room_id):
            room = self.registry.get(binding.room_id)
            if room is None:
                await self._send(binding, ErrorMessage(message="Invalid room", code=RoomNotFound.code))
                return None

            result = self.reducer.apply(room, action)
            if not result.success:
                await self._send(binding, ErrorMessage(message=result.error, code=result.error_code))
                return result

            if room.status == RoomStatus.GAMEOVER and room.winner is not None:
                logger.info("Room %s is over, winner %s", room.room_id, room.winner)
            await self._commit(room, binding)
            return result

    def _to_action(self, binding: Binding, message: InboundMessage) -> Action:
        if isinstance(message, PlaceShipsMessage):
            return Action.place_ships(binding.slot, message.ship_cells())
        if isinstance(message, FireMessage):
            return Action.fire(binding.slot, message.x, message.y)
        raise InvalidMessage(f"Unsupported message type: {message.type}")

    # =========================================================================
    # Outbound
    # =========================================================================

    async def broadcast(self, room: Room):
        """Send every attached connection its own projection of the room."""
        for slot in SLOTS:
            binding = self._slot_binding(room.room_id, slot)
            if binding is None:
                continue
            view = project(room, slot)
            await self._send(binding, UpdateMessage(state=view.to_dict()))

    async def _commit(self, room: Room, origin: Binding | None):
        """Persist after an accepted transition, then broadcast."""
        try:
            self.registry.persist()
        except PersistenceError as e:
            if origin is not None:
                await self._send(origin, ErrorMessage(message=e.message, code=e.code))
        await self.broadcast(room)

    def _slot_binding(self, room_id: str, slot: int) -> Binding | None:
        slots = self._bindings.get(room_id)
        if not slots:
            return None
        binding = slots[slot]
        if binding is None or binding.closed:
            return None
        return binding

    async def _send(self, binding: Binding, message: OutboundMessage):
        """
        Send to one binding.

        A failing send drops the binding from the fan-out; the transport
        loop still calls disconnect() when the socket finishes closing.
        """
        try:
            await binding.transport.send_json(message.model_dump())
        except Exception as e:
            logger.warning(
                "Dropping player %d of room %s after failed send: %s",
                binding.slot, binding.room_id, e,
            )
            slots = self._bindings.get(binding.room_id)
            if slots and slots[binding.slot] is binding:
                slots[binding.slot] = None

    async def _refuse(self, transport: Transport, message: str, code: str | None):
        """Tell a connection why it was refused, then close it."""
        logger.info("Refused connection: %s", message)
        try:
            await transport.send_json(ErrorMessage(message=message, code=code).model_dump())
        finally:
            await transport.close()
