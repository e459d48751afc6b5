"""Relay — fans a participant's message out to the rest of the room."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from ride_gateway.core.clock import Clock, isoformat, system_clock
from ride_gateway.relay.registry import RoomRegistry

logger = logging.getLogger(__name__)

RECEIVE_EVENT = "receive_message"


class MessageSink(Protocol):
    """A live connection that can be pushed JSON (e.g. a FastAPI ``WebSocket``)."""

    async def send_json(self, data: Any) -> None: ...


@dataclass(frozen=True)
class RelayMessage:
    """What every recipient receives."""

    room_id: str
    message: str
    sender_id: str
    sent_at: str


class Relay:
    """Best-effort, exclude-self fan-out over a :class:`RoomRegistry`.

    Membership is snapshotted atomically for each send; delivery happens
    after the registry lock is released.  Nothing is persisted: a message
    sent to an empty room is dropped.
    """

    def __init__(self, registry: RoomRegistry, clock: Clock = system_clock) -> None:
        self.registry = registry
        self._clock = clock
        self._sinks: dict[str, MessageSink] = {}

    # ── Connection lifecycle ─────────────────────────────

    def register(self, connection_id: str, sink: MessageSink) -> None:
        self._sinks[connection_id] = sink
        logger.info("Client connected: %s", connection_id)

    async def unregister(self, connection_id: str) -> set[str]:
        """Forget *connection_id* and purge all of its room memberships."""
        self._sinks.pop(connection_id, None)
        rooms = await self.registry.leave_all(connection_id)
        logger.info("Client disconnected: %s", connection_id)
        return rooms

    @property
    def active_count(self) -> int:
        """Number of live connections."""
        return len(self._sinks)

    # ── Room actions ─────────────────────────────────────

    async def join(self, connection_id: str, room_id: str) -> None:
        await self.registry.join(connection_id, room_id)

    async def send(
        self,
        connection_id: str,
        room_id: str,
        message: str,
        sender_id: str | None = None,
    ) -> int:
        """Deliver *message* to every other member of *room_id*.

        Returns how many recipients were reached.  The sender need not
        have joined the room.
        """
        members = await self.registry.members(room_id)
        if connection_id not in members:
            logger.debug("Connection %s sent to room %s without joining", connection_id, room_id)

        payload = RelayMessage(
            room_id=room_id,
            message=message,
            sender_id=sender_id or connection_id,
            sent_at=isoformat(self._clock.now()),
        )
        logger.info("Message from %s in room %s", payload.sender_id, room_id)

        targets = [
            (member, self._sinks[member])
            for member in members
            if member != connection_id and member in self._sinks
        ]
        if not targets:
            return 0

        frame = {"event": RECEIVE_EVENT, "data": asdict(payload)}
        results = await asyncio.gather(
            *(sink.send_json(frame) for _, sink in targets), return_exceptions=True
        )

        delivered = 0
        for (member, _), result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning("Delivery to %s in room %s failed: %s", member, room_id, result)
            else:
                delivered += 1
        return delivered
