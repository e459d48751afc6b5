"""Room registry — tracks which connections belong to which room."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory many-to-many map of ``connection_id ↔ room_id``.

    Both directions are kept so that a disconnect can purge every
    membership of a connection without scanning all rooms.  Empty rooms
    are dropped as soon as their last member leaves.  There is no cap
    on members per room or rooms per connection.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, set[str]] = defaultdict(set)
        self._connections: dict[str, set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def join(self, connection_id: str, room_id: str) -> bool:
        """Add *connection_id* to *room_id*.

        Idempotent; returns ``False`` if the connection was already a member.
        """
        async with self._lock:
            members = self._rooms[room_id]
            if connection_id in members:
                return False
            members.add(connection_id)
            self._connections[connection_id].add(room_id)
        logger.info("Connection %s joined room %s", connection_id, room_id)
        return True

    async def leave_all(self, connection_id: str) -> set[str]:
        """Remove every membership of *connection_id*; return the rooms left."""
        async with self._lock:
            rooms = self._connections.pop(connection_id, set())
            for room_id in rooms:
                members = self._rooms.get(room_id)
                if members is None:
                    continue
                members.discard(connection_id)
                if not members:
                    del self._rooms[room_id]
        if rooms:
            logger.info("Connection %s left rooms %s", connection_id, sorted(rooms))
        return rooms

    async def members(self, room_id: str) -> frozenset[str]:
        """Atomic snapshot of the connections currently in *room_id*."""
        async with self._lock:
            return frozenset(self._rooms.get(room_id, ()))

    async def rooms_of(self, connection_id: str) -> frozenset[str]:
        async with self._lock:
            return frozenset(self._connections.get(connection_id, ()))

    @property
    def room_count(self) -> int:
        """Number of non-empty rooms (useful for monitoring)."""
        return len(self._rooms)
