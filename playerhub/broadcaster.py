"""Room-scoped fan-out of shared state updates to websocket subscribers."""
from __future__ import annotations

from typing import Any, Dict, Set

from fastapi import WebSocket

from .keys import is_room_key
from .logging_config import get_logger

logger = get_logger(__name__)


class Broadcaster:
    """Tracks which connections joined which rooms and pushes updates to them.

    Delivery is at-most-once: a connection whose send fails is dropped from
    every room and the event is not retried for it.
    """

    def __init__(self) -> None:
        # room key -> connections currently joined
        self._rooms: Dict[str, Set[WebSocket]] = {}
        # connection -> room keys it joined, used for cleanup on disconnect
        self._memberships: Dict[WebSocket, Set[str]] = {}

    # -------------------- Membership -------------------- #

    def subscribe(self, connection: WebSocket, key: Any) -> bool:
        if not is_room_key(key):
            return False
        self._rooms.setdefault(key, set()).add(connection)
        self._memberships.setdefault(connection, set()).add(key)
        return True

    def unsubscribe(self, connection: WebSocket, key: Any) -> bool:
        if not is_room_key(key):
            return False
        members = self._rooms.get(key)
        if not members or connection not in members:
            return False
        members.discard(connection)
        if not members:
            self._rooms.pop(key, None)
        joined = self._memberships.get(connection)
        if joined is not None:
            joined.discard(key)
            if not joined:
                self._memberships.pop(connection, None)
        return True

    def disconnect(self, connection: WebSocket) -> None:
        """Remove *connection* from every room it joined."""
        for key in list(self._memberships.get(connection, ())):
            self.unsubscribe(connection, key)
        self._memberships.pop(connection, None)

    def subscribers(self, key: str) -> Set[WebSocket]:
        return set(self._rooms.get(key, ()))

    def rooms_for(self, connection: WebSocket) -> Set[str]:
        return set(self._memberships.get(connection, ()))

    # -------------------- Delivery -------------------- #

    async def publish(self, key: str, value: str) -> int:
        """Send ``shared:update`` to every subscriber of *key*. Returns the delivered count."""
        if not is_room_key(key):
            return 0
        payload = {"type": "shared:update", "data": {"key": key, "value": value}}
        delivered = 0
        for ws in list(self._rooms.get(key, ())):
            try:
                await ws.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping subscriber of {key} after failed send: {e}")
                self.disconnect(ws)
        return delivered


__all__ = ["Broadcaster"]
