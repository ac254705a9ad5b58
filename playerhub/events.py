"""Event-channel handlers for room membership and shared state.

All functions operate on a ``Hub`` and a connection object only; the
websocket router feeds them decoded frames and sends back whatever
acknowledgment they return.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import WebSocket

from .keys import is_room_key
from .logging_config import get_logger
from .schemas import Ack, ClientEvent, SharedGetRequest, SharedSetRequest
from .state import Hub

logger = get_logger(__name__)

INVALID_ROOM_KEY = "Invalid room key"
UNKNOWN_EVENT = "Unknown event"


def _room_key_from(data: Any) -> Any:
    # ``room:subscribe`` accepts either the bare key or ``{"key": ...}``.
    if isinstance(data, dict):
        return data.get("key")
    return data


def _as_dict(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------

async def handle_subscribe(hub: Hub, ws: WebSocket, data: Any) -> None:
    key = _room_key_from(data)
    if hub.broadcaster.subscribe(ws, key):
        logger.debug(f"Connection joined {key}")


async def handle_unsubscribe(hub: Hub, ws: WebSocket, data: Any) -> None:
    key = _room_key_from(data)
    if hub.broadcaster.unsubscribe(ws, key):
        logger.debug(f"Connection left {key}")


# ---------------------------------------------------------------------------
# Shared state
# ---------------------------------------------------------------------------

async def handle_shared_get(hub: Hub, data: Any) -> Ack:
    req = SharedGetRequest.model_validate(_as_dict(data))
    if not is_room_key(req.key):
        return Ack.failure(INVALID_ROOM_KEY)
    return Ack.success(value=hub.shared.get(req.key))


async def handle_shared_set(hub: Hub, data: Any) -> Ack:
    """Store, schedule persistence, then broadcast - in that order.

    Subscribers never observe a value that is not already pending a
    durable write.
    """
    req = SharedSetRequest.model_validate(_as_dict(data))
    if not is_room_key(req.key):
        return Ack.failure(INVALID_ROOM_KEY)
    stored = hub.shared.set(req.key, req.value)
    hub.shared_flusher.schedule_flush()
    await hub.broadcaster.publish(req.key, stored)
    return Ack.success()


# ---------------------------------------------------------------------------
# Primary dispatcher used by websocket endpoint
# ---------------------------------------------------------------------------

async def handle_ws_message(hub: Hub, ws: WebSocket, event: ClientEvent) -> Optional[Ack]:
    """Route one event. Returns the acknowledgment to send, or ``None`` for fire-and-forget events."""
    if event.type == "room:subscribe":
        await handle_subscribe(hub, ws, event.data)
    elif event.type == "room:unsubscribe":
        await handle_unsubscribe(hub, ws, event.data)
    elif event.type == "shared:get":
        return await handle_shared_get(hub, event.data)
    elif event.type == "shared:set":
        return await handle_shared_set(hub, event.data)
    elif event.ack is not None:
        return Ack.failure(UNKNOWN_EVENT)
    else:
        logger.debug(f"Ignoring unknown event {event.type!r}")
    return None


__all__ = [
    "handle_subscribe",
    "handle_unsubscribe",
    "handle_shared_get",
    "handle_shared_set",
    "handle_ws_message",
    "INVALID_ROOM_KEY",
    "UNKNOWN_EVENT",
]
