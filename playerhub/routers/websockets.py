from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..events import handle_ws_message
from ..logging_config import get_logger
from ..schemas import Ack, ClientEvent
from ..state import get_ws_hub

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["ws"])


def _ack_frame(ack_id: Any, ack: Ack) -> dict:
    return {"type": "ack", "ack": ack_id, "data": ack.payload()}


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    hub = get_ws_hub(ws)
    try:
        while True:
            text = await ws.receive_text()
            ack_id: Any = None
            ack: Optional[Ack] = None
            # Failures are isolated to this one event; the loop keeps serving.
            try:
                raw = json.loads(text)
                ack_id = raw.get("ack") if isinstance(raw, dict) else None
                event = ClientEvent.model_validate(raw)
                ack = await handle_ws_message(hub, ws, event)
            except (json.JSONDecodeError, ValidationError) as e:
                logger.debug(f"Malformed event frame: {e}")
                if ack_id is not None:
                    ack = Ack.failure("Malformed event")
            except Exception as e:
                logger.error(f"Error handling websocket event: {e}", exc_info=True)
                ack = Ack.failure("Internal error")
            if ack is not None:
                await ws.send_json(_ack_frame(ack_id, ack))
    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
    finally:
        hub.broadcaster.disconnect(ws)
