from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket

from services.relay_hub import RelayHub

router = APIRouter(tags=["relay"])
logger = logging.getLogger(__name__)


@router.websocket("/")
@router.websocket("/ws")
async def ws_relay_hub(websocket: WebSocket) -> None:
    """
    Matchmaking and relay channel. One JSON object per text frame:
      {"type": "host" | "join" | "join_relay" | "leave_relay" |
               "relay_position" | "relay_block" | "offer" | "answer" | "ice", ...}
    """
    hub: RelayHub = websocket.app.state.hub
    try:
        await websocket.accept()
    except Exception as e:
        logger.warning("[hub_ws] accept() failed: %s", e)
        return

    connection = await hub.connect(websocket)
    logger.info("[hub_ws] Client connected conn=%s", connection.id)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            await hub.handle_message(connection, raw)
    finally:
        await hub.disconnect(connection)
        logger.info("[hub_ws] Client disconnected conn=%s", connection.id)
