"""WebSocket handler — connection lifecycle for the room relay.

Frames are JSON objects of the form ``{"event": ..., "data": ...}``::

    → {"event": "join_room", "data": "booking-42"}
    ← {"event": "joined", "data": {"room_id": "booking-42"}}

    → {"event": "send_message",
       "data": {"room_id": "booking-42", "message": "On my way", "sender_id": "drv-7"}}
    ← {"event": "sent", "data": {"room_id": "booking-42", "recipients": 1}}

Other members of the room receive a ``receive_message`` event.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ride_gateway.dependencies import get_state
from ride_gateway.relay.relay import Relay
from ride_gateway.state import GatewayState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


class FrameError(ValueError):
    """A client frame that cannot be acted on."""


def _room_id(data: Any) -> str:
    room_id = data.get("room_id") if isinstance(data, dict) else data
    if not isinstance(room_id, str) or not room_id.strip():
        raise FrameError("room_id is required")
    return room_id.strip()


async def _dispatch(relay: Relay, connection_id: str, frame: Any) -> dict:
    """Apply one client frame and return the acknowledgement to send back."""
    if not isinstance(frame, dict):
        raise FrameError("frame must be a JSON object")

    event = frame.get("event")
    data = frame.get("data")

    if event == "join_room":
        room_id = _room_id(data)
        await relay.join(connection_id, room_id)
        return {"event": "joined", "data": {"room_id": room_id}}

    if event == "send_message":
        if not isinstance(data, dict):
            raise FrameError("send_message requires an object payload")
        room_id = _room_id(data)
        message = data.get("message")
        if not isinstance(message, str):
            raise FrameError("message must be a string")
        recipients = await relay.send(
            connection_id, room_id, message, sender_id=data.get("senderId") or data.get("sender_id")
        )
        return {"event": "sent", "data": {"room_id": room_id, "recipients": recipients}}

    raise FrameError(f"unknown event: {event!r}")


@router.websocket("/ws")
async def relay_socket(websocket: WebSocket, state: GatewayState = Depends(get_state)) -> None:
    """Accept a participant and serve its room actions until it disconnects."""
    relay = state.relay
    connection_id = uuid.uuid4().hex

    await websocket.accept()

    try:
        relay.register(connection_id, websocket)
        await websocket.send_json({"event": "connected", "data": {"connection_id": connection_id}})

        while True:
            try:
                frame = await websocket.receive_json()
            except (KeyError, ValueError):
                # KeyError: binary frame with no text payload
                await websocket.send_json(
                    {"event": "error", "data": {"message": "invalid JSON"}}
                )
                continue

            try:
                ack = await _dispatch(relay, connection_id, frame)
            except FrameError as exc:
                logger.debug("Rejected frame from %s: %s", connection_id, exc)
                ack = {"event": "error", "data": {"message": str(exc)}}
            await websocket.send_json(ack)
    except WebSocketDisconnect:
        pass
    finally:
        await relay.unregister(connection_id)
