import json
import uuid
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

import events
from backend import SignalingBackend
from logging_config import get_logger
from schemas.signaling import (
    AnswerIn,
    ClientToServer,
    ConnectionStatusIn,
    IceCandidateIn,
    JoinRoomIn,
    LeaveRoomIn,
    OfferIn,
)

logger = get_logger(__name__)

signaling_router = APIRouter(tags=["signaling"])

INBOUND_MODELS = {
    events.JOIN_ROOM: JoinRoomIn,
    events.LEAVE_ROOM: LeaveRoomIn,
    events.OFFER: OfferIn,
    events.ANSWER: AnswerIn,
    events.ICE_CANDIDATE: IceCandidateIn,
    events.CONNECTION_STATUS: ConnectionStatusIn,
}


def parse_client_message(raw: str, connection_id: str = "?") -> Optional[ClientToServer]:
    """Decode one inbound frame. Returns None for anything that should be ignored."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Ignoring non-JSON frame from connection {connection_id}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Ignoring non-object frame from connection {connection_id}")
        return None

    model = INBOUND_MODELS.get(data.get("type"))
    if model is None:
        logger.debug(f"Ignoring unknown message type {data.get('type')!r} from connection {connection_id}")
        return None

    try:
        return model(**data)
    except ValidationError as e:
        logger.warning(f"Invalid {data['type']} message from connection {connection_id}: {e.error_count()} error(s)")
        return None


async def dispatch(backend: SignalingBackend, connection_id: str, message: ClientToServer, websocket: WebSocket):
    if isinstance(message, JoinRoomIn):
        await backend.handle_join(
            connection_id,
            message.roomId,
            message.userName,
            address=websocket.client.host if websocket.client else None,
            user_agent=websocket.headers.get("user-agent"),
        )
    elif isinstance(message, LeaveRoomIn):
        await backend.handle_leave(connection_id, message.roomId)
    elif isinstance(message, OfferIn):
        await backend.handle_forward(events.OFFER, connection_id, message.target, message.offer)
    elif isinstance(message, AnswerIn):
        await backend.handle_forward(events.ANSWER, connection_id, message.target, message.answer)
    elif isinstance(message, IceCandidateIn):
        await backend.handle_forward(events.ICE_CANDIDATE, connection_id, message.target, message.candidate)
    elif isinstance(message, ConnectionStatusIn):
        await backend.handle_connection_status(connection_id, message.roomId, message.status, message.targetUserId)


@signaling_router.websocket("/ws")
async def signaling_endpoint(websocket: WebSocket):
    """Signalling transport: one socket per client, JSON frames tagged by ``type``."""
    backend: SignalingBackend = websocket.app.state.backend

    await websocket.accept()
    connection_id = str(uuid.uuid4())
    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"User connected: {connection_id} from {client_host}")

    reason = "server shutdown"
    try:
        await backend.connect(connection_id, websocket)
        while True:
            raw = await websocket.receive_text()
            message = parse_client_message(raw, connection_id)
            if message is None:
                continue
            await dispatch(backend, connection_id, message, websocket)
    except WebSocketDisconnect as e:
        reason = f"client closed (code {e.code})"
    except Exception as e:
        reason = "server error"
        logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
    finally:
        await backend.disconnect(connection_id, reason)
