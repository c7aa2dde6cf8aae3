from __future__ import annotations

from typing import Any, Optional

import events
from delivery import Envelope
from errors import NotInRoom, TargetNotFound
from logging_config import get_logger
from registry import Registry
from room_store import normalize_room_id
from schemas.signaling import AnswerOut, IceCandidateOut, OfferOut

logger = get_logger(__name__)


def relabel(kind: str, sender_id: str, payload: Any):
    """Build the event delivered to the target, naming the sender per kind."""
    if kind == events.OFFER:
        return OfferOut(offer=payload, caller=sender_id)
    if kind == events.ANSWER:
        return AnswerOut(answer=payload, answerer=sender_id)
    if kind == events.ICE_CANDIDATE:
        return IceCandidateOut(candidate=payload, sender=sender_id)
    raise ValueError(f"Unknown negotiation message kind: {kind}")


def _candidate_type(payload: Any) -> str:
    if isinstance(payload, dict):
        return str(payload.get("type") or "unknown")
    return "unknown"


class NegotiationRouter:
    """Room-scoped unicast of offers, answers and ICE candidates.

    Payloads are passed through untouched.
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    def forward(self, kind: str, sender_id: str, target_id: str, payload: Any) -> Envelope:
        event = relabel(kind, sender_id, payload)

        with self.registry.lock:
            record = self.registry.connections.get(sender_id)
            if record is None:
                raise NotInRoom(sender_id)
            room = self.registry.rooms.get_room(record.room_id)
            if room is None or not room.has(target_id):
                logger.warning(f"Target user {target_id} not found in room {record.room_id} ({kind} from {sender_id})")
                raise TargetNotFound(target_id)
            room_id = room.room_id

        if kind == events.ICE_CANDIDATE:
            logger.debug(f"ICE candidate ({_candidate_type(payload)}): {sender_id} -> {target_id} in room {room_id}")
        else:
            logger.debug(f"{kind.capitalize()}: {sender_id} -> {target_id} in room {room_id}")
        return Envelope(target_id, event)

    def record_connection_status(
        self,
        sender_id: str,
        room_id: str,
        status: str,
        target_id: Optional[str] = None,
    ) -> bool:
        """Count a peer link reported as established. Returns True if counted."""
        logger.info(f"Connection status in room {room_id}: {status} between {sender_id} and {target_id}")
        if status != "connected":
            return False

        with self.registry.lock:
            record = self.registry.connections.get(sender_id)
            if record is None or record.room_id != normalize_room_id(room_id):
                logger.debug(f"Ignoring connection status from {sender_id}: not a member of room {room_id}")
                return False
            room = self.registry.rooms.get_room(record.room_id)
            if room is None:
                return False
            room.successful_connections += 1
        return True
