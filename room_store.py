from __future__ import annotations

import random
import string
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from logging_config import get_logger

logger = get_logger(__name__)

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits
MAX_ROOM_ID_ATTEMPTS = 16


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_room_id(room_id: str) -> str:
    """Room ids are handed out upper-case; accept them typed in any case."""
    return room_id.strip().upper()


def generate_room_id(length: int = 6) -> str:
    return "".join(random.choices(ROOM_ID_ALPHABET, k=length))


@dataclass
class Participant:
    connection_id: str
    display_name: str
    joined_at: datetime
    address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class Room:
    room_id: str
    created_at: datetime
    participants: List[Participant] = field(default_factory=list)
    connection_attempts: int = 0
    successful_connections: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.participants

    def find(self, connection_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.connection_id == connection_id:
                return participant
        return None

    def has(self, connection_id: str) -> bool:
        return self.find(connection_id) is not None

    def remove(self, connection_id: str) -> Optional[Participant]:
        participant = self.find(connection_id)
        if participant is not None:
            self.participants.remove(participant)
        return participant

    def default_name(self) -> str:
        # 1-based position at join time
        return f"User{len(self.participants) + 1}"

    def snapshot(self) -> "Room":
        """Detached copy, safe to read after the registry lock is released."""
        return replace(self, participants=[replace(p) for p in self.participants])


class RoomStore:
    """Rooms keyed by room id.

    Every method takes the shared registry lock, so callers that already hold
    it (the lock is re-entrant) can compose several calls into one atomic step.
    """

    def __init__(
        self,
        lock,
        clock: Callable[[], datetime] = utc_now,
        room_id_length: int = 6,
        id_factory: Optional[Callable[[int], str]] = None,
    ):
        self._lock = lock
        self._clock = clock
        self._room_id_length = room_id_length
        self._id_factory = id_factory or generate_room_id
        self._rooms: Dict[str, Room] = {}

    def create_room(self) -> str:
        with self._lock:
            for _ in range(MAX_ROOM_ID_ATTEMPTS):
                room_id = normalize_room_id(self._id_factory(self._room_id_length))
                if room_id not in self._rooms:
                    break
                logger.warning(f"Room id collision on {room_id}, retrying")
            else:
                raise RuntimeError(f"Could not allocate a free room id after {MAX_ROOM_ID_ATTEMPTS} attempts")

            self._rooms[room_id] = Room(room_id=room_id, created_at=self._clock())
        logger.info(f"Room created: {room_id}")
        return room_id

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(normalize_room_id(room_id))

    def delete_room(self, room_id: str) -> bool:
        with self._lock:
            removed = self._rooms.pop(normalize_room_id(room_id), None)
        if removed is not None:
            logger.debug(f"Room {removed.room_id} removed from store")
        return removed is not None

    def list_rooms(self) -> List[Room]:
        """Snapshots of every live room, in creation order."""
        with self._lock:
            return [room.snapshot() for room in self._rooms.values()]

    def iter_live(self) -> List[Room]:
        # live objects; only meaningful while the caller holds the lock
        with self._lock:
            return list(self._rooms.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return normalize_room_id(room_id) in self._rooms
