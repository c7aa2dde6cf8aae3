from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from connection_registry import ConnectionRegistry
from room_store import Room, RoomStore, utc_now


@dataclass
class RoomLookup:
    exists: bool
    participant_count: int = 0
    # (connection id, display name) in join order
    participants: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class HealthSummary:
    room_count: int
    total_participants: int


class Registry:
    """All live signalling state of one service instance.

    Owns a single re-entrant lock shared by the room store and the connection
    registry. Membership changes take it once and do every read and write
    inside it, so no other thread sees a half-applied change.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        room_id_length: int = 6,
        id_factory: Optional[Callable[[int], str]] = None,
    ):
        self.lock = threading.RLock()
        self.clock = clock
        self.rooms = RoomStore(self.lock, clock=clock, room_id_length=room_id_length, id_factory=id_factory)
        self.connections = ConnectionRegistry(self.lock)

    def lookup(self, room_id: str) -> RoomLookup:
        with self.lock:
            room = self.rooms.get_room(room_id)
            if room is None:
                return RoomLookup(exists=False)
            return RoomLookup(
                exists=True,
                participant_count=len(room.participants),
                participants=[(p.connection_id, p.display_name) for p in room.participants],
            )

    def snapshot(self) -> List[Room]:
        return self.rooms.list_rooms()

    def health(self) -> HealthSummary:
        with self.lock:
            rooms = self.rooms.iter_live()
            return HealthSummary(
                room_count=len(rooms),
                total_participants=sum(len(room.participants) for room in rooms),
            )
