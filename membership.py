from __future__ import annotations

from typing import List, Optional

from delivery import Envelope
from errors import NotInRoom, RoomNotFound
from logging_config import get_logger
from registry import Registry
from room_store import Participant, normalize_room_id
from schemas.signaling import RoomJoinedOut, UserInfo, UserJoinedOut, UserLeftOut

logger = get_logger(__name__)


class MembershipManager:
    """Join, leave and disconnect handling for connections.

    Each operation mutates the room store and the connection registry under the
    registry lock and returns the envelopes to deliver, in delivery order.
    Nothing is sent from here.
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    def create_room(self) -> str:
        return self.registry.rooms.create_room()

    def join(
        self,
        connection_id: str,
        room_id: str,
        requested_name: Optional[str] = None,
        address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> List[Envelope]:
        name = (requested_name or "").strip()
        envelopes: List[Envelope] = []

        with self.registry.lock:
            room = self.registry.rooms.get_room(room_id)
            if room is None:
                logger.warning(f"Join rejected for {connection_id}: room {room_id} not found")
                raise RoomNotFound(room_id)

            current = self.registry.connections.get(connection_id)
            if current is not None and current.room_id != room.room_id:
                logger.info(f"Connection {connection_id} switching from room {current.room_id} to {room.room_id}")
                envelopes.extend(self._teardown(connection_id))

            participant = room.find(connection_id)
            if participant is not None:
                if name:
                    participant.display_name = name
                logger.info(f"User {connection_id} reconnected to room {room.room_id}")
            else:
                participant = Participant(
                    connection_id=connection_id,
                    display_name=name or room.default_name(),
                    joined_at=self.registry.clock(),
                    address=address,
                    user_agent=user_agent,
                )
                room.participants.append(participant)
                room.connection_attempts += 1

            self.registry.connections.bind(connection_id, room.room_id, participant.display_name)

            others = [p for p in room.participants if p.connection_id != connection_id]
            # roster to the joiner first so it never misses an existing member
            envelopes.append(Envelope(connection_id, RoomJoinedOut(
                roomId=room.room_id,
                users=[UserInfo(id=p.connection_id, name=p.display_name) for p in others],
            )))
            announcement = UserJoinedOut(id=connection_id, name=participant.display_name)
            envelopes.extend(Envelope(p.connection_id, announcement) for p in others)

            logger.info(
                f"{participant.display_name} ({connection_id}) joined room {room.room_id}. "
                f"Total users: {len(room.participants)}"
            )
        return envelopes

    def leave(self, connection_id: str, room_id: str) -> List[Envelope]:
        with self.registry.lock:
            record = self.registry.connections.get(connection_id)
            if record is None:
                raise NotInRoom(connection_id)
            if record.room_id != normalize_room_id(room_id):
                logger.info(f"Ignoring leave of room {room_id} from {connection_id}, which is in room {record.room_id}")
                return []
            return self._teardown(connection_id)

    def disconnect(self, connection_id: str) -> List[Envelope]:
        with self.registry.lock:
            return self._teardown(connection_id)

    def _teardown(self, connection_id: str) -> List[Envelope]:
        # caller holds the registry lock
        record = self.registry.connections.unbind(connection_id)
        if record is None:
            return []

        room = self.registry.rooms.get_room(record.room_id)
        if room is None:
            logger.warning(f"Connection {connection_id} was bound to missing room {record.room_id}")
            return []

        participant = room.remove(connection_id)
        if participant is None:
            logger.warning(f"Connection {connection_id} was not listed in room {room.room_id}")
            return []

        notice = UserLeftOut(connectionId=connection_id)
        envelopes = [Envelope(p.connection_id, notice) for p in room.participants]
        logger.info(
            f"{participant.display_name} ({connection_id}) left room {room.room_id}. "
            f"Remaining: {len(room.participants)}"
        )

        if room.is_empty:
            self.registry.rooms.delete_room(room.room_id)
            logger.info(f"Room {room.room_id} deleted (empty)")
        return envelopes
