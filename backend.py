from typing import Any, List, Optional

from fastapi import WebSocket

from constants import EMPTY_ROOM_GRACE_SECONDS, REAPER_INTERVAL_SECONDS, ROOM_ID_LENGTH
from delivery import ConnectionHub
from errors import NotInRoom, SignalingError
from logging_config import get_logger
from membership import MembershipManager
from negotiation import NegotiationRouter
from reaper import IdleRoomReaper
from registry import HealthSummary, Registry, RoomLookup
from room_store import Room
from schemas.signaling import ConnectedOut, ErrorOut

logger = get_logger(__name__)


class SignalingBackend:
    """One signalling service instance: its registry, core components and live sockets.

    Transport handlers call the ``handle_*`` coroutines; HTTP handlers call the
    synchronous room queries. Core errors stop at this layer.
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        hub: Optional[ConnectionHub] = None,
        reaper_interval_seconds: float = REAPER_INTERVAL_SECONDS,
        empty_room_grace_seconds: float = EMPTY_ROOM_GRACE_SECONDS,
    ):
        self.registry = registry or Registry(room_id_length=ROOM_ID_LENGTH)
        self.hub = hub or ConnectionHub()
        self.membership = MembershipManager(self.registry)
        self.router = NegotiationRouter(self.registry)
        self.reaper = IdleRoomReaper(
            self.registry,
            interval_seconds=reaper_interval_seconds,
            grace_seconds=empty_room_grace_seconds,
        )
        logger.info("Initializing SignalingBackend")

    # ---- lifecycle ----

    def start(self) -> None:
        self.reaper.start()

    async def stop(self) -> None:
        await self.reaper.stop()
        await self.hub.close()

    # ---- room queries (HTTP boundary) ----

    def create_room(self) -> str:
        return self.membership.create_room()

    def room_exists(self, room_id: str) -> RoomLookup:
        return self.registry.lookup(room_id)

    def debug_snapshot(self) -> List[Room]:
        return self.registry.snapshot()

    def health_summary(self) -> HealthSummary:
        return self.registry.health()

    # ---- transport events ----

    async def connect(self, connection_id: str, websocket: WebSocket) -> None:
        self.hub.register(connection_id, websocket)
        self.hub.send(connection_id, ConnectedOut(connectionId=connection_id))

    async def handle_join(
        self,
        connection_id: str,
        room_id: str,
        user_name: Optional[str] = None,
        address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        try:
            envelopes = self.membership.join(connection_id, room_id, user_name, address=address, user_agent=user_agent)
        except SignalingError as e:
            await self._reject(connection_id, e)
            return
        self.hub.deliver(envelopes)

    async def handle_leave(self, connection_id: str, room_id: str) -> None:
        try:
            envelopes = self.membership.leave(connection_id, room_id)
        except SignalingError as e:
            await self._reject(connection_id, e)
            return
        self.hub.deliver(envelopes)

    async def handle_forward(self, kind: str, connection_id: str, target_id: str, payload: Any) -> None:
        try:
            envelope = self.router.forward(kind, connection_id, target_id, payload)
        except SignalingError as e:
            await self._reject(connection_id, e)
            return
        self.hub.deliver([envelope])

    async def handle_connection_status(
        self,
        connection_id: str,
        room_id: str,
        status: str,
        target_id: Optional[str] = None,
    ) -> None:
        self.router.record_connection_status(connection_id, room_id, status, target_id)

    async def disconnect(self, connection_id: str, reason: Optional[str] = None) -> None:
        logger.info(f"User {connection_id} disconnected: {reason}")
        self.hub.unregister(connection_id)
        envelopes = self.membership.disconnect(connection_id)
        self.hub.deliver(envelopes)

    async def _reject(self, connection_id: str, error: SignalingError) -> None:
        if isinstance(error, NotInRoom):
            # noisy clients fire candidates after leaving; drop without a reply
            logger.warning(f"Dropped message from {connection_id}: {error.message}")
            return
        self.hub.send(connection_id, ErrorOut(message=error.message))
