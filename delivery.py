from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Envelope:
    """One outbound event addressed to one connection."""
    connection_id: str
    event: BaseModel


class ConnectionHub:
    """Live sockets keyed by connection id, each with its own outbound queue.

    Knows nothing about rooms: the core decides who receives what and hands
    the resulting envelopes over once its lock is released. Queuing never
    awaits, so events reach each socket in the order the core produced them.
    """

    def __init__(self):
        self._sockets: Dict[str, WebSocket] = {}
        self._queues: Dict[str, asyncio.Queue] = {}
        self._writers: Dict[str, asyncio.Task] = {}

    def register(self, connection_id: str, websocket: WebSocket) -> None:
        queue: asyncio.Queue = asyncio.Queue()
        self._sockets[connection_id] = websocket
        self._queues[connection_id] = queue
        self._writers[connection_id] = asyncio.create_task(self._write(connection_id, websocket, queue))
        logger.debug(f"Registered connection {connection_id} (live connections: {len(self._sockets)})")

    def unregister(self, connection_id: str) -> None:
        self._queues.pop(connection_id, None)
        writer = self._writers.pop(connection_id, None)
        if writer is not None:
            writer.cancel()
        if self._sockets.pop(connection_id, None) is not None:
            logger.debug(f"Unregistered connection {connection_id} (live connections: {len(self._sockets)})")

    def send(self, connection_id: str, event: BaseModel) -> bool:
        queue = self._queues.get(connection_id)
        if queue is None:
            logger.debug(f"Dropping {event.type} for {connection_id}: connection is gone")
            return False
        queue.put_nowait(event)
        return True

    def deliver(self, envelopes: Iterable[Envelope]) -> int:
        """Queue envelopes in order. Returns how many were accepted."""
        queued = 0
        for envelope in envelopes:
            if self.send(envelope.connection_id, envelope.event):
                queued += 1
        return queued

    async def close(self) -> None:
        writers = list(self._writers.values())
        for connection_id in list(self._sockets):
            self.unregister(connection_id)
        if writers:
            await asyncio.gather(*writers, return_exceptions=True)

    async def _write(self, connection_id: str, websocket: WebSocket, queue: asyncio.Queue) -> None:
        while True:
            event = await queue.get()
            try:
                await websocket.send_json(jsonable_encoder(event))
            except Exception as e:
                # the transport's own disconnect path cleans the connection up
                logger.warning(f"Error sending {event.type} to connection {connection_id}: {e}")
