from __future__ import annotations

import asyncio
from datetime import datetime
from typing import List, Optional

from logging_config import get_logger
from registry import Registry

logger = get_logger(__name__)


class IdleRoomReaper:
    """Periodically deletes empty rooms older than a grace period.

    Membership teardown already deletes rooms the moment they empty; this only
    catches rooms that never saw a participant or missed a teardown.
    """

    def __init__(self, registry: Registry, interval_seconds: float = 300, grace_seconds: float = 3600):
        self.registry = registry
        self.interval_seconds = interval_seconds
        self.grace_seconds = grace_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self, now: Optional[datetime] = None) -> List[str]:
        now = now or self.registry.clock()
        deleted: List[str] = []
        with self.registry.lock:
            for room in self.registry.rooms.iter_live():
                if not room.is_empty:
                    continue
                if (now - room.created_at).total_seconds() > self.grace_seconds:
                    self.registry.rooms.delete_room(room.room_id)
                    deleted.append(room.room_id)
        for room_id in deleted:
            logger.info(f"Cleaned up empty room: {room_id}")
        return deleted

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        logger.info(
            f"Idle room reaper started (interval {self.interval_seconds}s, grace {self.grace_seconds}s)"
        )
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                try:
                    self.sweep()
                except Exception as e:
                    logger.error(f"Error sweeping idle rooms: {e}", exc_info=True)
        except asyncio.CancelledError:
            logger.info("Idle room reaper stopped")
            raise
