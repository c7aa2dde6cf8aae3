from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class ConnectionRecord:
    connection_id: str
    room_id: str
    display_name: str


class ConnectionRegistry:
    """Side table from a live connection id to the room it is joined to."""

    def __init__(self, lock):
        self._lock = lock
        self._records: Dict[str, ConnectionRecord] = {}

    def get(self, connection_id: str) -> Optional[ConnectionRecord]:
        with self._lock:
            return self._records.get(connection_id)

    def room_of(self, connection_id: str) -> Optional[str]:
        record = self.get(connection_id)
        return record.room_id if record else None

    def bind(self, connection_id: str, room_id: str, display_name: str) -> ConnectionRecord:
        record = ConnectionRecord(connection_id=connection_id, room_id=room_id, display_name=display_name)
        with self._lock:
            self._records[connection_id] = record
        return record

    def unbind(self, connection_id: str) -> Optional[ConnectionRecord]:
        with self._lock:
            return self._records.pop(connection_id, None)

    def snapshot(self) -> Dict[str, ConnectionRecord]:
        with self._lock:
            return dict(self._records)

    def __contains__(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
