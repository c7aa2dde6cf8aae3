from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional


class CreateRoomResponse(BaseModel):
    roomId: str

class RoomUser(BaseModel):
    id: str
    name: str

class RoomLookupResponse(BaseModel):
    exists: bool
    userCount: Optional[int] = None
    users: Optional[List[RoomUser]] = None

class DebugUser(BaseModel):
    name: str
    joinedAt: datetime

class DebugRoom(BaseModel):
    id: str
    userCount: int
    users: List[DebugUser]
    createdAt: datetime
    connectionAttempts: int
    successfulConnections: int

class DebugRoomsResponse(BaseModel):
    rooms: List[DebugRoom]
    totalRooms: int

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    activeRooms: int
    totalUsers: int
