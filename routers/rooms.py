from fastapi import APIRouter, Depends, Request

from backend import SignalingBackend
from logging_config import get_logger
from schemas.rooms import (
    CreateRoomResponse,
    DebugRoom,
    DebugRoomsResponse,
    DebugUser,
    RoomLookupResponse,
    RoomUser,
)

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/api", tags=["rooms"])


def get_backend(request: Request) -> SignalingBackend:
    return request.app.state.backend


@rooms_router.post("/create-room", response_model=CreateRoomResponse)
async def create_room(request: Request, backend: SignalingBackend = Depends(get_backend)):
    client_host = request.client.host if request.client else "unknown"
    room_id = backend.create_room()
    logger.info(f"Room {room_id} created on request from {client_host}")
    return CreateRoomResponse(roomId=room_id)


@rooms_router.get("/room/{room_id}", response_model=RoomLookupResponse, response_model_exclude_none=True)
async def get_room(room_id: str, backend: SignalingBackend = Depends(get_backend)):
    """
    Tell a client whether a room can be joined, and who is already in it.

    Unknown rooms are not an error: the response is just ``{"exists": false}``.
    """
    lookup = backend.room_exists(room_id)
    if not lookup.exists:
        logger.debug(f"Room lookup for {room_id}: not found")
        return RoomLookupResponse(exists=False)

    logger.debug(f"Room lookup for {room_id}: {lookup.participant_count} users")
    return RoomLookupResponse(
        exists=True,
        userCount=lookup.participant_count,
        users=[RoomUser(id=conn_id, name=name) for conn_id, name in lookup.participants],
    )


@rooms_router.get("/debug/rooms", response_model=DebugRoomsResponse)
async def debug_rooms(backend: SignalingBackend = Depends(get_backend)):
    rooms = backend.debug_snapshot()
    return DebugRoomsResponse(
        rooms=[
            DebugRoom(
                id=room.room_id,
                userCount=len(room.participants),
                users=[DebugUser(name=p.display_name, joinedAt=p.joined_at) for p in room.participants],
                createdAt=room.created_at,
                connectionAttempts=room.connection_attempts,
                successfulConnections=room.successful_connections,
            )
            for room in rooms
        ],
        totalRooms=len(rooms),
    )
