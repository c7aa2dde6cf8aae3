from __future__ import annotations

from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel, Field


# ---- client -> server ----

class JoinRoomIn(BaseModel):
    type: Literal["join-room"] = "join-room"
    roomId: str
    userName: Optional[str] = None


class LeaveRoomIn(BaseModel):
    type: Literal["leave-room"] = "leave-room"
    roomId: str


class OfferIn(BaseModel):
    type: Literal["offer"] = "offer"
    target: str = Field(..., min_length=1)
    offer: Any = None


class AnswerIn(BaseModel):
    type: Literal["answer"] = "answer"
    target: str = Field(..., min_length=1)
    answer: Any = None


class IceCandidateIn(BaseModel):
    type: Literal["ice-candidate"] = "ice-candidate"
    target: str = Field(..., min_length=1)
    candidate: Any = None


class ConnectionStatusIn(BaseModel):
    type: Literal["connection-status"] = "connection-status"
    roomId: str
    status: str
    targetUserId: Optional[str] = None


ClientToServer = Union[JoinRoomIn, LeaveRoomIn, OfferIn, AnswerIn, IceCandidateIn, ConnectionStatusIn]


# ---- server -> clients ----

class UserInfo(BaseModel):
    id: str
    name: str


class ConnectedOut(BaseModel):
    type: Literal["connected"] = "connected"
    connectionId: str


class RoomJoinedOut(BaseModel):
    type: Literal["room-joined"] = "room-joined"
    roomId: str
    users: List[UserInfo] = []


class UserJoinedOut(BaseModel):
    type: Literal["user-joined"] = "user-joined"
    id: str
    name: str


class UserLeftOut(BaseModel):
    type: Literal["user-left"] = "user-left"
    connectionId: str


class OfferOut(BaseModel):
    type: Literal["offer"] = "offer"
    offer: Any = None
    caller: str


class AnswerOut(BaseModel):
    type: Literal["answer"] = "answer"
    answer: Any = None
    answerer: str


class IceCandidateOut(BaseModel):
    type: Literal["ice-candidate"] = "ice-candidate"
    candidate: Any = None
    sender: str


class ErrorOut(BaseModel):
    type: Literal["error"] = "error"
    message: str
