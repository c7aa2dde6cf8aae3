class SignalingError(Exception):
    """Base class for errors that abort a single signalling operation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RoomNotFound(SignalingError):
    def __init__(self, room_id: str):
        super().__init__("Room not found")
        self.room_id = room_id


class TargetNotFound(SignalingError):
    def __init__(self, target_id: str):
        super().__init__(f"Target user not found: {target_id}")
        self.target_id = target_id


class NotInRoom(SignalingError):
    def __init__(self, connection_id: str):
        super().__init__(f"Connection {connection_id} is not in a room")
        self.connection_id = connection_id
