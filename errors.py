class SignalingError(Exception):
    """Base error for a single request; reported to the originating connection only."""

    code = "signaling-error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class RoomNotFound(SignalingError):
    code = "room-not-found"

    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} not found")
        self.room_id = room_id


class InvalidRoomId(SignalingError):
    code = "invalid-room-id"


class AlreadyInRoom(SignalingError):
    code = "already-in-room"

    def __init__(self, room_id: str):
        super().__init__(f"Connection already joined room {room_id}")
        self.room_id = room_id


class SessionClosed(SignalingError):
    code = "session-closed"


class InvalidMessage(SignalingError):
    code = "invalid-message"
