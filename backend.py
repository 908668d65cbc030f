import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from constants import MAX_ROOM_ID_LENGTH
from errors import InvalidRoomId, RoomNotFound
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Room:
    room_id: str
    # connection id -> video enabled, in join order. Doubles as the member set.
    members: Dict[str, bool] = field(default_factory=dict)
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass(frozen=True)
class JoinResult:
    room_id: str
    other_members: Tuple[str, ...]
    video_states: Dict[str, bool]
    added: bool


@dataclass(frozen=True)
class Departure:
    room_id: str
    remaining_members: Tuple[str, ...]
    room_closed: bool


@dataclass(frozen=True)
class RoomSnapshot:
    room_id: str
    members: Tuple[str, ...]
    video_states: Dict[str, bool]
    created_at: str


def validate_room_id(room_id) -> str:
    if not isinstance(room_id, str) or not room_id.strip():
        raise InvalidRoomId("Room id must be a non-empty string")
    if len(room_id) > MAX_ROOM_ID_LENGTH:
        raise InvalidRoomId(f"Room id must be at most {MAX_ROOM_ID_LENGTH} characters")
    return room_id


class RoomRegistry:
    """In-memory store of rooms and their members.

    Every public method runs under one lock, so a join's snapshot and insert, or a
    leave's removal and room deletion, are seen by other callers as a single step.
    Nothing here awaits or does I/O; callers deliver messages after the call returns.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        # connection id -> room id, kept in step with Room.members
        self._member_rooms: Dict[str, str] = {}
        logger.info("Initializing in-memory RoomRegistry")

    def room_exists(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def create_room(self, room_id: str) -> str:
        validate_room_id(room_id)
        with self._lock:
            if room_id in self._rooms:
                logger.warning(f"Attempted to create room {room_id} which already exists")
                return room_id
            self._rooms[room_id] = Room(room_id=room_id)
        logger.info(f"Room {room_id} created (not joined yet)")
        return room_id

    def join_room(self, room_id: str, connection_id: str) -> JoinResult:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                logger.debug(f"Join failed: room {room_id} not found")
                raise RoomNotFound(room_id)

            added = connection_id not in room.members
            if added:
                room.members[connection_id] = True
                self._member_rooms[connection_id] = room_id

            others = tuple(member for member in room.members if member != connection_id)
            video_states = {member: room.members[member] for member in others}
            member_count = len(room.members)

        if added:
            logger.info(f"User {connection_id} joined room {room_id} ({member_count} members)")
        else:
            logger.debug(f"User {connection_id} re-joined room {room_id}, membership unchanged")
        return JoinResult(room_id=room_id, other_members=others, video_states=video_states, added=added)

    def set_video_state(self, room_id: str, connection_id: str, enabled: bool) -> bool:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or connection_id not in room.members:
                logger.debug(f"Ignoring video state for {connection_id}: not a member of room {room_id}")
                return False
            room.members[connection_id] = bool(enabled)
        logger.debug(f"User {connection_id} in room {room_id} set video enabled={enabled}")
        return True

    def leave(self, connection_id: str) -> List[Departure]:
        """Remove a connection from whichever room lists it. Unknown ids are a no-op."""
        departures = []
        with self._lock:
            room_id = self._member_rooms.pop(connection_id, None)
            room = self._rooms.get(room_id) if room_id is not None else None
            if room is not None and connection_id in room.members:
                del room.members[connection_id]
                closed = not room.members
                if closed:
                    del self._rooms[room_id]
                departures.append(Departure(room_id=room_id, remaining_members=tuple(room.members), room_closed=closed))

        for departure in departures:
            logger.info(f"User {connection_id} left room {departure.room_id}")
            if departure.room_closed:
                logger.info(f"Room {departure.room_id} has been deleted (empty)")
        return departures

    def get_room(self, room_id: str) -> Optional[RoomSnapshot]:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return None
            return RoomSnapshot(
                room_id=room.room_id,
                members=tuple(room.members),
                video_states=dict(room.members),
                created_at=room.created_at,
            )

    def room_of(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._member_rooms.get(connection_id)


room_registry = RoomRegistry()
