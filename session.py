from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from errors import AlreadyInRoom, SessionClosed
from logging_config import get_logger

logger = get_logger(__name__)


class SessionState(str, Enum):
    UNJOINED = "unjoined"
    JOINED = "joined"
    LEFT = "left"
    DISCONNECTED = "disconnected"


TERMINAL_STATES = (SessionState.LEFT, SessionState.DISCONNECTED)


def new_connection_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Session:
    """One connected peer.

    The room is set at most once. A session that leaves its room is expected to
    disconnect rather than join another one, so LEFT and DISCONNECTED are terminal.
    """

    id: str = field(default_factory=new_connection_id)
    room_id: Optional[str] = None
    video_enabled: bool = True
    state: SessionState = SessionState.UNJOINED
    connected_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def is_closed(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def active_room(self) -> Optional[str]:
        return self.room_id if self.state == SessionState.JOINED else None

    def check_can_join(self, room_id: str):
        """Raise if joining `room_id` would move this session to a second room."""
        if self.is_closed:
            raise SessionClosed(f"Connection {self.id} is {self.state.value}")
        if self.state == SessionState.JOINED and self.room_id != room_id:
            raise AlreadyInRoom(self.room_id)

    def mark_joined(self, room_id: str):
        """Record a successful join. Callers run check_can_join before touching the registry."""
        if self.state == SessionState.UNJOINED:
            logger.debug(f"Session {self.id}: {self.state.value} -> joined ({room_id})")
            self.video_enabled = True
        self.room_id = room_id
        self.state = SessionState.JOINED

    def close(self, state: SessionState) -> bool:
        """Move to a terminal state. Returns False if the session was already closed."""
        if state not in TERMINAL_STATES:
            raise ValueError(f"{state} is not a terminal session state")
        if self.is_closed:
            return False
        logger.debug(f"Session {self.id}: {self.state.value} -> {state.value}")
        self.state = state
        return True
