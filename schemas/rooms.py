from pydantic import BaseModel
from typing import Dict, List, Optional


class CreateRoomRequest(BaseModel):
    room_id: str

class CreateRoomResponse(BaseModel):
    room_id: str
    created: bool

class RoomDetailsResponse(BaseModel):
    room_id: str
    exists: bool
    member_count: int
    members: List[str]
    video_states: Dict[str, bool]
    created_at: Optional[str] = None

class HealthResponse(BaseModel):
    ok: bool
    service: str
    rooms: int
