from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import CreateRoomRequest, CreateRoomResponse, RoomDetailsResponse
from backend import room_registry
from errors import InvalidRoomId
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.post("", response_model=CreateRoomResponse)
async def create_room(room: CreateRoomRequest, request: Request):
    # Same semantics as the `create-room` socket message: creating an existing room is not an error.
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"Room creation request for {room.room_id} from {client_host}")

    existed = room_registry.room_exists(room.room_id)
    try:
        room_id = room_registry.create_room(room.room_id)
    except InvalidRoomId as e:
        logger.warning(f"Room creation failed: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)

    return CreateRoomResponse(room_id=room_id, created=not existed)


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str):
    """
    Get room details.

    Returns:
    - room_id: Room identifier
    - exists: Always true (404 otherwise)
    - member_count: Number of connections currently in the room
    - members: Connection ids in join order
    - video_states: Connection id -> video enabled
    - created_at: Room creation timestamp
    """
    room = room_registry.get_room(room_id)
    if room is None:
        logger.debug(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    logger.debug(f"Room details retrieved for {room_id}: {len(room.members)} members")
    return RoomDetailsResponse(
        room_id=room.room_id,
        exists=True,
        member_count=len(room.members),
        members=list(room.members),
        video_states=room.video_states,
        created_at=room.created_at,
    )
