from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

import events
from errors import InvalidMessage


class ClientMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CheckRoom(ClientMessage):
    type: Literal["check-room"] = events.CHECK_ROOM
    room_id: str = Field(alias="roomId")


class CreateRoom(ClientMessage):
    type: Literal["create-room"] = events.CREATE_ROOM
    room_id: str = Field(alias="roomId")


class JoinRoom(ClientMessage):
    type: Literal["join-room"] = events.JOIN_ROOM
    room_id: str = Field(alias="roomId")


class LeaveRoom(ClientMessage):
    type: Literal["leave-room"] = events.LEAVE_ROOM


class Offer(ClientMessage):
    type: Literal["offer"] = events.OFFER
    target: str
    sdp: Any = None


class Answer(ClientMessage):
    type: Literal["answer"] = events.ANSWER
    target: str
    sdp: Any = None


class IceCandidate(ClientMessage):
    type: Literal["ice-candidate"] = events.ICE_CANDIDATE
    target: str
    candidate: Any = None


class VideoStateChange(ClientMessage):
    type: Literal["video-state-change"] = events.VIDEO_STATE_CHANGE
    enabled: bool


class NoteMessage(ClientMessage):
    type: Literal["note-message"] = events.NOTE_MESSAGE
    room_id: str = Field(alias="roomId")
    payload: Any = None


InboundMessage = Annotated[
    Union[CheckRoom, CreateRoom, JoinRoom, LeaveRoom, Offer, Answer, IceCandidate, VideoStateChange, NoteMessage],
    Field(discriminator="type"),
]

inbound_adapter = TypeAdapter(InboundMessage)


def decode_message(raw: Union[str, bytes]) -> InboundMessage:
    """Decode one WebSocket frame into its message model, raising InvalidMessage on bad input."""
    try:
        return inbound_adapter.validate_json(raw)
    except ValidationError as e:
        problems = e.errors()
        detail = problems[0].get("msg", "invalid message") if problems else "invalid message"
        raise InvalidMessage(f"Could not decode message: {detail}") from e


def encode_event(event: str, payload: dict) -> dict:
    message = {"type": event}
    message.update(payload)
    return message
