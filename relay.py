from typing import List

import events
from backend import Departure, RoomRegistry, room_registry
from errors import RoomNotFound, SignalingError
from gateway import ConnectionGateway, gateway
from schemas.signaling import (
    Answer,
    CheckRoom,
    CreateRoom,
    IceCandidate,
    InboundMessage,
    JoinRoom,
    LeaveRoom,
    NoteMessage,
    Offer,
    VideoStateChange,
)
from session import Session, SessionState
from logging_config import get_logger

logger = get_logger(__name__)


class SignalingRelay:
    """Routes decoded client messages to the right recipients.

    Holds no state of its own: room membership lives in the registry and live
    sockets in the gateway. Registry calls always return before anything is sent.
    """

    def __init__(self, registry: RoomRegistry, transport: ConnectionGateway):
        self.registry = registry
        self.transport = transport

    async def dispatch(self, session: Session, message: InboundMessage):
        logger.debug(f"Routing {message.type} from {session.id}")
        try:
            if isinstance(message, CheckRoom):
                await self.check_room(session, message)
            elif isinstance(message, CreateRoom):
                await self.create_room(session, message)
            elif isinstance(message, JoinRoom):
                await self.join_room(session, message)
            elif isinstance(message, LeaveRoom):
                await self.leave_room(session)
            elif isinstance(message, (Offer, Answer)):
                await self.relay_description(session, message)
            elif isinstance(message, IceCandidate):
                await self.relay_candidate(session, message)
            elif isinstance(message, VideoStateChange):
                await self.change_video_state(session, message)
            elif isinstance(message, NoteMessage):
                await self.relay_note(session, message)
            else:
                raise TypeError(f"Unhandled message type: {type(message).__name__}")
        except RoomNotFound as e:
            logger.info(f"Room {e.room_id} not found for {session.id}")
            await self.transport.send(session.id, events.ROOM_NOT_FOUND, {})
        except SignalingError as e:
            await self.report_error(session, e)

    async def report_error(self, session: Session, error: SignalingError):
        logger.warning(f"Rejected request from {session.id}: {error.code} ({error.message})")
        await self.transport.send(session.id, events.ERROR, {"code": error.code, "message": error.message})

    async def check_room(self, session: Session, message: CheckRoom):
        exists = self.registry.room_exists(message.room_id)
        await self.transport.send(session.id, events.ROOM_EXISTS, {"exists": exists})

    async def create_room(self, session: Session, message: CreateRoom):
        room_id = self.registry.create_room(message.room_id)
        await self.transport.send(session.id, events.ROOM_CREATED, {"roomId": room_id})

    async def join_room(self, session: Session, message: JoinRoom):
        room_id = message.room_id
        session.check_can_join(room_id)
        result = self.registry.join_room(room_id, session.id)
        session.mark_joined(room_id)
        self.transport.subscribe(session.id, room_id)

        await self.transport.send(session.id, events.ALL_USERS, {"ids": list(result.other_members)})
        await self.transport.send(session.id, events.INITIAL_VIDEO_STATES, {"states": result.video_states})
        # re-joins are announced too
        await self.transport.broadcast(room_id, events.USER_JOINED, {"id": session.id}, exclude=session.id)

    async def leave_room(self, session: Session):
        if session.state != SessionState.JOINED:
            logger.debug(f"Ignoring leave-room from {session.id}: session is {session.state.value}")
            return
        await self.close_session(session, SessionState.LEFT)

    async def disconnect(self, session: Session):
        await self.close_session(session, SessionState.DISCONNECTED)

    async def close_session(self, session: Session, state: SessionState):
        """Single cleanup path for leave and disconnect; runs its effects once per session."""
        if not session.close(state):
            logger.debug(f"Session {session.id} already closed, skipping cleanup")
            return
        departures = self.registry.leave(session.id)
        for departure in departures:
            self.transport.unsubscribe(session.id, departure.room_id)
        await self.notify_departures(session, departures)

    async def notify_departures(self, session: Session, departures: List[Departure]):
        for departure in departures:
            if departure.room_closed:
                continue
            await self.transport.broadcast(departure.room_id, events.USER_DISCONNECTED, {"id": session.id}, exclude=session.id)

    async def relay_description(self, session: Session, message):
        # offer and answer share a shape; the event name is the message type
        delivered = await self.transport.send(message.target, message.type, {"sdp": message.sdp, "caller": session.id})
        if not delivered:
            logger.debug(f"Dropped {message.type} from {session.id}: target {message.target} is gone")

    async def relay_candidate(self, session: Session, message: IceCandidate):
        delivered = await self.transport.send(message.target, events.ICE_CANDIDATE, {"candidate": message.candidate, "from": session.id})
        if not delivered:
            logger.debug(f"Dropped ice-candidate from {session.id}: target {message.target} is gone")

    async def change_video_state(self, session: Session, message: VideoStateChange):
        room_id = session.active_room
        if room_id is None:
            logger.debug(f"Ignoring video state change from {session.id}: no active room")
            return
        if not self.registry.set_video_state(room_id, session.id, message.enabled):
            return
        session.video_enabled = message.enabled
        logger.info(f"User {session.id} in room {room_id} changed video state to: {message.enabled}")
        await self.transport.broadcast(
            room_id,
            events.REMOTE_VIDEO_STATE_CHANGE,
            {"userId": session.id, "enabled": message.enabled},
            exclude=session.id,
        )

    async def relay_note(self, session: Session, message: NoteMessage):
        await self.transport.broadcast(
            message.room_id,
            events.REMOTE_NOTE_MESSAGE,
            {"userId": session.id, "payload": message.payload},
            exclude=session.id,
        )


relay = SignalingRelay(room_registry, gateway)
