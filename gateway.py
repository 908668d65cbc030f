import asyncio
from typing import Dict, Optional, Set

from fastapi import WebSocket

from schemas.signaling import encode_event
from session import Session
from logging_config import get_logger

logger = get_logger(__name__)


class ConnectionGateway:
    """Tracks live WebSocket connections and their room subscriptions.

    Sends are best effort: a target that is gone or fails mid-send is dropped
    and logged, never reported back to the sender.
    """

    def __init__(self):
        # Format: {connection_id: websocket}
        self._connections: Dict[str, WebSocket] = {}
        # Format: {room_id: {connection_id, ...}}
        self._subscriptions: Dict[str, Set[str]] = {}

    def register(self, websocket: WebSocket) -> Session:
        session = Session()
        self._connections[session.id] = websocket
        logger.debug(f"Registered connection {session.id} ({len(self._connections)} connected)")
        return session

    def unregister(self, connection_id: str):
        """Forget a connection and drop it from every room it was subscribed to."""
        self._connections.pop(connection_id, None)
        for room_id in [room for room, members in self._subscriptions.items() if connection_id in members]:
            self.unsubscribe(connection_id, room_id)
        logger.debug(f"Unregistered connection {connection_id} ({len(self._connections)} connected)")

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def subscribe(self, connection_id: str, room_id: str):
        self._subscriptions.setdefault(room_id, set()).add(connection_id)
        logger.debug(f"Subscribed {connection_id} to room {room_id}")

    def unsubscribe(self, connection_id: str, room_id: str):
        members = self._subscriptions.get(room_id)
        if not members:
            return
        members.discard(connection_id)
        if not members:
            del self._subscriptions[room_id]
        logger.debug(f"Unsubscribed {connection_id} from room {room_id}")

    def subscribers(self, room_id: str) -> Set[str]:
        return set(self._subscriptions.get(room_id, ()))

    async def send(self, connection_id: str, event: str, payload: dict) -> bool:
        websocket = self._connections.get(connection_id)
        if websocket is None:
            logger.debug(f"Dropping {event} for {connection_id}: not connected")
            return False
        try:
            await websocket.send_json(encode_event(event, payload))
            return True
        except Exception as e:
            logger.warning(f"Error sending {event} to connection {connection_id}: {e}")
            self.unregister(connection_id)
            return False

    async def broadcast(self, room_id: str, event: str, payload: dict, exclude: Optional[str] = None) -> int:
        targets = [conn_id for conn_id in self.subscribers(room_id) if conn_id != exclude]
        if not targets:
            logger.debug(f"No recipients for {event} in room {room_id}")
            return 0

        results = await asyncio.gather(*(self.send(conn_id, event, payload) for conn_id in targets), return_exceptions=True)
        delivered = sum(1 for result in results if result is True)
        logger.debug(f"Broadcast {event} to {delivered}/{len(targets)} connections in room {room_id}")
        return delivered


gateway = ConnectionGateway()
