import asyncio

import pytest

from backend import RoomRegistry
from gateway import ConnectionGateway
from relay import SignalingRelay
from schemas.signaling import inbound_adapter


class FakeWebSocket:
    """Stands in for a Starlette WebSocket: records every JSON frame sent to it."""

    def __init__(self):
        self.sent = []
        self.broken = False

    async def send_json(self, data):
        if self.broken:
            raise RuntimeError("socket is closed")
        self.sent.append(data)

    def of_type(self, event):
        return [message for message in self.sent if message["type"] == event]

    def types(self):
        return [message["type"] for message in self.sent]

    def clear(self):
        self.sent.clear()


class Peer:
    def __init__(self, session, websocket):
        self.session = session
        self.ws = websocket

    @property
    def id(self):
        return self.session.id


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def transport():
    return ConnectionGateway()


@pytest.fixture
def signaling(registry, transport):
    return SignalingRelay(registry, transport)


@pytest.fixture
def connect(transport):
    def _connect():
        websocket = FakeWebSocket()
        session = transport.register(websocket)
        return Peer(session, websocket)

    return _connect


@pytest.fixture
def send(signaling):
    """Dispatch a decoded message from a peer, as the WebSocket endpoint would."""
    def _send(peer, message: dict):
        asyncio.run(signaling.dispatch(peer.session, inbound_adapter.validate_python(message)))

    return _send


@pytest.fixture
def disconnect(signaling, transport):
    def _disconnect(peer):
        transport.unregister(peer.id)
        asyncio.run(signaling.disconnect(peer.session))

    return _disconnect
