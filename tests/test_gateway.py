import asyncio


def test_send_to_unknown_connection_is_dropped(transport):
    assert asyncio.run(transport.send("ghost", "offer", {"sdp": "X"})) is False


def test_broadcast_excludes_sender_and_skips_broken_sockets(transport, connect):
    sender, listener, broken = connect(), connect(), connect()
    for peer in (sender, listener, broken):
        transport.subscribe(peer.id, "abc")
    broken.ws.broken = True

    delivered = asyncio.run(transport.broadcast("abc", "user-joined", {"id": "x"}, exclude=sender.id))

    assert delivered == 1
    assert sender.ws.sent == []
    assert listener.ws.sent == [{"type": "user-joined", "id": "x"}]
    assert not transport.is_connected(broken.id)
    assert transport.subscribers("abc") == {sender.id, listener.id}


def test_unregister_drops_subscriptions(transport, connect):
    peer = connect()
    transport.subscribe(peer.id, "abc")
    assert transport.is_connected(peer.id)

    transport.unregister(peer.id)
    transport.unregister(peer.id)

    assert not transport.is_connected(peer.id)
    assert transport.subscribers("abc") == set()
    assert asyncio.run(transport.broadcast("abc", "user-joined", {"id": "x"})) == 0


def test_failed_send_forgets_the_connection(transport, connect):
    peer = connect()
    peer.ws.broken = True

    assert asyncio.run(transport.send(peer.id, "offer", {"sdp": "X"})) is False
    assert not transport.is_connected(peer.id)
    assert asyncio.run(transport.send(peer.id, "offer", {"sdp": "X"})) is False
