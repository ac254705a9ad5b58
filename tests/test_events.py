import asyncio

from playerhub.events import INVALID_ROOM_KEY, UNKNOWN_EVENT, handle_ws_message
from playerhub.schemas import ClientEvent


def event(type_, data=None, ack=None):
    return ClientEvent(type=type_, data=data, ack=ack)


async def test_set_then_get(hub, make_connection):
    conn = make_connection()
    ack = await handle_ws_message(hub, conn, event("shared:set", {"key": "room:ABCDEF", "value": "hello"}, 1))
    assert ack.payload() == {"ok": True}

    ack = await handle_ws_message(hub, conn, event("shared:get", {"key": "room:ABCDEF"}, 2))
    assert ack.payload() == {"ok": True, "value": "hello"}


async def test_get_of_unset_key_returns_null_value(hub, make_connection):
    ack = await handle_ws_message(hub, make_connection(), event("shared:get", {"key": "room:ZZZZZZ"}))
    assert ack.payload() == {"ok": True, "value": None}


async def test_invalid_key_mutates_nothing(hub, make_connection):
    watcher = make_connection()
    await handle_ws_message(hub, watcher, event("room:subscribe", "room:ABCDEF"))

    ack = await handle_ws_message(hub, watcher, event("shared:set", {"key": "room:abcdef", "value": "x"}))

    assert ack.payload() == {"ok": False, "error": INVALID_ROOM_KEY}
    assert len(hub.shared) == 0
    assert watcher.sent == []
    assert not hub.shared_flusher.pending


async def test_get_with_invalid_key_fails(hub, make_connection):
    ack = await handle_ws_message(hub, make_connection(), event("shared:get", {"key": "rooms:ABCDEF"}))
    assert ack.ok is False
    assert ack.error == INVALID_ROOM_KEY


async def test_set_is_pending_persistence_before_subscribers_see_it(hub):
    observed = []

    class Watcher:
        async def send_json(self, payload):
            observed.append((payload, hub.shared_flusher.pending))

    watcher = Watcher()
    await handle_ws_message(hub, watcher, event("room:subscribe", {"key": "room:ABCDEF"}))
    await handle_ws_message(hub, watcher, event("shared:set", {"key": "room:ABCDEF", "value": None}))

    assert observed == [({"type": "shared:update", "data": {"key": "room:ABCDEF", "value": ""}}, True)]
    hub.shared_flusher.cancel()


async def test_updates_are_isolated_per_room(hub, make_connection):
    a, b = make_connection(), make_connection()
    await handle_ws_message(hub, a, event("room:subscribe", "room:AAAAAA"))
    await handle_ws_message(hub, b, event("room:subscribe", "room:BBBBBB"))

    await handle_ws_message(hub, a, event("shared:set", {"key": "room:BBBBBB", "value": "for b"}))

    assert a.sent == []
    assert b.sent[0]["data"] == {"key": "room:BBBBBB", "value": "for b"}
    hub.shared_flusher.cancel()


async def test_unsubscribe_stops_updates(hub, make_connection):
    conn = make_connection()
    await handle_ws_message(hub, conn, event("room:subscribe", "room:AAAAAA"))
    await handle_ws_message(hub, conn, event("room:unsubscribe", "room:AAAAAA"))
    await handle_ws_message(hub, conn, event("shared:set", {"key": "room:AAAAAA", "value": "x"}))
    assert conn.sent == []
    hub.shared_flusher.cancel()


async def test_unknown_events(hub, make_connection):
    conn = make_connection()
    assert await handle_ws_message(hub, conn, event("chat:send", {})) is None
    ack = await handle_ws_message(hub, conn, event("chat:send", {}, ack=9))
    assert ack.payload() == {"ok": False, "error": UNKNOWN_EVENT}


async def test_many_sets_flush_once_with_last_value(hub, make_connection, tmp_path):
    conn = make_connection()
    for i in range(10):
        await handle_ws_message(hub, conn, event("shared:set", {"key": "room:ABCDEF", "value": f"v{i}"}))
    await asyncio.sleep(0.2)
    await hub.shared_flusher.wait_idle()
    assert hub.shared_flusher.flush_count == 1
    assert (tmp_path / "shared-state.json").read_text(encoding="utf-8").count("v9") == 1
