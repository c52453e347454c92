from __future__ import annotations

from toasttv.domain.entities import MediaType
from toasttv.runtime.events import EventBroadcaster, queue_snapshot


def test_broadcast_reaches_every_subscriber():
    broadcaster = EventBroadcaster()
    a: list[dict] = []
    b: list[dict] = []
    broadcaster.subscribe(a.append)
    broadcaster.subscribe(b.append)

    broadcaster.broadcast({"type": "sessionEnd"})

    assert a == b == [{"type": "sessionEnd"}]


def test_unsubscribe_stops_delivery():
    broadcaster = EventBroadcaster()
    received: list[dict] = []
    unsubscribe = broadcaster.subscribe(received.append)

    unsubscribe()
    broadcaster.broadcast({"type": "sessionEnd"})

    assert received == []
    assert broadcaster.subscriber_count == 0


def test_failing_subscriber_is_dropped():
    broadcaster = EventBroadcaster()
    received: list[dict] = []

    def broken(event):
        raise BrokenPipeError("client went away")

    broadcaster.subscribe(broken)
    broadcaster.subscribe(received.append)

    broadcaster.broadcast({"type": "queueUpdate", "queue": []})
    broadcaster.broadcast({"type": "sessionEnd"})

    assert broadcaster.subscriber_count == 1
    assert [e["type"] for e in received] == ["queueUpdate", "sessionEnd"]


def test_playing_state_is_deduplicated_until_reset():
    broadcaster = EventBroadcaster()
    received: list[dict] = []
    broadcaster.subscribe(received.append)

    broadcaster.broadcast_playing_state(True)
    broadcaster.broadcast_playing_state(True)
    broadcaster.broadcast_playing_state(False)
    broadcaster.reset_playing_state()
    broadcaster.broadcast_playing_state(False)

    assert [e["type"] for e in received] == ["playing", "paused", "paused"]


def test_queue_snapshot_shape(item_factory):
    items = [item_factory(1, 60), item_factory(2, 30, MediaType.INTERLUDE, filename="bumper.mp4")]

    assert queue_snapshot(items) == [
        {"id": 1, "filename": "video_1.mp4", "isInterlude": False},
        {"id": 2, "filename": "bumper.mp4", "isInterlude": True},
    ]
