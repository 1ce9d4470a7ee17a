"""Tests for the wire format of room messages."""

import orjson

from aiosyncbeat.codec import decode_message, encode_message
from aiosyncbeat.models import (
    JoinMessage,
    LeaveMessage,
    Member,
    Platform,
    PlaybackCursor,
    RequestSyncMessage,
    SyncPlaybackMessage,
    Track,
    UpdateQueueMessage,
    UpdateQueuePayload,
)

TRACK = Track(
    id="t1",
    source_url="https://youtu.be/dQw4w9WgXcQ",
    platform=Platform.YOUTUBE,
    title="YouTube Track dQw4w9WgXcQ",
    thumbnail_ref="https://img.youtube.com/vi/dQw4w9WgXcQ/0.jpg",
    added_by="Bob",
)


def test_envelope_shape() -> None:
    message = JoinMessage(sender_id="m1", payload=Member(id="m1", display_name="Bob"))

    raw = orjson.loads(encode_message(message))

    assert raw == {
        "type": "JOIN",
        "sender_id": "m1",
        "payload": {"id": "m1", "display_name": "Bob", "is_host": False},
    }


def test_empty_payload_messages() -> None:
    assert orjson.loads(encode_message(LeaveMessage(sender_id="m1")))["payload"] == {}
    raw = orjson.loads(encode_message(RequestSyncMessage(sender_id="m1")))
    assert raw["type"] == "REQUEST_SYNC"
    assert raw["payload"] == {}


def test_update_queue_payload() -> None:
    message = UpdateQueueMessage(sender_id="m1", payload=UpdateQueuePayload(queue=[TRACK]))

    raw = orjson.loads(encode_message(message))

    assert raw["type"] == "UPDATE_QUEUE"
    assert raw["payload"].get("members") is None
    entry = raw["payload"]["queue"][0]
    assert entry["platform"] == "youtube"
    assert entry["added_by"] == "Bob"
    assert entry.get("duration_seconds") is None


def test_decode_each_kind() -> None:
    cursor = PlaybackCursor(
        is_playing=True, current_track_id="t1", position_seconds=12.5, observed_at=1_000.0
    )
    host = Member(id="h", display_name="Alice", is_host=True)
    messages = [
        JoinMessage(sender_id="m1", payload=Member(id="m1", display_name="Bob")),
        LeaveMessage(sender_id="m1"),
        UpdateQueueMessage(
            sender_id="h", payload=UpdateQueuePayload(queue=[TRACK], members=[host])
        ),
        SyncPlaybackMessage(sender_id="h", payload=cursor),
        RequestSyncMessage(sender_id="m1"),
    ]

    for message in messages:
        assert decode_message(encode_message(message)) == message


def test_decode_bytes() -> None:
    data = b'{"type":"REQUEST_SYNC","sender_id":"m9","payload":{}}'

    assert decode_message(data) == RequestSyncMessage(sender_id="m9")


def test_decode_defaults_optional_fields() -> None:
    message = decode_message(
        '{"type":"JOIN","sender_id":"m2","payload":{"id":"m2","display_name":"Eve"}}'
    )

    assert isinstance(message, JoinMessage)
    assert message.payload == Member(id="m2", display_name="Eve", is_host=False)


def test_unknown_type_is_ignored() -> None:
    assert decode_message('{"type":"CHAT","sender_id":"m1","payload":{"text":"hi"}}') is None


def test_garbage_is_ignored() -> None:
    assert decode_message("not json") is None
    assert decode_message("[1, 2, 3]") is None
    assert decode_message('"JOIN"') is None
    assert decode_message('{"sender_id":"m1"}') is None


def test_malformed_payload_is_ignored() -> None:
    assert decode_message('{"type":"SYNC_PLAYBACK","sender_id":"h","payload":"soon"}') is None
    assert decode_message('{"type":"JOIN","payload":{"id":"m1","display_name":"Bob"}}') is None


def test_non_string_type_is_ignored() -> None:
    assert decode_message('{"type": [], "payload": {}, "sender_id": "x"}') is None
    assert decode_message('{"type": {"kind": "JOIN"}, "payload": {}, "sender_id": "x"}') is None
    assert decode_message('{"type": 3, "payload": {}, "sender_id": "x"}') is None
