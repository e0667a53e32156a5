from __future__ import annotations

import pytest

from millserver.errors import ProtocolError
from millserver.messages import (
    CapturePiece,
    CreateRoom,
    ErrorEvent,
    JoinRoom,
    MovePiece,
    PlacePiece,
    encode_event,
    parse_action,
)


def test_parse_create_room_from_text() -> None:
    assert isinstance(parse_action('{"type": "create_room"}'), CreateRoom)


def test_parse_accepts_client_field_names() -> None:
    join = parse_action({"type": "join_room", "roomId": "abcde"})
    assert isinstance(join, JoinRoom)
    assert join.room_code == "abcde"
    assert parse_action({"type": "join_room", "roomCode": "QWERT"}).room_code == "QWERT"

    place = parse_action(b'{"type": "place_piece", "cellIndex": 4, "roomId": "ABCDE"}')
    assert isinstance(place, PlacePiece)
    assert place.index == 4

    move = parse_action({"type": "move_piece", "fromIndex": 0, "toIndex": 7})
    assert isinstance(move, MovePiece)
    assert (move.from_index, move.to_index) == (0, 7)

    capture = parse_action({"type": "capture_piece", "index": 13})
    assert isinstance(capture, CapturePiece)
    assert capture.index == 13


def test_unknown_type_is_protocol_error() -> None:
    with pytest.raises(ProtocolError, match="Unknown message type."):
        parse_action({"type": "resign"})


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        '{"index": 3}',
        '{"type": "place_piece"}',
        '{"type": "move_piece", "fromIndex": 1}',
        '{"type": "capture_piece", "index": "left"}',
        '{"type": "place_piece", "index": true}',
        '{"type": "place_piece", "index": 3.0}',
        '{"type": "place_piece", "index": "3"}',
        '{"type": "move_piece", "fromIndex": "0", "toIndex": 7}',
    ],
)
def test_malformed_input_is_protocol_error(raw: str) -> None:
    with pytest.raises(ProtocolError, match="Invalid message format.") as excinfo:
        parse_action(raw)
    assert excinfo.value.code == "protocol"


def test_error_event_encoding() -> None:
    payload = encode_event(ErrorEvent(message="Not your turn.", code="rule"))
    assert payload == {"type": "error", "message": "Not your turn.", "code": "rule"}
