from __future__ import annotations

from typing import Iterator

import pytest

fastapi = pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from millserver.api import create_app
from millserver.config import Settings


@pytest.fixture()
def client() -> Iterator[TestClient]:
    app = create_app(Settings())
    # One portal for every socket so all connections share the app's event loop.
    with TestClient(app) as test_client:
        yield test_client


def open_room(alice) -> str:
    alice.send_json({"type": "create_room"})
    created = alice.receive_json()
    assert created["type"] == "room_created"
    assert created["playerId"] == 1
    return created["roomId"]


def join_room(bob, alice, code: str) -> None:
    bob.send_json({"type": "join_room", "roomId": code.lower()})
    joined = bob.receive_json()
    assert joined["type"] == "joined_room"
    assert joined["playerId"] == 2
    assert bob.receive_json()["type"] == "game_start"
    assert alice.receive_json()["type"] == "game_start"


def test_health_reports_room_count(client: TestClient) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "rooms": 0}


def test_players_exchange_updates(client: TestClient) -> None:
    with client.websocket_connect("/ws") as alice:
        code = open_room(alice)
        with client.websocket_connect("/ws") as bob:
            join_room(bob, alice, code)

            alice.send_json({"type": "place_piece", "index": 1})
            for ws in (alice, bob):
                update = ws.receive_json()
                assert update["type"] == "update"
                assert update["currentPlayer"] == 2
                assert update["board"][1] == 1

            bob.send_json({"type": "place_piece", "cellIndex": 9})
            for ws in (alice, bob):
                update = ws.receive_json()
                assert update["piecesPlaced"] == [1, 1]
                assert update["phase"] == "placement"

            res = client.get(f"/rooms/{code.lower()}")
            assert res.status_code == 200
            assert res.json()["board"][9] == 2


def test_capture_prompt_goes_to_actor_only(client: TestClient) -> None:
    with client.websocket_connect("/ws") as alice:
        code = open_room(alice)
        with client.websocket_connect("/ws") as bob:
            join_room(bob, alice, code)
            for one, two in [(2, 9), (3, 13)]:
                alice.send_json({"type": "place_piece", "index": one})
                alice.receive_json()
                bob.receive_json()
                bob.send_json({"type": "place_piece", "index": two})
                alice.receive_json()
                bob.receive_json()

            alice.send_json({"type": "place_piece", "index": 4})
            pending = alice.receive_json()
            assert pending["type"] == "line_formed_capture_pending"
            assert pending["capturablePieces"] == [9, 13]
            notice = bob.receive_json()
            assert notice["type"] == "opponent_awaiting_capture"
            assert "capturablePieces" not in notice

            bob.send_json({"type": "place_piece", "index": 5})
            error = bob.receive_json()
            assert error["type"] == "error"
            assert error["code"] == "rule"

            alice.send_json({"type": "capture_piece", "index": 13})
            for ws in (alice, bob):
                update = ws.receive_json()
                assert update["lastMove"]["capturedIndex"] == 13
                assert update["currentPlayer"] == 2


def test_rejections_reach_sender_only(client: TestClient) -> None:
    with client.websocket_connect("/ws") as alice:
        alice.send_text("not json")
        assert alice.receive_json() == {
            "type": "error",
            "message": "Invalid message format.",
            "code": "protocol",
        }
        alice.send_json({"type": "dance"})
        assert alice.receive_json()["message"] == "Unknown message type."
        alice.send_json({"type": "place_piece", "index": 0})
        assert alice.receive_json()["message"] == "Not in a room."
        alice.send_json({"type": "join_room", "roomId": "nope1"})
        assert alice.receive_json()["message"] == "Room NOPE1 not found."

        # Connection survives every rejection.
        alice.send_bytes(b'{"type": "create_room"}')
        assert alice.receive_json()["type"] == "room_created"


def test_disconnect_ends_room(client: TestClient) -> None:
    with client.websocket_connect("/ws") as alice:
        code = open_room(alice)
        with client.websocket_connect("/ws") as bob:
            join_room(bob, alice, code)

        notice = alice.receive_json()
        assert notice["type"] == "opponent_disconnected"
        assert notice["gameState"] == "ended"

        alice.send_json({"type": "place_piece", "index": 0})
        error = alice.receive_json()
        assert error["code"] == "session"
        assert error["message"] == f"Room {code} not found."

        assert client.get(f"/rooms/{code}").status_code == 404
        assert client.get("/health").json()["rooms"] == 0

    with client.websocket_connect("/ws") as carol:
        carol.send_json({"type": "join_room", "roomId": code})
        assert carol.receive_json()["message"] == f"Room {code} not found."


def test_non_integer_index_is_rejected_without_touching_board(client: TestClient) -> None:
    with client.websocket_connect("/ws") as alice:
        code = open_room(alice)
        with client.websocket_connect("/ws") as bob:
            join_room(bob, alice, code)

            alice.send_json({"type": "place_piece", "index": True})
            error = alice.receive_json()
            assert error["code"] == "protocol"
            assert error["message"] == "Invalid message format."

            room = client.get(f"/rooms/{code}").json()
            assert room["board"] == [0] * 24
            assert room["currentPlayer"] == 1
