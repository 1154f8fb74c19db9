from __future__ import annotations

from fastapi.testclient import TestClient

from chessrules.protocol.http.app import create_app


def _client_and_game(fen: str | None = None) -> tuple[TestClient, str]:
    client = TestClient(create_app())
    r = client.post("/api/games", json={"fen": fen} if fen else None)
    return client, r.json()["game_id"]


def test_checkmate_is_reported() -> None:
    client, game_id = _client_and_game("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["checkmate"] is True
    assert state["in_check"] is True
    assert state["legal_moves"] == []
    assert state["result"] == {"status": "win", "winner": "w", "reason": "checkmate"}


def test_stalemate_is_reported() -> None:
    client, game_id = _client_and_game("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["stalemate"] is True
    assert state["draw"] is True
    assert state["result"] == {"status": "draw", "winner": None, "reason": "stalemate"}


def test_fifty_move_rule_is_reported() -> None:
    client, game_id = _client_and_game("4k3/8/8/8/8/8/8/4K2R w - - 100 80")
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["fifty_move_rule"] is True
    assert state["result"]["reason"] == "fifty_move_rule"
    assert state["legal_moves"]


def test_resign() -> None:
    client, game_id = _client_and_game()
    r = client.post(f"/api/games/{game_id}/resign", json={"color": "w"})
    assert r.status_code == 200
    state = r.json()
    assert state["result"] == {"status": "win", "winner": "b", "reason": "resigned"}
    assert state["legal_moves"] == []

    r_again = client.post(f"/api/games/{game_id}/resign", json={"color": "b"})
    assert r_again.status_code == 400
    assert r_again.json()["error"]["message"] == "game is over"

    r_move = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r_move.status_code == 400


def test_resign_validates_color() -> None:
    client, game_id = _client_and_game()
    r = client.post(f"/api/games/{game_id}/resign", json={"color": "white"})
    assert r.status_code == 422


def test_agree_draw() -> None:
    client, game_id = _client_and_game()
    r = client.post(f"/api/games/{game_id}/draw")
    assert r.status_code == 200
    state = r.json()
    assert state["draw"] is True
    assert state["result"] == {"status": "draw", "winner": None, "reason": "mutual_agreement"}
