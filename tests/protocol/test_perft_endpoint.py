from __future__ import annotations

from fastapi.testclient import TestClient

from chessrules.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_perft_from_start_position() -> None:
    r = _client().post("/api/perft", json={"depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400, "depth": 2}


def test_perft_from_fen() -> None:
    fen = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
    r = _client().post("/api/perft", json={"fen": fen, "depth": 1})
    assert r.json() == {"nodes": 14, "depth": 1}


def test_perft_malformed_fen_names_the_error_kind() -> None:
    r = _client().post("/api/perft", json={"fen": "8/8 w", "depth": 1})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["field_errors"][0]["field"] == "fen"
    assert err["field_errors"][0]["code"] == "incorrect_sections"


def test_perft_position_without_kings_is_rejected() -> None:
    r = _client().post("/api/perft", json={"fen": "8/8/8/8/8/8/8/8 w - - 0 1", "depth": 1})
    assert r.status_code == 400
    assert "king" in r.json()["error"]["message"]


def test_perft_depth_is_bounded() -> None:
    r = _client().post("/api/perft", json={"depth": 9})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "unprocessable_entity"
