from __future__ import annotations

from chessrules.engine.board import Board
from chessrules.engine.piece import PieceType
from chessrules.engine.square import Position
from chessrules.engine.turn import Turn


def _find(b: Board, uci: str) -> Turn:
    return next(m for m in b.get_moves() if m.to_uci() == uci)


def _play(b: Board, *ucis: str) -> None:
    for uci in ucis:
        b.make_turn(_find(b, uci))


def sq(name: str) -> Position:
    return Position.from_name(name)


def test_en_passant_capture_after_double_push() -> None:
    b = Board.from_start()
    _play(b, "e2e4", "e7e6", "e4e5", "d7d5")
    assert b.en_passant_target == sq("d6")

    ep_moves = [m for m in b.get_piece_moves(sq("e5")) if m.to_pos == sq("d6")]
    assert len(ep_moves) == 1
    assert [m.to_uci() for m in b.get_piece_moves(sq("e5")) if m.is_capture] == ["e5d6"]
    turn = ep_moves[0]
    assert turn.capture == sq("d5")
    assert turn.to_uci() == "e5d6"

    b.make_turn(turn)
    assert b.piece_at(sq("d5")) is None
    assert b.piece_at(sq("d6")).kind is PieceType.PAWN
    assert b.captures[-1].kind is PieceType.PAWN
    assert b.half_move_clock == 0
    assert b.en_passant_target is None

    b.undo_turn()
    assert b.piece_at(sq("d5")).kind is PieceType.PAWN
    assert b.piece_at(sq("e5")).kind is PieceType.PAWN
    assert b.piece_at(sq("d6")) is None
    assert b.en_passant_target == sq("d6")
    assert b.captures == []


def test_en_passant_right_expires_after_one_ply() -> None:
    b = Board.from_start()
    _play(b, "e2e4", "e7e6", "e4e5", "d7d5", "g1f3", "g8f6")
    assert b.en_passant_target is None
    assert "e5d6" not in {m.to_uci() for m in b.get_moves()}


def test_black_en_passant_from_fen() -> None:
    b = Board.from_fen("4k3/8/8/8/3pP3/8/8/4K3 b - e3 0 1")
    turn = _find(b, "d4e3")
    assert turn.capture == sq("e4")
    b.make_turn(turn)
    assert b.piece_at(sq("e4")) is None
    assert b.piece_at(sq("e3")).kind is PieceType.PAWN
    assert b.to_fen() == "4k3/8/8/8/8/4p3/8/4K3 w - - 0 2"


def test_undo_to_empty_log_restores_target_from_fen() -> None:
    b = Board.from_fen("4k3/8/8/8/3pP3/8/8/4K3 b - e3 0 1")
    _play(b, "e8e7")
    assert b.en_passant_target is None
    b.undo_turn()
    assert b.en_passant_target == sq("e3")


def test_en_passant_that_exposes_king_is_illegal() -> None:
    # both pawns leave the fifth rank, opening it for the rook on h5
    b = Board.from_fen("8/8/8/K2pP2r/8/8/8/7k w - d6 0 1")
    ms = {m.to_uci() for m in b.get_moves()}
    assert "e5d6" not in ms
    assert "e5e6" in ms


def test_double_push_sets_target_only_for_pawns() -> None:
    b = Board.from_start()
    _play(b, "g1f3")
    assert b.en_passant_target is None
    _play(b, "c7c5")
    assert b.en_passant_target == sq("c6")
    _play(b, "e2e3")
    assert b.en_passant_target is None


def test_pawns_of_the_pushing_side_ignore_the_target() -> None:
    b = Board.from_start()
    _play(b, "e2e4")
    assert b.en_passant_target == sq("e3")
    # white pawns on d2 and f2 touch e3 diagonally but cannot capture there
    assert {m.to_uci() for m in b.get_piece_moves(sq("d2"))} == {"d2d3", "d2d4"}
    assert {m.to_uci() for m in b.get_piece_moves(sq("f2"))} == {"f2f3", "f2f4"}
    white = b.piece_at(sq("d2"))
    assert not white.could_move_to(sq("d2"), sq("e3"), b)
    assert b.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
