from __future__ import annotations

import copy

import pytest

from chessrules.engine.board import Board
from chessrules.engine.errors import BoardStateError
from chessrules.engine.piece import PieceType
from chessrules.engine.square import Position
from chessrules.engine.turn import Turn


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
POSITION_4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"
EN_PASSANT = "rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq f6 0 3"


def _find(b: Board, uci: str) -> Turn:
    return next(m for m in b.get_moves() if m.to_uci() == uci)


def sq(name: str) -> Position:
    return Position.from_name(name)


@pytest.mark.parametrize(
    "fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        KIWIPETE,
        POSITION_4,
        EN_PASSANT,
    ],
)
def test_make_then_undo_restores_everything(fen: str) -> None:
    b = Board.from_fen(fen)
    snapshot = copy.deepcopy(b)
    for turn in b.get_moves():
        b.make_turn(turn)
        undone = b.undo_turn()
        assert undone == turn
        assert b == snapshot, turn.to_uci()
        assert b.to_fen() == fen


def test_two_ply_sequences_restore_fen() -> None:
    b = Board.from_fen(KIWIPETE)
    for first in b.get_moves():
        b.make_turn(first)
        for second in b.get_moves():
            b.make_turn(second)
            b.undo_turn()
        b.undo_turn()
        assert b.to_fen() == KIWIPETE


def test_undo_with_empty_log_returns_none() -> None:
    b = Board.from_start()
    before = b.to_fen()
    assert b.undo_turn() is None
    assert b.to_fen() == before


def test_ply_log_tracks_moves_and_captures() -> None:
    b = Board.from_start()
    for uci in ("e2e4", "d7d5", "e4d5", "d8d5"):
        b.make_turn(_find(b, uci))
    assert [t.to_uci() for t in b.moves] == ["e2e4", "d7d5", "e4d5", "d8d5"]
    assert b.ply_count == 4
    assert [p.kind for p in b.captures] == [PieceType.PAWN, PieceType.PAWN]
    assert len(b.captures) == sum(1 for t in b.moves if t.is_capture)
    assert b.prev_turn().to_uci() == "d8d5"

    b.undo_turn()
    assert len(b.captures) == 1
    assert b.prev_turn().to_uci() == "e4d5"


def test_move_counts_follow_make_and_undo() -> None:
    b = Board.from_start()
    b.make_turn(_find(b, "g1f3"))
    knight = b.piece_at(sq("f3"))
    assert knight.move_count == 1
    b.make_turn(_find(b, "g8f6"))
    b.make_turn(_find(b, "f3g1"))
    assert knight.move_count == 2
    b.undo_turn()
    assert knight.move_count == 1


def test_lifting_from_empty_square_is_fatal() -> None:
    b = Board.from_start()
    with pytest.raises(BoardStateError):
        b.make_turn(Turn.basic(PieceType.PAWN, sq("e4"), sq("e5")))


def test_landing_on_occupied_square_is_fatal() -> None:
    b = Board.from_start()
    with pytest.raises(BoardStateError):
        b.make_turn(Turn.basic(PieceType.ROOK, sq("a1"), sq("a2")))


def test_capturing_on_empty_square_is_fatal() -> None:
    b = Board.from_start()
    with pytest.raises(BoardStateError):
        b.make_turn(Turn.with_capture(PieceType.PAWN, sq("e2"), sq("e4")))


def test_piece_moves_on_empty_square_is_fatal() -> None:
    b = Board.from_start()
    with pytest.raises(BoardStateError):
        b.get_piece_moves(sq("e4"))
