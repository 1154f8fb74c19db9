from __future__ import annotations

import pytest

from chessrules.engine.color import Color
from chessrules.engine.errors import PositionError
from chessrules.engine.fen import STARTPOS_FEN
from chessrules.engine.game import Game
from chessrules.engine.state import PLAYING, Draw, DrawReason, Win, WinReason


def test_new_game_and_moves() -> None:
    g = Game.new()
    assert g.to_fen() == STARTPOS_FEN
    assert len(g.legal_moves()) == 20
    turn = g.apply_move("e2e4")
    assert turn.to_uci() == "e2e4"
    assert g.move_history_uci() == ["e2e4"]
    assert g.board.side_to_move is Color.BLACK


def test_legal_moves_from_square() -> None:
    g = Game.new()
    assert sorted(t.to_uci() for t in g.legal_moves_from("e2")) == ["e2e3", "e2e4"]
    assert g.legal_moves_from("e7") == []  # not the side to move
    assert g.legal_moves_from("e4") == []  # empty
    with pytest.raises(ValueError):
        g.legal_moves_from("z9")


def test_illegal_and_malformed_moves_are_rejected() -> None:
    g = Game.new()
    with pytest.raises(ValueError, match="illegal move"):
        g.apply_move("e2e5")
    with pytest.raises(ValueError):
        g.apply_move("nonsense")
    assert g.move_history_uci() == []


def test_promotion_needs_the_promotion_letter() -> None:
    g = Game.from_fen("7k/P7/8/8/8/8/8/K7 w - - 0 1")
    with pytest.raises(ValueError, match="illegal move"):
        g.apply_move("a7a8")
    g.apply_move("a7a8n")
    assert g.to_fen().startswith("N6k/")


def test_undo_move() -> None:
    g = Game.new()
    with pytest.raises(ValueError, match="no moves to undo"):
        g.undo_move()
    g.apply_move("g1f3")
    assert g.undo_move().to_uci() == "g1f3"
    assert g.to_fen() == STARTPOS_FEN


def test_from_fen_requires_one_king_per_side() -> None:
    with pytest.raises(ValueError, match="black king"):
        Game.from_fen("8/8/8/8/8/8/8/4K3 w - - 0 1")
    with pytest.raises(ValueError, match="white king"):
        Game.from_fen("4k3/8/8/8/8/8/8/3KK3 w - - 0 1")
    with pytest.raises(PositionError):
        Game.from_fen("8/8/8 w - - 0 1")


def test_checkmate_state() -> None:
    g = Game.new()
    for uci in ("f2f3", "e7e5", "g2g4", "d8h4"):
        g.apply_move(uci)
    assert g.in_check()
    assert g.checkmate()
    assert not g.stalemate()
    assert g.state() == Win(Color.BLACK, WinReason.CHECKMATE)
    assert g.legal_moves() == []
    with pytest.raises(ValueError, match="game is over"):
        g.resign(Color.WHITE)


def test_stalemate_state() -> None:
    g = Game.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert g.stalemate()
    assert g.is_draw()
    assert g.state() == Draw(DrawReason.STALEMATE)


def test_resign() -> None:
    g = Game.new()
    state = g.resign(Color.WHITE)
    assert state == Win(Color.BLACK, WinReason.RESIGNED)
    assert g.state() == state
    assert g.legal_moves() == []
    assert g.legal_moves_from("e2") == []
    with pytest.raises(ValueError, match="game is over"):
        g.apply_move("e2e4")
    with pytest.raises(ValueError, match="game is over"):
        g.agree_draw()


def test_agree_draw_and_timeout() -> None:
    g = Game.new()
    assert g.agree_draw() == Draw(DrawReason.MUTUAL_AGREEMENT)
    assert g.is_draw()

    g = Game.new()
    g.apply_move("e2e4")
    assert g.flag_timeout(Color.BLACK) == Win(Color.WHITE, WinReason.TIME_OUT)


def test_undo_clears_declared_result() -> None:
    g = Game.new()
    g.apply_move("e2e4")
    g.resign(Color.BLACK)
    g.undo_move()
    assert g.state() == PLAYING
    assert len(g.legal_moves()) == 20


def test_from_fen_rejects_side_not_to_move_in_check() -> None:
    # white to move could take the black king on e8
    with pytest.raises(ValueError, match="in check"):
        Game.from_fen("4k2R/8/8/8/8/8/8/4K3 w - - 0 1")
    g = Game.from_fen("4k2R/8/8/8/8/8/8/4K3 b - - 0 1")
    assert g.in_check()
