from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .board import Board
from .color import Color
from .piece import PieceType
from .square import Position
from .state import Draw, DrawReason, GameState, Win, WinReason
from .turn import Turn, parse_uci


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: validate caller moves against the generator, apply and
    undo them, and hold results the board cannot derive (resignation,
    agreed draws, time forfeits).
    """

    board: Board
    declared: Optional[GameState] = field(default=None)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.from_start())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        """Load a playable game from FEN.

        Raises:
            ValueError: If the FEN is malformed (a ``PositionError``) or
                either side does not have exactly one king, or the side
                that just moved left its king in check.
        """
        board = Board.from_fen(fen)
        for color in Color:
            kings = sum(
                1
                for p in board.squares
                if p is not None and p.kind is PieceType.KING and p.color is color
            )
            if kings != 1:
                raise ValueError(f"position must have exactly one {color.name.lower()} king")
        if board.is_king_attacked(board.side_to_move.other):
            raise ValueError("side not to move is in check")
        return cls(board=board)

    def to_fen(self) -> str:
        return self.board.to_fen()

    def legal_moves(self) -> List[Turn]:
        if self.declared is not None:
            return []
        return self.board.get_moves()

    def legal_moves_from(self, square: str) -> List[Turn]:
        """Legal turns of the side to move starting on ``square``.

        Raises:
            ValueError: If ``square`` is not a valid square name.
        """
        pos = Position.from_name(square)
        piece = self.board.piece_at(pos)
        if self.declared is not None or piece is None or piece.color is not self.board.side_to_move:
            return []
        return self.board.get_piece_moves(pos)

    def find_turn(self, uci: str) -> Turn:
        from_pos, to_pos, promo = parse_uci(uci)
        for turn in self.legal_moves_from(from_pos.name):
            if turn.to_pos == to_pos and turn.promote_to is promo:
                return turn
        raise ValueError("illegal move")

    def apply_move(self, uci: str) -> Turn:
        if self.declared is not None:
            raise ValueError("game is over")
        turn = self.find_turn(uci)
        self.board.make_turn(turn)
        logger.debug("applied %s (ply %d)", turn.to_uci(), self.board.ply_count)
        return turn

    def undo_move(self) -> Turn:
        turn = self.board.undo_turn()
        if turn is None:
            raise ValueError("no moves to undo")
        self.declared = None
        logger.debug("undid %s (ply %d)", turn.to_uci(), self.board.ply_count)
        return turn

    # --- Results asserted from outside the board ---
    def resign(self, color: Color) -> GameState:
        return self._declare(Win(color.other, WinReason.RESIGNED))

    def agree_draw(self) -> GameState:
        return self._declare(Draw(DrawReason.MUTUAL_AGREEMENT))

    def flag_timeout(self, color: Color) -> GameState:
        return self._declare(Win(color.other, WinReason.TIME_OUT))

    def _declare(self, result: GameState) -> GameState:
        if self.declared is not None or self.board.is_game_over():
            raise ValueError("game is over")
        self.declared = result
        logger.info("result declared: %s", result)
        return result

    # --- State flags for protocol ---
    def state(self) -> GameState:
        if self.declared is not None:
            return self.declared
        return self.board.get_game_state()

    def in_check(self) -> bool:
        return self.board.is_check()

    def checkmate(self) -> bool:
        return self.board.is_checkmate()

    def stalemate(self) -> bool:
        return self.board.is_stalemate()

    def is_draw(self) -> bool:
        return self.state().status == "draw"

    def move_history_uci(self) -> List[str]:
        return [t.to_uci() for t in self.board.moves]
