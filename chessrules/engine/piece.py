from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Tuple

from .color import Color
from .errors import InvalidPiece
from .square import Position

if TYPE_CHECKING:
    from .board import Board


class PieceType(str, Enum):
    """Piece kind, valued by its lowercase FEN / UCI promotion letter."""

    KING = "k"
    QUEEN = "q"
    ROOK = "r"
    BISHOP = "b"
    KNIGHT = "n"
    PAWN = "p"


PROMOTABLE_TYPES: Tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)

KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
)

ORTHOGONALS: Tuple[Tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))
DIAGONALS: Tuple[Tuple[int, int], ...] = ((1, 1), (1, -1), (-1, -1), (-1, 1))
ALL_DIRECTIONS = ORTHOGONALS + DIAGONALS


def _king_reach(from_pos: Position, to_pos: Position) -> bool:
    return abs(from_pos.row - to_pos.row) <= 1 and abs(from_pos.col - to_pos.col) <= 1


def _rook_reach(from_pos: Position, to_pos: Position) -> bool:
    return from_pos.row == to_pos.row or from_pos.col == to_pos.col


def _bishop_reach(from_pos: Position, to_pos: Position) -> bool:
    return (
        from_pos.row - from_pos.col == to_pos.row - to_pos.col
        or from_pos.row + from_pos.col == to_pos.row + to_pos.col
    )


def _queen_reach(from_pos: Position, to_pos: Position) -> bool:
    return _rook_reach(from_pos, to_pos) or _bishop_reach(from_pos, to_pos)


def _knight_reach(from_pos: Position, to_pos: Position) -> bool:
    d_row = abs(from_pos.row - to_pos.row)
    d_col = abs(from_pos.col - to_pos.col)
    return (d_row, d_col) in ((1, 2), (2, 1))


_GEOMETRY: Dict[PieceType, Callable[[Position, Position], bool]] = {
    PieceType.KING: _king_reach,
    PieceType.QUEEN: _queen_reach,
    PieceType.ROOK: _rook_reach,
    PieceType.BISHOP: _bishop_reach,
    PieceType.KNIGHT: _knight_reach,
}


@dataclass
class Piece:
    """A piece standing on the board or sitting in the ply log.

    Attributes:
        kind (PieceType): Current kind (changes on promotion).
        color (Color): Owning side.
        move_count (int): Moves this piece has made, castling included.
            Zero means "never moved", which is what gates castling.
    """

    kind: PieceType
    color: Color
    move_count: int = 0

    @classmethod
    def from_symbol(cls, char: str) -> "Piece":
        """Create an unmoved piece from a FEN letter (uppercase is white).

        Raises:
            InvalidPiece: If ``char`` is not one of ``KQRBNPkqrbnp``.
        """
        if not isinstance(char, str) or len(char) != 1:
            raise InvalidPiece(char)
        try:
            kind = PieceType(char.lower())
        except ValueError as e:
            raise InvalidPiece(char) from e
        return cls(kind, Color.WHITE if char.isupper() else Color.BLACK)

    @property
    def symbol(self) -> str:
        return self.kind.value.upper() if self.color is Color.WHITE else self.kind.value

    def could_move_to(self, from_pos: Position, to_pos: Position, board: "Board") -> bool:
        """Return whether this piece could move from ``from_pos`` to ``to_pos``.

        Sliding pieces assume a clear path and no piece reads the board,
        except pawns: their pushes need empty squares, their diagonals need
        an enemy piece or the board's en-passant target.
        """
        if from_pos == to_pos:
            return False
        if self.kind is PieceType.PAWN:
            return self._could_pawn_move_to(from_pos, to_pos, board)
        return _GEOMETRY[self.kind](from_pos, to_pos)

    def could_attack(self, from_pos: Position, to_pos: Position, board: "Board") -> bool:
        """Return whether this piece, standing on ``from_pos``, hits ``to_pos``.

        Identical to :meth:`could_move_to` except for pawns, which attack
        their two forward diagonals whether or not anything stands there.
        """
        if self.kind is PieceType.PAWN:
            return (
                to_pos.row - from_pos.row == self.color.direction
                and abs(to_pos.col - from_pos.col) == 1
            )
        return self.could_move_to(from_pos, to_pos, board)

    def _could_pawn_move_to(self, from_pos: Position, to_pos: Position, board: "Board") -> bool:
        direction = self.color.direction
        d_row = to_pos.row - from_pos.row
        d_col = abs(to_pos.col - from_pos.col)
        if d_col >= 2 or d_row * direction <= 0 or abs(d_row) > 2:
            return False
        target = board.piece_at(to_pos)
        if d_col == 0:
            if target is not None:
                return False
            if abs(d_row) == 2:
                if from_pos.row != self.color.home_row + direction:
                    return False
                passed = from_pos.offset(direction, 0)
                return passed is not None and board.piece_at(passed) is None
            return True
        if abs(d_row) != 1:
            return False
        if target is not None:
            return target.color is not self.color
        return to_pos == board.en_passant_target and self.color is board.side_to_move

    def __str__(self) -> str:
        return f"{self.color.name.lower()} {self.kind.name.lower()}"
