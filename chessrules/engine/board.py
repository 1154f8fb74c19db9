from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .color import Color
from .errors import (
    BoardStateError,
    IllegalCastling,
    IncorrectCols,
    IncorrectRows,
    InvalidColor,
    InvalidNumber,
    InvalidPosition,
)
from .fen import DecodedPosition, parse_fen, to_fen
from .piece import (
    ALL_DIRECTIONS,
    DIAGONALS,
    KNIGHT_OFFSETS,
    ORTHOGONALS,
    PROMOTABLE_TYPES,
    Piece,
    PieceType,
)
from .square import ALL_SQUARES, Position
from .state import GameState, get_game_state
from .turn import Turn


BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)
KING_HOME_COL = 4

# (FEN letter, side, column of the corner rook)
CASTLING_RIGHTS = (
    ("K", Color.WHITE, 7),
    ("Q", Color.WHITE, 0),
    ("k", Color.BLACK, 7),
    ("q", Color.BLACK, 0),
)
# (scan direction along the rank, king destination col, rook destination col)
CASTLING_SIDES = ((1, 6, 5), (-1, 2, 3))

SLIDE_DIRECTIONS: Dict[PieceType, Tuple[Tuple[int, int], ...]] = {
    PieceType.ROOK: ORTHOGONALS,
    PieceType.BISHOP: DIAGONALS,
    PieceType.QUEEN: ALL_DIRECTIONS,
}


@dataclass(frozen=True)
class Ply:
    """One entry of the ply log.

    Attributes:
        turn (Turn): The executed turn.
        captured (Optional[Piece]): Piece removed by the turn, if any.
        half_move_clock (int): Clock value before the turn was made.
    """

    turn: Turn
    captured: Optional[Piece]
    half_move_clock: int


def _passed_square(turn: Turn) -> Position:
    return Position.from_coords((turn.from_pos.row + turn.to_pos.row) // 2, turn.from_pos.col)


def _parse_counter(name: str, value: Union[int, str], minimum: int) -> int:
    if isinstance(value, bool):
        raise InvalidNumber(name, value)
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        number = int(value)
    else:
        raise InvalidNumber(name, value)
    if number < minimum:
        raise InvalidNumber(name, value)
    return number


@dataclass
class Board:
    """Mailbox board, ply log and legality engine.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - The board is mutated in place. ``make_turn`` and ``undo_turn`` must be
      paired in strict LIFO order; legality checks do this internally for
      every candidate and leave the board exactly as they found it.
    - Captured pieces, move history and half-move clocks live together in
      one ply log, so they cannot drift apart.
    """

    squares: List[Optional[Piece]] = field(default_factory=lambda: [None] * 64)
    side_to_move: Color = Color.WHITE
    half_move_clock: int = 0
    full_move_number: int = 1
    en_passant_target: Optional[Position] = None
    _plies: List[Ply] = field(default_factory=list, repr=False)
    # target supplied at construction; restored once the log is empty again
    _initial_en_passant: Optional[Position] = field(default=None, repr=False)

    @classmethod
    def from_start(cls) -> "Board":
        """Create a board initialized to the standard chess starting position.

        Returns:
            Board: White to move, full castling rights, clocks at 0 and 1.
        """
        board = cls()
        for col, kind in enumerate(BACK_RANK):
            board.squares[col] = Piece(kind, Color.WHITE)
            board.squares[8 + col] = Piece(PieceType.PAWN, Color.WHITE)
            board.squares[48 + col] = Piece(PieceType.PAWN, Color.BLACK)
            board.squares[56 + col] = Piece(kind, Color.BLACK)
        return board

    @classmethod
    def from_decoded_position(cls, decoded: DecodedPosition) -> "Board":
        """Create a board from a decoded position description.

        Args:
            decoded (DecodedPosition): Placement, side to move, castling
                flags, en-passant target and move counters.

        Returns:
            Board: Board with an empty ply log.

        Raises:
            IncorrectRows: If the placement does not have 8 rows.
            IncorrectCols: If a row does not have 8 cells.
            InvalidPiece: If a cell holds anything but a piece letter.
            InvalidColor: If the side-to-move token is not ``w`` or ``b``.
            IllegalCastling: If a right is granted without its king on the
                e-file home square and its rook in the corner.
            InvalidPosition: If the en-passant square is malformed, on the
                wrong rank, or has no pawn to capture behind it.
            InvalidNumber: If a move counter is not a valid number.

        Notes:
            Castling rights are carried by ``move_count``: kings and rooks
            start as "moved" unless a granted right needs them unmoved.
        """
        rows = decoded.placement
        if len(rows) != 8:
            raise IncorrectRows(len(rows))
        board = cls()
        for rank_idx, cells in enumerate(rows):
            row = 7 - rank_idx
            if len(cells) != 8:
                raise IncorrectCols(row, len(cells))
            for col, cell in enumerate(cells):
                if cell is not None:
                    board.squares[row * 8 + col] = Piece.from_symbol(cell)

        try:
            board.side_to_move = Color.from_token(decoded.side_to_move)
        except ValueError as e:
            raise InvalidColor(decoded.side_to_move) from e

        board._seed_castling(
            {
                "K": decoded.white_king_side,
                "Q": decoded.white_queen_side,
                "k": decoded.black_king_side,
                "q": decoded.black_queen_side,
            }
        )

        if decoded.en_passant is not None:
            target = board._validate_en_passant(decoded.en_passant)
            board.en_passant_target = target
            board._initial_en_passant = target

        board.half_move_clock = _parse_counter("half-move clock", decoded.half_move_clock, 0)
        board.full_move_number = _parse_counter("full-move number", decoded.full_move_number, 1)
        return board

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth-Edwards Notation (FEN) string.

        Raises:
            PositionError: If ``fen`` is malformed; see :func:`parse_fen`
                and :meth:`from_decoded_position` for the specific kinds.
        """
        return cls.from_decoded_position(parse_fen(fen))

    def to_fen(self) -> str:
        return to_fen(self)

    def _seed_castling(self, rights: Dict[str, bool]) -> None:
        for piece in self.squares:
            if piece is not None and piece.kind in (PieceType.KING, PieceType.ROOK):
                piece.move_count = 1
        for letter, color, rook_col in CASTLING_RIGHTS:
            if not rights[letter]:
                continue
            king = self.squares[color.home_row * 8 + KING_HOME_COL]
            rook = self.squares[color.home_row * 8 + rook_col]
            if not (
                king is not None
                and king.kind is PieceType.KING
                and king.color is color
                and rook is not None
                and rook.kind is PieceType.ROOK
                and rook.color is color
            ):
                raise IllegalCastling(letter)
            king.move_count = 0
            rook.move_count = 0

    def _validate_en_passant(self, token: str) -> Position:
        try:
            target = Position.from_name(token)
        except ValueError as e:
            raise InvalidPosition(token) from e
        mover = self.side_to_move
        # the target sits behind a pawn of the side that just moved
        if target.row != mover.other.home_row + 2 * mover.other.direction:
            raise InvalidPosition(token, "en passant square on the wrong rank")
        pushed = target.offset(mover.other.direction, 0)
        origin = target.offset(-mover.other.direction, 0)
        pawn = self.squares[pushed.index] if pushed is not None else None
        if (
            pawn is None
            or pawn.kind is not PieceType.PAWN
            or pawn.color is mover
            or self.squares[target.index] is not None
            or (origin is not None and self.squares[origin.index] is not None)
        ):
            raise InvalidPosition(token, "no double-pushed pawn behind en passant square")
        return target

    # --- Queries ---
    def piece_at(self, position: Position) -> Optional[Piece]:
        return self.squares[position.index]

    @property
    def moves(self) -> List[Turn]:
        """Executed turns, oldest first."""
        return [ply.turn for ply in self._plies]

    @property
    def captures(self) -> List[Piece]:
        """Captured pieces, most recent last."""
        return [ply.captured for ply in self._plies if ply.captured is not None]

    @property
    def ply_count(self) -> int:
        return len(self._plies)

    def prev_turn(self) -> Optional[Turn]:
        return self._plies[-1].turn if self._plies else None

    def castling_rights(self) -> str:
        """Return the FEN castling field implied by unmoved kings and rooks.

        Returns:
            str: Subset of ``"KQkq"`` in that order, ``""`` when none.
        """
        rights = ""
        for letter, color, rook_col in CASTLING_RIGHTS:
            king = self.squares[color.home_row * 8 + KING_HOME_COL]
            rook = self.squares[color.home_row * 8 + rook_col]
            if (
                king is not None
                and king.kind is PieceType.KING
                and king.color is color
                and king.move_count == 0
                and rook is not None
                and rook.kind is PieceType.ROOK
                and rook.color is color
                and rook.move_count == 0
            ):
                rights += letter
        return rights

    # --- Mutation ---
    def _lift(self, position: Position) -> Piece:
        piece = self.squares[position.index]
        if piece is None:
            raise BoardStateError(f"no piece on {position}")
        self.squares[position.index] = None
        return piece

    def _place(self, position: Position, piece: Piece) -> None:
        if self.squares[position.index] is not None:
            raise BoardStateError(f"{position} is already occupied")
        self.squares[position.index] = piece

    def make_turn(self, turn: Turn) -> None:
        """Execute ``turn`` in place.

        The turn is trusted to be legal (obtained from :meth:`get_moves`).

        Raises:
            BoardStateError: If the turn lifts from an empty square, captures
                on an empty square, or lands on an occupied one.
        """
        clock_before = self.half_move_clock
        resets_clock = False
        captured: Optional[Piece] = None
        if turn.capture is not None:
            captured = self._lift(turn.capture)
            resets_clock = True
        if turn.kind is PieceType.PAWN and turn.capture is None:
            self.en_passant_target = _passed_square(turn) if turn.is_double_push else None
            resets_clock = True
        else:
            self.en_passant_target = None

        piece = self._lift(turn.from_pos)
        if turn.additional_move is not None:
            other_from, other_to = turn.additional_move
            other = self._lift(other_from)
            other.move_count += 1
            self._place(other_to, other)
        if turn.promote_to is not None:
            piece.kind = turn.promote_to
        piece.move_count += 1
        self._place(turn.to_pos, piece)

        self.half_move_clock = 0 if resets_clock else self.half_move_clock + 1
        self._plies.append(Ply(turn, captured, clock_before))
        if self.side_to_move is Color.BLACK:
            self.full_move_number += 1
        self.side_to_move = self.side_to_move.other

    def undo_turn(self) -> Optional[Turn]:
        """Reverse the most recent turn.

        Returns:
            Optional[Turn]: The undone turn, or ``None`` if there was
                nothing to undo.
        """
        if not self._plies:
            return None
        ply = self._plies.pop()
        turn = ply.turn

        piece = self._lift(turn.to_pos)
        if turn.additional_move is not None:
            other_from, other_to = turn.additional_move
            other = self._lift(other_to)
            other.move_count -= 1
            self._place(other_from, other)
        if turn.capture is not None:
            if ply.captured is None:
                raise BoardStateError(f"ply log lost the piece captured on {turn.capture}")
            self._place(turn.capture, ply.captured)
        if turn.promote_from is not None:
            piece.kind = turn.promote_from
        piece.move_count -= 1
        self._place(turn.from_pos, piece)

        self.side_to_move = self.side_to_move.other
        if self.side_to_move is Color.BLACK:
            self.full_move_number -= 1
        self.half_move_clock = ply.half_move_clock
        if self._plies:
            prev = self._plies[-1].turn
            self.en_passant_target = _passed_square(prev) if prev.is_double_push else None
        else:
            self.en_passant_target = self._initial_en_passant
        return turn

    # --- Attacks and legality ---
    def are_pieces_attacking(self, position: Position, color: Color) -> bool:
        """Return whether any piece of ``color`` attacks ``position``.

        Only the nearest piece on each of the eight rays can attack; knights
        jump, so their eight squares are tested separately.
        """
        squares = self.squares
        for d_row, d_col in ALL_DIRECTIONS:
            pos = position.offset(d_row, d_col)
            while pos is not None:
                piece = squares[pos.index]
                if piece is not None:
                    if piece.color is color and piece.could_attack(pos, position, self):
                        return True
                    break
                pos = pos.offset(d_row, d_col)

        for d_row, d_col in KNIGHT_OFFSETS:
            pos = position.offset(d_row, d_col)
            if pos is not None:
                piece = squares[pos.index]
                if piece is not None and piece.kind is PieceType.KNIGHT and piece.color is color:
                    return True
        return False

    def find_king(self, color: Color) -> Position:
        """Locate the king of ``color``.

        Raises:
            BoardStateError: If that side has no king on the board.
        """
        for pos in ALL_SQUARES:
            piece = self.squares[pos.index]
            if piece is not None and piece.kind is PieceType.KING and piece.color is color:
                return pos
        raise BoardStateError(f"no {color.name.lower()} king on the board")

    def is_king_attacked(self, color: Color) -> bool:
        return self.are_pieces_attacking(self.find_king(color), color.other)

    def is_move_legal(self, turn: Turn) -> bool:
        """Return whether ``turn`` keeps its own king out of check.

        Makes the turn, probes, and always undoes it again.
        """
        mover = self.squares[turn.from_pos.index]
        if mover is None:
            raise BoardStateError(f"no piece on {turn.from_pos}")
        color = mover.color
        self.make_turn(turn)
        try:
            return not self.is_king_attacked(color)
        finally:
            self.undo_turn()

    # --- Terminal predicates ---
    def is_check(self) -> bool:
        return self.is_king_attacked(self.side_to_move)

    def is_checkmate(self) -> bool:
        return self.is_check() and not self.get_moves()

    def is_stalemate(self) -> bool:
        return not self.is_check() and not self.get_moves()

    def is_fifty_move_rule(self) -> bool:
        # 100 half-moves = 50 full moves per side
        return self.half_move_clock >= 100

    def is_threefold_repetition(self) -> bool:
        """Always ``False``: repetition is not tracked.

        Detection would count, across the ply log, positions with the same
        placement, side to move, castling rights and en-passant target.
        """
        return False

    def is_insufficient_material(self) -> bool:
        """Always ``False``: material sufficiency is not evaluated."""
        return False

    def get_game_state(self) -> GameState:
        return get_game_state(self)

    def is_draw(self) -> bool:
        return self.get_game_state().status == "draw"

    def is_game_over(self) -> bool:
        return self.get_game_state().status != "playing"

    # --- Move generation ---
    def get_moves(self) -> List[Turn]:
        """Return every legal turn for the side to move."""
        turns: List[Turn] = []
        for pos in ALL_SQUARES:
            piece = self.squares[pos.index]
            if piece is not None and piece.color is self.side_to_move:
                turns.extend(self.get_piece_moves(pos))
        return turns

    def get_piece_moves(self, position: Position) -> List[Turn]:
        """Return the legal turns of the piece standing on ``position``.

        Raises:
            BoardStateError: If ``position`` is empty.
        """
        piece = self.squares[position.index]
        if piece is None:
            raise BoardStateError(f"no piece on {position}")
        if piece.kind is PieceType.KING:
            return self._king_moves(position, piece)
        if piece.kind is PieceType.KNIGHT:
            return self._knight_moves(position)
        if piece.kind is PieceType.PAWN:
            return self._pawn_moves(position, piece)
        return self._line_moves(position, SLIDE_DIRECTIONS[piece.kind])

    def _simple_turn(self, from_pos: Position, to_pos: Position) -> Optional[Turn]:
        """Plain move or capture onto ``to_pos``; ``None`` if a friendly piece
        stands there."""
        piece = self.squares[from_pos.index]
        other = self.squares[to_pos.index]
        if other is None:
            return Turn.basic(piece.kind, from_pos, to_pos)
        if other.color is not piece.color:
            return Turn.with_capture(piece.kind, from_pos, to_pos)
        return None

    def _add_if_legal(self, turn: Turn, moves: List[Turn]) -> None:
        if self.is_move_legal(turn):
            moves.append(turn)

    def _line_moves(
        self, position: Position, directions: Tuple[Tuple[int, int], ...]
    ) -> List[Turn]:
        moves: List[Turn] = []
        for d_row, d_col in directions:
            to_pos = position.offset(d_row, d_col)
            while to_pos is not None:
                turn = self._simple_turn(position, to_pos)
                if turn is None:
                    break
                self._add_if_legal(turn, moves)
                if turn.capture is not None:
                    break
                to_pos = to_pos.offset(d_row, d_col)
        return moves

    def _knight_moves(self, position: Position) -> List[Turn]:
        moves: List[Turn] = []
        for d_row, d_col in KNIGHT_OFFSETS:
            to_pos = position.offset(d_row, d_col)
            if to_pos is not None:
                turn = self._simple_turn(position, to_pos)
                if turn is not None:
                    self._add_if_legal(turn, moves)
        return moves

    def _king_moves(self, position: Position, king: Piece) -> List[Turn]:
        moves: List[Turn] = []
        for d_row, d_col in ALL_DIRECTIONS:
            to_pos = position.offset(d_row, d_col)
            if to_pos is not None:
                turn = self._simple_turn(position, to_pos)
                if turn is not None:
                    self._add_if_legal(turn, moves)
        if king.move_count == 0 and position.row == king.color.home_row:
            self._castling_moves(position, king, moves)
        return moves

    def _castling_moves(self, position: Position, king: Piece, moves: List[Turn]) -> None:
        enemy = king.color.other
        if self.are_pieces_attacking(position, enemy):
            return
        row = position.row
        for step, king_col, rook_col in CASTLING_SIDES:
            rook_pos = position.offset(0, step)
            while rook_pos is not None and self.squares[rook_pos.index] is None:
                rook_pos = rook_pos.offset(0, step)
            if rook_pos is None:
                continue
            rook = self.squares[rook_pos.index]
            if rook.kind is not PieceType.ROOK or rook.color is not king.color or rook.move_count != 0:
                continue
            low, high = sorted((position.col, king_col))
            if any(
                self.are_pieces_attacking(Position.from_coords(row, col), enemy)
                for col in range(low + 1, high)
            ):
                continue
            self._add_if_legal(
                Turn.compound(
                    PieceType.KING,
                    (position, Position.from_coords(row, king_col)),
                    (rook_pos, Position.from_coords(row, rook_col)),
                ),
                moves,
            )

    def _pawn_moves(self, position: Position, pawn: Piece) -> List[Turn]:
        moves: List[Turn] = []
        direction = pawn.color.direction
        last_row = pawn.color.other.home_row

        ahead = position.offset(direction, 0)
        if ahead is not None and self.squares[ahead.index] is None:
            if ahead.row == last_row:
                for kind in PROMOTABLE_TYPES:
                    self._add_if_legal(Turn.promotion(PieceType.PAWN, position, ahead, kind), moves)
            else:
                self._add_if_legal(Turn.basic(PieceType.PAWN, position, ahead), moves)
                if position.row == pawn.color.home_row + direction:
                    two = ahead.offset(direction, 0)
                    if two is not None and self.squares[two.index] is None:
                        self._add_if_legal(Turn.basic(PieceType.PAWN, position, two), moves)

        for d_col in (-1, 1):
            to_pos = position.offset(direction, d_col)
            if to_pos is None:
                continue
            target = self.squares[to_pos.index]
            if target is not None:
                if target.color is pawn.color:
                    continue
                if to_pos.row == last_row:
                    for kind in PROMOTABLE_TYPES:
                        self._add_if_legal(
                            Turn.promotion(PieceType.PAWN, position, to_pos, kind, capture=True),
                            moves,
                        )
                else:
                    self._add_if_legal(Turn.with_capture(PieceType.PAWN, position, to_pos), moves)
            elif to_pos == self.en_passant_target and pawn.color is self.side_to_move:
                captured = Position.from_coords(position.row, to_pos.col)
                self._add_if_legal(
                    Turn.en_passant(PieceType.PAWN, position, to_pos, captured), moves
                )
        return moves
