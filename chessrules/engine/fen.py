from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from .errors import (
    IncorrectCols,
    IncorrectRows,
    IncorrectSections,
    InvalidCastling,
    InvalidPiece,
    NotAscii,
)
from .square import Position

if TYPE_CHECKING:
    from .board import Board


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

PIECE_LETTERS = "KQRBNPkqrbnp"
CASTLING_ORDER = "KQkq"


@dataclass(frozen=True)
class DecodedPosition:
    """Position description handed to :meth:`Board.from_decoded_position`.

    Attributes:
        placement: Eight rows, rank 8 first, of eight cells each; a cell is
            a FEN piece letter or ``None`` for an empty square.
        side_to_move: ``"w"`` or ``"b"``.
        white_king_side, white_queen_side, black_king_side,
        black_queen_side: Castling rights.
        en_passant: Target square name (``"e3"``) or ``None``.
        half_move_clock: Plies since the last capture or pawn move.
        full_move_number: Starts at 1, incremented after Black moves.

    Only the shape of the data is fixed here; contents are validated by
    the board when it is built.
    """

    placement: Sequence[Sequence[Optional[str]]]
    side_to_move: str = "w"
    white_king_side: bool = False
    white_queen_side: bool = False
    black_king_side: bool = False
    black_queen_side: bool = False
    en_passant: Optional[str] = None
    half_move_clock: Union[int, str] = 0
    full_move_number: Union[int, str] = 1


def parse_fen(fen: str) -> DecodedPosition:
    """Decode a Forsyth-Edwards Notation (FEN) string.

    Args:
        fen (str): FEN string describing the position to load.

    Returns:
        DecodedPosition: Decoded fields, not yet checked for consistency.

    Raises:
        NotAscii: If ``fen`` contains non-ASCII characters.
        IncorrectSections: If ``fen`` does not have exactly six fields.
        IncorrectRows: If the placement does not have eight ranks.
        IncorrectCols: If a rank does not add up to eight squares.
        InvalidPiece: If the placement contains an unknown character.
        InvalidCastling: If the castling field has unknown or repeated
            letters.
    """
    if not isinstance(fen, str):
        raise IncorrectSections(0)
    if not fen.isascii():
        raise NotAscii()
    parts = fen.split()
    if len(parts) != 6:
        raise IncorrectSections(len(parts))
    placement, stm, castling, ep, halfmove, fullmove = parts

    ranks = placement.split("/")
    if len(ranks) != 8:
        raise IncorrectRows(len(ranks))
    rows: List[List[Optional[str]]] = []
    for rank_idx, rank in enumerate(ranks):
        cells: List[Optional[str]] = []
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1:
                    raise InvalidPiece(ch)
                cells.extend([None] * n)
            elif ch in PIECE_LETTERS:
                cells.append(ch)
            else:
                raise InvalidPiece(ch)
        if len(cells) != 8:
            raise IncorrectCols(7 - rank_idx, len(cells))
        rows.append(cells)

    rights = ""
    if castling != "-":
        for ch in castling:
            if ch not in CASTLING_ORDER or ch in rights:
                raise InvalidCastling(castling)
            rights += ch

    return DecodedPosition(
        placement=tuple(tuple(r) for r in rows),
        side_to_move=stm,
        white_king_side="K" in rights,
        white_queen_side="Q" in rights,
        black_king_side="k" in rights,
        black_queen_side="q" in rights,
        en_passant=None if ep == "-" else ep,
        half_move_clock=halfmove,
        full_move_number=fullmove,
    )


def to_fen(board: "Board") -> str:
    """Serialize the current position into a normalized FEN string.

    Returns:
        str: FEN string describing the board state.
    """
    ranks_str: List[str] = []
    for row in range(7, -1, -1):
        run = 0
        out = []
        for col in range(8):
            piece = board.piece_at(Position.from_coords(row, col))
            if piece is None:
                run += 1
            else:
                if run > 0:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol)
        if run > 0:
            out.append(str(run))
        ranks_str.append("".join(out))
    placement = "/".join(ranks_str)

    stm = board.side_to_move.value
    castling = board.castling_rights() or "-"
    ep = board.en_passant_target.name if board.en_passant_target is not None else "-"
    return f"{placement} {stm} {castling} {ep} {board.half_move_clock} {board.full_move_number}"
