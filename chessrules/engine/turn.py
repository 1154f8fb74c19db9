from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .piece import PieceType
from .square import Position


PROMOTION_LETTERS = {"q", "r", "b", "n"}


@dataclass(frozen=True)
class Turn:
    """A single ply, as produced by the move generator.

    Attributes:
        kind (PieceType): Kind of the moving piece before any promotion.
        from_pos (Position): Origin square.
        to_pos (Position): Destination square.
        capture (Optional[Position]): Square whose occupant is removed;
            ``to_pos`` for ordinary captures, the passed pawn's square for
            en passant.
        additional_move (Optional[Tuple[Position, Position]]): From/to of a
            second piece that relocates in the same ply (the castling rook).
        promote_to (Optional[PieceType]): Kind the piece becomes.
        promote_from (Optional[PieceType]): Kind it had, restored on undo.
    """

    kind: PieceType
    from_pos: Position
    to_pos: Position
    capture: Optional[Position] = None
    additional_move: Optional[Tuple[Position, Position]] = None
    promote_to: Optional[PieceType] = None
    promote_from: Optional[PieceType] = None

    @classmethod
    def basic(cls, kind: PieceType, from_pos: Position, to_pos: Position) -> "Turn":
        return cls(kind, from_pos, to_pos)

    @classmethod
    def with_capture(cls, kind: PieceType, from_pos: Position, to_pos: Position) -> "Turn":
        return cls(kind, from_pos, to_pos, capture=to_pos)

    @classmethod
    def en_passant(
        cls, kind: PieceType, from_pos: Position, to_pos: Position, captured: Position
    ) -> "Turn":
        """Capture on a square other than the destination."""
        return cls(kind, from_pos, to_pos, capture=captured)

    @classmethod
    def compound(
        cls,
        kind: PieceType,
        main: Tuple[Position, Position],
        other: Tuple[Position, Position],
    ) -> "Turn":
        """Move ``main`` and relocate a second piece along ``other``."""
        return cls(kind, main[0], main[1], additional_move=other)

    @classmethod
    def promotion(
        cls,
        kind: PieceType,
        from_pos: Position,
        to_pos: Position,
        promote_to: PieceType,
        capture: bool = False,
    ) -> "Turn":
        return cls(
            kind,
            from_pos,
            to_pos,
            capture=to_pos if capture else None,
            promote_to=promote_to,
            promote_from=kind,
        )

    @property
    def is_capture(self) -> bool:
        return self.capture is not None

    @property
    def is_double_push(self) -> bool:
        return self.kind is PieceType.PAWN and abs(self.to_pos.row - self.from_pos.row) == 2

    def to_uci(self) -> str:
        """Serialize the turn into long algebraic UCI form.

        Returns:
            str: Turn encoded like ``"e2e4"``, ``"e1g1"`` or ``"e7e8q"``.
        """
        promo = self.promote_to.value if self.promote_to is not None else ""
        return self.from_pos.name + self.to_pos.name + promo

    def __str__(self) -> str:
        text = f"{self.kind.name.lower()} from {self.from_pos} to {self.to_pos}"
        if self.additional_move is not None:
            text += f", additionally moving {self.additional_move[0]} to {self.additional_move[1]}"
        if self.capture is not None:
            text += ", capturing" if self.capture == self.to_pos else f", capturing {self.capture}"
        if self.promote_to is not None:
            text += f", promoting to {self.promote_to.name.lower()}"
        return text


def parse_uci(uci: str) -> Tuple[Position, Position, Optional[PieceType]]:
    """Parse a UCI move string into its squares and promotion kind.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Tuple[Position, Position, Optional[PieceType]]: Origin, destination
            and promotion kind, if any.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if not isinstance(uci, str) or len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_pos = Position.from_name(uci[0:2])
    to_pos = Position.from_name(uci[2:4])
    promo: Optional[PieceType] = None
    if len(uci) == 5:
        letter = uci[4].lower()
        if letter not in PROMOTION_LETTERS:
            raise ValueError(f"invalid promotion piece: {letter!r}")
        promo = PieceType(letter)
    return from_pos, to_pos, promo
