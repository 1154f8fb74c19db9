from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .color import Color
from .errors import BoardStateError


@dataclass(frozen=True)
class Position:
    """A square on the board.

    Attributes:
        index (int): Square index in 0..63; ``a1=0 .. h8=63``, rank-major
            from white's perspective (``row = index // 8``,
            ``col = index % 8``).

    Notes:
        ``offset`` returns ``None`` at the board edge instead of wrapping;
        every move generator relies on that to stay on the board.
    """

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index < 64:
            raise BoardStateError(f"square index out of range: {self.index}")

    @classmethod
    def from_index(cls, index: int) -> "Position":
        if not 0 <= index < 64:
            raise BoardStateError(f"square index out of range: {index}")
        return _SQUARES[index]

    @classmethod
    def from_coords(cls, row: int, col: int) -> "Position":
        """Return the square at zero-based ``(row, col)``.

        Raises:
            BoardStateError: If either coordinate lies outside 0..7.
        """
        if not (0 <= row < 8 and 0 <= col < 8):
            raise BoardStateError(f"coordinates out of range: ({row}, {col})")
        return _SQUARES[row * 8 + col]

    @classmethod
    def from_name(cls, name: str) -> "Position":
        """Parse algebraic notation such as ``"e4"`` (case-insensitive).

        Raises:
            ValueError: If ``name`` is not a valid square.
        """
        s = name.lower() if isinstance(name, str) else ""
        if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
            raise ValueError(f"invalid square: {name!r}")
        return _SQUARES[(int(s[1]) - 1) * 8 + ord(s[0]) - ord("a")]

    @property
    def row(self) -> int:
        return self.index // 8

    @property
    def col(self) -> int:
        return self.index % 8

    @property
    def rank(self) -> int:
        return self.row + 1

    @property
    def file(self) -> str:
        return chr(ord("A") + self.col)

    @property
    def name(self) -> str:
        """Lowercase algebraic name, e.g. ``"e4"``."""
        return chr(ord("a") + self.col) + str(self.rank)

    @property
    def coords(self) -> Tuple[int, int]:
        return self.row, self.col

    @property
    def square_color(self) -> Color:
        # a1 is a dark square
        return Color.BLACK if (self.row + self.col) % 2 == 0 else Color.WHITE

    def offset(self, d_row: int, d_col: int) -> Optional["Position"]:
        row = self.row + d_row
        col = self.col + d_col
        if 0 <= row < 8 and 0 <= col < 8:
            return _SQUARES[row * 8 + col]
        return None

    def __str__(self) -> str:
        return self.name


_SQUARES: Tuple[Position, ...] = tuple(Position(i) for i in range(64))
ALL_SQUARES = _SQUARES
