from __future__ import annotations

from enum import Enum


class Color(str, Enum):
    """Side colour, valued by its FEN side-to-move token."""

    WHITE = "w"
    BLACK = "b"

    @property
    def other(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def home_row(self) -> int:
        """Row (0-based) holding this side's back-rank pieces."""
        return 0 if self is Color.WHITE else 7

    @property
    def direction(self) -> int:
        """Row delta of a pawn advance for this side."""
        return 1 if self is Color.WHITE else -1

    @classmethod
    def from_token(cls, token: str) -> "Color":
        """Parse a side-to-move token (``"w"`` or ``"b"``).

        Raises:
            ValueError: If ``token`` names neither side.
        """
        for color in cls:
            if color.value == token:
                return color
        raise ValueError(f"invalid side to move: {token!r}")
