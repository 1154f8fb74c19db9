from __future__ import annotations

from typing import Union


class BoardStateError(RuntimeError):
    """A caller or generator broke the board's mutation contract.

    Raised for lifting a piece from an empty square, placing onto an
    occupied square, capturing on an empty square, looking up a king that
    is not on the board, or addressing a square off the board. The board
    may be left half-mutated; callers are not expected to recover.
    """


class PositionError(ValueError):
    """Base class for malformed position descriptions."""


class NotAscii(PositionError):
    def __init__(self) -> None:
        super().__init__("FEN must be ASCII")


class IncorrectSections(PositionError):
    """Wrong number of whitespace-separated FEN fields (expected 6)."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"FEN must have 6 fields, got {count}")


class IncorrectRows(PositionError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"board must have 8 ranks, got {count}")


class IncorrectCols(PositionError):
    def __init__(self, row: int, count: int) -> None:
        self.row = row
        self.count = count
        super().__init__(f"rank {row + 1} must have 8 squares, got {count}")


class InvalidPiece(PositionError):
    def __init__(self, char: object) -> None:
        self.char = char
        super().__init__(f"invalid piece: {char!r}")


class InvalidColor(PositionError):
    def __init__(self, token: object) -> None:
        self.token = token
        super().__init__(f"side to move must be 'w' or 'b', got {token!r}")


class InvalidPosition(PositionError):
    """Malformed or impossible en-passant target square."""

    def __init__(self, token: object, reason: str = "invalid en passant square") -> None:
        self.token = token
        super().__init__(f"{reason}: {token!r}")


class InvalidCastling(PositionError):
    """Unknown or repeated letter in a castling-rights field."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"invalid castling rights: {token!r}")


class IllegalCastling(PositionError):
    """A castling right is claimed but its king or rook is not at home."""

    def __init__(self, right: str) -> None:
        self.right = right
        super().__init__(f"castling right {right!r} without king and rook on home squares")


class InvalidNumber(PositionError):
    def __init__(self, field: str, value: Union[int, str]) -> None:
        self.field = field
        self.value = value
        super().__init__(f"invalid {field}: {value!r}")
