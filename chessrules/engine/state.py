from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from .color import Color

if TYPE_CHECKING:
    from .board import Board


class WinReason(str, Enum):
    CHECKMATE = "checkmate"
    # asserted by callers, never derived from the board
    TIME_OUT = "time_out"
    RESIGNED = "resigned"


class DrawReason(str, Enum):
    THREEFOLD_REPETITION = "threefold_repetition"
    FIFTY_MOVE_RULE = "fifty_move_rule"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    # asserted by callers, never derived from the board
    MUTUAL_AGREEMENT = "mutual_agreement"
    TIME_OUT = "time_out"


@dataclass(frozen=True)
class Playing:
    status = "playing"

    @property
    def winner(self) -> Optional[Color]:
        return None

    @property
    def reason(self) -> None:
        return None


@dataclass(frozen=True)
class Win:
    color: Color
    reason: WinReason
    status = "win"

    @property
    def winner(self) -> Optional[Color]:
        return self.color


@dataclass(frozen=True)
class Draw:
    reason: DrawReason
    status = "draw"

    @property
    def winner(self) -> Optional[Color]:
        return None


GameState = Union[Playing, Win, Draw]

PLAYING = Playing()


def get_game_state(board: "Board") -> GameState:
    """Classify the position on ``board``.

    Checked in order: checkmate, stalemate, fifty-move rule, threefold
    repetition, insufficient material. Nothing is cached; every call
    inspects the board afresh.
    """
    in_check = board.is_check()
    has_moves = bool(board.get_moves())
    if not has_moves:
        if in_check:
            return Win(board.side_to_move.other, WinReason.CHECKMATE)
        return Draw(DrawReason.STALEMATE)
    if board.is_fifty_move_rule():
        return Draw(DrawReason.FIFTY_MOVE_RULE)
    if board.is_threefold_repetition():
        return Draw(DrawReason.THREEFOLD_REPETITION)
    if board.is_insufficient_material():
        return Draw(DrawReason.INSUFFICIENT_MATERIAL)
    return PLAYING
